"""Process-local state."""

from .conversations import ConversationTracker, get_conversation_tracker

__all__ = ["ConversationTracker", "get_conversation_tracker"]
