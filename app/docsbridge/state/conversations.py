"""Per-user conversation ids for the DocsBot chat-agent API.

Each chat user gets one opaque conversation id so DocsBot can thread their
follow-up questions.  Ids are created on first contact and forgotten when the
user starts a new topic.  The map is an LRU bounded by
``CONVERSATION_CACHE_SIZE`` (``0`` disables the bound).
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict

from ..config import settings
from ..util.singletons import register_singleton

logger = logging.getLogger(__name__)


class ConversationTracker:
    """Maps a chat user id to a stable DocsBot conversation id."""

    def __init__(self, max_users: int = 10_000) -> None:
        self._max_users = max_users
        self._lock = threading.Lock()
        self._ids: OrderedDict[str, str] = OrderedDict()

    def get_or_create_id(self, user_id: str) -> str:
        with self._lock:
            convo_id = self._ids.get(user_id)
            if convo_id is not None:
                self._ids.move_to_end(user_id)
                return convo_id
            convo_id = str(uuid.uuid4())
            self._ids[user_id] = convo_id
            if self._max_users and len(self._ids) > self._max_users:
                evicted, _ = self._ids.popitem(last=False)
                logger.debug("Evicted conversation for user %s (cache full)", evicted)
            return convo_id

    def reset(self, user_id: str) -> bool:
        """Forget *user_id*'s conversation.  Returns ``True`` if one existed."""
        with self._lock:
            return self._ids.pop(user_id, None) is not None

    def peek(self, user_id: str) -> str | None:
        with self._lock:
            return self._ids.get(user_id)

    @property
    def count(self) -> int:
        return len(self._ids)


_tracker: ConversationTracker | None = None


def get_conversation_tracker() -> ConversationTracker:
    global _tracker
    if _tracker is None:
        _tracker = ConversationTracker(max_users=settings.cfg.conversation_cache_size)
    return _tracker


def _reset_tracker() -> None:
    global _tracker
    _tracker = None


register_singleton("conversation_tracker", _reset_tracker)
