"""Channel messaging -- bot handler, commands, cards, and formatting."""

__all__ = [
    "Bot",
    "CommandDispatcher",
    "TurnResponder",
    "answer_card",
    "render_fallback",
    "render_plain_reply",
]
