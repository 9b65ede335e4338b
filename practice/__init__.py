"""House players that make their own draw decisions."""

from .bots import draw_strategy

__all__ = ["draw_strategy"]
