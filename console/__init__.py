"""Terminal front end for a single five-card draw round."""

from .game import ConsoleGame, parse_draw_input, parse_player_count, parse_yes

__all__ = ["ConsoleGame", "parse_draw_input", "parse_player_count", "parse_yes"]
