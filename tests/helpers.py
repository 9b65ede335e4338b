from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from core.cards import parse_cards
from core.game import GameEngine, RoundContext
from core.models import Hand, TableConfig


def create_engine(*, players: int = 4, shuffles: int = 1, computer_player: bool = False) -> GameEngine:
    """Instantiate a game engine for a table of ``players``."""
    return GameEngine(TableConfig(players=players, shuffles=shuffles, computer_player=computer_player))


def start_round(engine: GameEngine, seed: int = 42) -> RoundContext:
    ctx = engine.start_round(seed=seed)
    assert ctx is not None
    return ctx


def make_hand(labels: Sequence[str], player: int = 1) -> Hand:
    return Hand(player=player, cards=parse_cards(labels))


def draw_all(engine: GameEngine, slots: Optional[Iterable[int]] = None) -> None:
    """Every pending player draws the same slots (stand pat by default)."""
    chosen: List[int] = list(slots or [])
    for player in engine.pending_draws():
        engine.draw(player, chosen)
