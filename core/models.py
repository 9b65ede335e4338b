from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from .cards import Card, Face

MIN_PLAYERS = 2
MAX_PLAYERS = 7


class GameStage(str, Enum):
    DEAL = "DEAL"
    DRAW = "DRAW"
    SCORE = "SCORE"
    END = "END"


class HandRank(IntEnum):
    UNRANKED = 0
    NOTHING = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def display(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass
class TableConfig:
    players: int = 2
    shuffles: int = 3
    computer_player: bool = False
    move_time_ms: int = 30_000
    rounds: int = 1


@dataclass
class Hand:
    player: int
    cards: List[Card] = field(default_factory=list)
    rank: HandRank = HandRank.UNRANKED
    high_card: Optional[Face] = None

    @property
    def is_ranked(self) -> bool:
        return self.rank != HandRank.UNRANKED

    def display_lines(self) -> List[str]:
        return [f"Card {idx}: {card.name}" for idx, card in enumerate(self.cards, start=1)]
