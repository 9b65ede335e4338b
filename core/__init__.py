"""Five-card draw primitives shared by the console game and the host server."""

from .cards import Card, Deck, EmptyDeckError, Face, InvalidSlotError, Suit, build_deck, parse_cards
from .evaluator import HandScore, compare_hands, order_hands, rank_hand, score_hand, winning_hand
from .game import GameEngine, RoundContext
from .models import GameStage, Hand, HandRank, TableConfig

__all__ = [
    "Card",
    "Deck",
    "EmptyDeckError",
    "Face",
    "InvalidSlotError",
    "Suit",
    "build_deck",
    "parse_cards",
    "HandScore",
    "compare_hands",
    "order_hands",
    "rank_hand",
    "score_hand",
    "winning_hand",
    "GameEngine",
    "RoundContext",
    "GameStage",
    "Hand",
    "HandRank",
    "TableConfig",
]
