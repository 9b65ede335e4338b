from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .models import Hand

HAND_SIZE = 5


class Face(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def symbol(self) -> str:
        return FACE_SYMBOLS[self.value - 2]

    @property
    def display(self) -> str:
        return self.name.capitalize()


class Suit(str, Enum):
    CLUB = "c"
    DIAMOND = "d"
    HEART = "h"
    SPADE = "s"

    @property
    def display(self) -> str:
        return self.name.capitalize()


FACE_SYMBOLS = "23456789TJQKA"


class EmptyDeckError(ValueError):
    """Raised when a deal or draw needs more cards than the deck holds."""


class InvalidSlotError(ValueError):
    """Raised when a draw targets a hand slot outside 1..5."""


@dataclass(frozen=True)
class Card:
    face: Face
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.face, Face):
            raise ValueError(f"Invalid face: {self.face}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.face.symbol}{self.suit.value}"

    @property
    def name(self) -> str:
        return f"{self.face.display} of {self.suit.display}s"


class Deck:
    """52 unique cards, consumed from the front."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        # Suit-major, face-minor so an unshuffled deck is predictable.
        self._cards: List[Card] = [Card(face, suit) for suit in Suit for face in Face]

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def remaining(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> Tuple[Card, ...]:
        return tuple(self._cards)

    def shuffle(self, times: int = 1) -> None:
        if times < 0:
            raise ValueError("Shuffle count cannot be negative")
        for _ in range(times):
            self._rng.shuffle(self._cards)

    def deal_one(self) -> Card:
        if not self._cards:
            raise EmptyDeckError("Not enough cards left in deck")
        return self._cards.pop(0)

    def draw_replace(self, hand: "Hand", slot: int) -> Card:
        """Swap the card at 1-based ``slot`` for the top card; returns the discard."""
        if not 1 <= slot <= HAND_SIZE:
            raise InvalidSlotError(f"Invalid slot: {slot}")
        if slot > len(hand.cards):
            raise InvalidSlotError(f"Hand has no card in slot {slot}")
        drawn = self.deal_one()
        discarded = hand.cards[slot - 1]
        hand.cards[slot - 1] = drawn
        return discarded


def build_deck(seed: Optional[int] = None) -> Deck:
    deck = Deck(random.Random(seed))
    deck.shuffle()
    return deck


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    face_symbol, suit_symbol = label[0].upper(), label[1].lower()
    if face_symbol not in FACE_SYMBOLS:
        raise ValueError(f"Invalid face: {label[0]}")
    try:
        suit = Suit(suit_symbol)
    except ValueError:
        raise ValueError(f"Invalid suit: {label[1]}") from None
    return Card(Face(FACE_SYMBOLS.index(face_symbol) + 2), suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
