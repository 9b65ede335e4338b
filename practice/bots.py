from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from core.cards import HAND_SIZE, Card, Face
from core.evaluator import rank_hand
from core.models import HandRank

# Straight or better is already a complete five-card hand.
_STAND_PAT = HandRank.STRAIGHT


def _slots_except(keep: Sequence[int]) -> List[int]:
    return [slot for slot in range(1, HAND_SIZE + 1) if slot not in keep]


def _four_to_flush(cards: Sequence[Card]) -> List[int]:
    suit, count = Counter(card.suit for card in cards).most_common(1)[0]
    if count != HAND_SIZE - 1:
        return []
    return [slot for slot, card in enumerate(cards, start=1) if card.suit == suit]


def draw_strategy(cards: Sequence[Card]) -> List[int]:
    """House draw: returns the 1-based slots the computer player discards."""
    rank, _ = rank_hand(cards)
    if rank >= _STAND_PAT:
        return []

    counts = Counter(card.face for card in cards)
    grouped = [slot for slot, card in enumerate(cards, start=1) if counts[card.face] >= 2]
    if grouped:
        return _slots_except(grouped)

    suited = _four_to_flush(cards)
    if suited:
        return _slots_except(suited)

    by_face = sorted(range(1, HAND_SIZE + 1), key=lambda slot: cards[slot - 1].face, reverse=True)
    high_two = by_face[:2]
    if all(cards[slot - 1].face >= Face.JACK for slot in high_two):
        return _slots_except(high_two)
    return _slots_except(by_face[:1])
