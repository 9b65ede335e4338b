from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .cards import HAND_SIZE, Card, Face
from .models import Hand, HandRank

WHEEL = (Face.TWO, Face.THREE, Face.FOUR, Face.FIVE, Face.ACE)


class HandScore(NamedTuple):
    rank: HandRank
    high_card: Face


def rank_hand(cards: Sequence[Card]) -> HandScore:
    """Classify exactly five cards. Input order does not matter.

    Categories are tried strongest first and the first match wins, so a full
    house is never also reported as three of a kind or a pair.
    """
    if len(cards) != HAND_SIZE:
        raise ValueError(f"A hand needs exactly {HAND_SIZE} cards, got {len(cards)}")
    ordered = sorted(cards, key=lambda card: card.face)
    for check in _CHECKS:
        score = check(ordered)
        if score is not None:
            return score
    return HandScore(HandRank.NOTHING, ordered[-1].face)


def score_hand(hand: Hand) -> HandScore:
    """Rank ``hand`` from its current cards and store the result on it."""
    score = rank_hand(hand.cards)
    hand.rank, hand.high_card = score
    return score


# Comparator ---------------------------------------------------------------


def hand_sort_key(hand: Hand) -> Tuple[int, int, int]:
    if not hand.is_ranked or hand.high_card is None:
        raise ValueError(f"Hand for player {hand.player} is not ranked")
    return (-hand.rank, -hand.high_card, hand.player)


def compare_hands(hand_a: Hand, hand_b: Hand) -> int:
    """Negative when ``hand_a`` wins, positive when ``hand_b`` wins.

    Ties on category and high card go to the lower player number; remaining
    cards are never consulted.
    """
    key_a = hand_sort_key(hand_a)
    key_b = hand_sort_key(hand_b)
    return (key_a > key_b) - (key_a < key_b)


def order_hands(hands: Iterable[Hand]) -> List[Hand]:
    return sorted(hands, key=hand_sort_key)


def winning_hand(hands: Iterable[Hand]) -> Hand:
    ordered = order_hands(hands)
    if not ordered:
        raise ValueError("No hands to compare")
    return ordered[0]


# Category checks ----------------------------------------------------------
# Each check receives cards sorted ascending by face.


def _faces(cards: Sequence[Card]) -> List[Face]:
    return [card.face for card in cards]


def _is_flush(cards: Sequence[Card]) -> bool:
    return len({card.suit for card in cards}) == 1


def _is_consecutive(cards: Sequence[Card]) -> bool:
    faces = _faces(cards)
    return all(upper - lower == 1 for lower, upper in zip(faces, faces[1:]))


def _is_wheel(cards: Sequence[Card]) -> bool:
    return tuple(_faces(cards)) == WHEEL


def _grouped_faces(cards: Sequence[Card], minimum: int) -> List[Face]:
    counts = Counter(_faces(cards))
    return sorted(face for face, count in counts.items() if count >= minimum)


def _check_straight_flush(cards: Sequence[Card]) -> Optional[HandScore]:
    if not _is_flush(cards):
        return None
    if _is_wheel(cards):
        return HandScore(HandRank.STRAIGHT_FLUSH, Face.FIVE)
    if not _is_consecutive(cards):
        return None
    top = cards[-1].face
    if top == Face.ACE:
        return HandScore(HandRank.ROYAL_FLUSH, Face.ACE)
    return HandScore(HandRank.STRAIGHT_FLUSH, top)


def _check_four_of_a_kind(cards: Sequence[Card]) -> Optional[HandScore]:
    quads = _grouped_faces(cards, 4)
    return HandScore(HandRank.FOUR_OF_A_KIND, quads[-1]) if quads else None


def _check_full_house(cards: Sequence[Card]) -> Optional[HandScore]:
    counts = Counter(_faces(cards))
    triples = [face for face, count in counts.items() if count == 3]
    pairs = [face for face, count in counts.items() if count == 2]
    if len(triples) == 1 and len(pairs) == 1:
        return HandScore(HandRank.FULL_HOUSE, triples[0])
    return None


def _check_flush(cards: Sequence[Card]) -> Optional[HandScore]:
    return HandScore(HandRank.FLUSH, cards[-1].face) if _is_flush(cards) else None


def _check_straight(cards: Sequence[Card]) -> Optional[HandScore]:
    if _is_wheel(cards):
        return HandScore(HandRank.STRAIGHT, Face.FIVE)
    if _is_consecutive(cards):
        return HandScore(HandRank.STRAIGHT, cards[-1].face)
    return None


def _check_three_of_a_kind(cards: Sequence[Card]) -> Optional[HandScore]:
    trips = _grouped_faces(cards, 3)
    return HandScore(HandRank.THREE_OF_A_KIND, trips[-1]) if trips else None


def _check_two_pair(cards: Sequence[Card]) -> Optional[HandScore]:
    pairs = _grouped_faces(cards, 2)
    return HandScore(HandRank.TWO_PAIR, pairs[-1]) if len(pairs) >= 2 else None


def _check_pair(cards: Sequence[Card]) -> Optional[HandScore]:
    pairs = _grouped_faces(cards, 2)
    return HandScore(HandRank.PAIR, pairs[-1]) if pairs else None


_CHECKS: Tuple[Callable[[Sequence[Card]], Optional[HandScore]], ...] = (
    _check_straight_flush,
    _check_four_of_a_kind,
    _check_full_house,
    _check_flush,
    _check_straight,
    _check_three_of_a_kind,
    _check_two_pair,
    _check_pair,
)
