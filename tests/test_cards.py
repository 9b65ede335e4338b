import random

import pytest

from core.cards import Card, Deck, EmptyDeckError, Face, InvalidSlotError, Suit, build_deck, parse_label

from .helpers import make_hand


def test_new_deck_has_52_unique_cards_in_suit_major_order():
    deck = Deck()
    cards = deck.cards
    assert len(cards) == 52
    assert len(set(cards)) == 52
    assert cards[0] == Card(Face.TWO, Suit.CLUB)
    assert cards[12] == Card(Face.ACE, Suit.CLUB)
    assert cards[13] == Card(Face.TWO, Suit.DIAMOND)
    assert cards[-1] == Card(Face.ACE, Suit.SPADE)


def test_shuffle_keeps_same_cards_and_changes_order():
    deck = Deck(random.Random(7))
    before = deck.cards
    deck.shuffle(3)
    assert set(deck.cards) == set(before)
    assert len(deck) == 52
    assert deck.cards != before


def test_seeded_shuffles_are_reproducible():
    deck_a = Deck(random.Random(99))
    deck_b = Deck(random.Random(99))
    deck_a.shuffle(2)
    deck_b.shuffle(2)
    assert deck_a.cards == deck_b.cards


def test_shuffle_rejects_negative_count():
    with pytest.raises(ValueError, match="cannot be negative"):
        Deck().shuffle(-1)


def test_deal_one_takes_front_card():
    deck = build_deck(seed=5)
    top = deck.cards[0]
    card = deck.deal_one()
    assert card == top
    assert len(deck) == 51
    assert card not in deck.cards


def test_dealing_whole_deck_then_one_more_fails():
    deck = Deck()
    sink = [deck.deal_one() for _ in range(52)]
    assert len(set(sink)) == 52
    assert deck.remaining == 0
    with pytest.raises(EmptyDeckError, match="Not enough cards"):
        deck.deal_one()


def test_draw_replace_swaps_slot_and_returns_discard():
    deck = Deck()
    hand = make_hand(["Ah", "Kd", "Qs", "Jc", "9h"])
    discarded = deck.draw_replace(hand, 2)
    assert discarded == parse_label("Kd")
    assert hand.cards[1] == Card(Face.TWO, Suit.CLUB)
    assert hand.cards[0] == parse_label("Ah")
    assert len(deck) == 51


@pytest.mark.parametrize("slot", [0, 6, -1])
def test_draw_replace_rejects_invalid_slot_without_touching_deck(slot):
    deck = Deck()
    hand = make_hand(["Ah", "Kd", "Qs", "Jc", "9h"])
    with pytest.raises(InvalidSlotError):
        deck.draw_replace(hand, slot)
    assert len(deck) == 52


def test_draw_replace_on_empty_deck_keeps_hand():
    deck = Deck()
    for _ in range(52):
        deck.deal_one()
    hand = make_hand(["Ah", "Kd", "Qs", "Jc", "9h"])
    with pytest.raises(EmptyDeckError):
        deck.draw_replace(hand, 1)
    assert hand.cards[0] == parse_label("Ah")


def test_card_labels_and_names():
    card = Card(Face.TEN, Suit.HEART)
    assert card.label == "Th"
    assert card.name == "Ten of Hearts"
    assert parse_label("th") == card


def test_card_validation_rejects_invalid_values():
    with pytest.raises(ValueError, match="Invalid face"):
        parse_label("1h")
    with pytest.raises(ValueError, match="Invalid suit"):
        parse_label("Ax")
    with pytest.raises(ValueError, match="Invalid card label"):
        parse_label("10h")
    with pytest.raises(ValueError, match="Invalid face"):
        Card(14, Suit.HEART)  # type: ignore[arg-type]
