from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .cards import HAND_SIZE, Card, Deck, EmptyDeckError, cards_to_labels
from .evaluator import order_hands, score_hand
from .models import MAX_PLAYERS, MIN_PLAYERS, GameStage, Hand, HandRank, TableConfig

# GameEngine keeps one round of five-card draw in memory. No I/O lives here,
# only dealing, the draw exchange and scoring.


@dataclass
class RoundContext:
    round_id: str
    seed: int
    deck: Deck
    hands: List[Hand]
    stage: GameStage = GameStage.DEAL
    discards: List[Card] = field(default_factory=list)
    drawn: Dict[int, int] = field(default_factory=dict)
    ordered: List[Hand] = field(default_factory=list)
    winner: Optional[Hand] = None


def describe_rank(rank: HandRank) -> str:
    return rank.name.lower()


def select_draw_slots(slots: Iterable[int]) -> List[int]:
    """Normalize requested draw slots.

    Only the first five entries count; entries outside 1..5 are ignored and a
    repeated slot is drawn once.
    """
    selected: List[int] = []
    for slot in list(slots)[:HAND_SIZE]:
        if 1 <= slot <= HAND_SIZE and slot not in selected:
            selected.append(slot)
    return selected


class GameEngine:
    """Five-card draw engine for a single table of 2-7 players."""

    def __init__(self, config: TableConfig) -> None:
        self.config = config
        self.round_counter = 0
        self.round: Optional[RoundContext] = None

    # Round lifecycle -------------------------------------------------

    def start_round(self, seed: Optional[int] = None) -> RoundContext:
        if self.round is not None and self.round.stage != GameStage.END:
            raise RuntimeError("Round already in progress")
        players = self.config.players
        if not MIN_PLAYERS <= players <= MAX_PLAYERS:
            raise ValueError(f"Player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}")

        if seed is None:
            seed = int(time.time() * 1000) & 0xFFFFFFFF
        deck = Deck(random.Random(seed))
        deck.shuffle(self.config.shuffles)

        round_id = f"R-{time.strftime('%Y%m%d')}-{self.round_counter:05d}"
        self.round_counter += 1

        ctx = RoundContext(
            round_id=round_id,
            seed=seed,
            deck=deck,
            hands=[Hand(player=number) for number in range(1, players + 1)],
        )
        self._deal(ctx)
        ctx.stage = GameStage.DRAW
        self.round = ctx
        return ctx

    def _deal(self, ctx: RoundContext) -> None:
        # One card to each player per pass, like a dealer going round the table.
        for _ in range(HAND_SIZE):
            for hand in ctx.hands:
                hand.cards.append(ctx.deck.deal_one())

    def reset(self) -> None:
        self.round = None

    # Draw stage ------------------------------------------------------

    def hand_for(self, player: int) -> Hand:
        ctx = self._require_round()
        if not 1 <= player <= len(ctx.hands):
            raise RuntimeError(f"Unknown player: {player}")
        return ctx.hands[player - 1]

    def pending_draws(self) -> List[int]:
        ctx = self._require_round()
        if ctx.stage != GameStage.DRAW:
            return []
        return [hand.player for hand in ctx.hands if hand.player not in ctx.drawn]

    def deck_remaining(self) -> int:
        return self._require_round().deck.remaining

    def draw(self, player: int, slots: Iterable[int]) -> List[Card]:
        """Replace the chosen cards of ``player``'s hand; returns the discards."""
        ctx = self._require_round()
        if ctx.stage != GameStage.DRAW:
            raise RuntimeError("Not in draw stage")
        hand = self.hand_for(player)
        if player in ctx.drawn:
            raise RuntimeError(f"Player {player} already drew")

        selected = select_draw_slots(slots)
        if len(selected) > ctx.deck.remaining:
            raise EmptyDeckError(
                f"Only {ctx.deck.remaining} cards left in deck, {len(selected)} requested"
            )

        discarded = [ctx.deck.draw_replace(hand, slot) for slot in selected]
        ctx.discards.extend(discarded)
        ctx.drawn[player] = len(discarded)
        return discarded

    def finish_draw(self) -> List[int]:
        """Players who have not drawn yet stand pat. Returns those players."""
        ctx = self._require_round()
        if ctx.stage != GameStage.DRAW:
            raise RuntimeError("Not in draw stage")
        standing = self.pending_draws()
        for player in standing:
            ctx.drawn[player] = 0
        return standing

    def is_draw_complete(self) -> bool:
        ctx = self._require_round()
        return ctx.stage == GameStage.DRAW and not self.pending_draws()

    # Score stage -----------------------------------------------------

    def score(self) -> List[Hand]:
        ctx = self._require_round()
        if ctx.stage != GameStage.DRAW:
            raise RuntimeError("Not in draw stage")
        if self.pending_draws():
            raise RuntimeError("Players still drawing: " + ", ".join(map(str, self.pending_draws())))

        ctx.stage = GameStage.SCORE
        for hand in ctx.hands:
            score_hand(hand)
        ctx.ordered = order_hands(ctx.hands)
        ctx.winner = ctx.ordered[0]
        ctx.stage = GameStage.END
        return list(ctx.ordered)

    def is_round_complete(self) -> bool:
        return bool(self.round and self.round.stage == GameStage.END)

    # Payloads --------------------------------------------------------

    def start_round_payload(self) -> Dict[str, object]:
        ctx = self._require_round()
        return {
            "round_id": ctx.round_id,
            "players": len(ctx.hands),
            "deck_remaining": ctx.deck.remaining,
        }

    def hand_payload(self, player: int) -> Dict[str, object]:
        ctx = self._require_round()
        hand = self.hand_for(player)
        return {
            "round_id": ctx.round_id,
            "seat": player,
            "cards": cards_to_labels(hand.cards),
        }

    def showdown_payload(self) -> Dict[str, object]:
        ctx = self._require_round()
        if ctx.stage != GameStage.END or ctx.winner is None:
            raise RuntimeError("Round not scored")
        return {
            "round_id": ctx.round_id,
            "hands": [
                {
                    "seat": hand.player,
                    "cards": cards_to_labels(hand.cards),
                    "rank": describe_rank(hand.rank),
                    "high_card": hand.high_card.symbol if hand.high_card else None,
                }
                for hand in ctx.ordered
            ],
            "winner": ctx.winner.player,
        }

    def _require_round(self) -> RoundContext:
        if self.round is None:
            raise RuntimeError("Round not active")
        return self.round
