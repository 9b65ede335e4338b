from __future__ import annotations

import logging
from typing import Callable, List, Optional

from core.cards import HAND_SIZE, EmptyDeckError
from core.game import GameEngine
from core.models import MAX_PLAYERS, MIN_PLAYERS, GameStage, Hand, TableConfig
from practice.bots import draw_strategy

LOGGER = logging.getLogger("draw_console")

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def parse_player_count(text: str) -> Optional[int]:
    try:
        value = int(text.strip())
    except ValueError:
        return None
    if MIN_PLAYERS <= value <= MAX_PLAYERS:
        return value
    return None


def parse_yes(text: str) -> bool:
    return text.strip().upper() in ("Y", "YES")


def parse_draw_input(text: str) -> List[int]:
    """Comma separated card numbers; anything that is not an integer is skipped."""
    slots: List[int] = []
    for item in text.split(","):
        try:
            value = int(item.strip())
        except ValueError:
            continue
        if len(slots) < HAND_SIZE:
            slots.append(value)
    return slots


class ConsoleGame:
    """Plays one round of five-card draw on a terminal."""

    def __init__(
        self,
        config: Optional[TableConfig] = None,
        input_fn: InputFn = input,
        output_fn: OutputFn = print,
        seed: Optional[int] = None,
        shuffles: int = 3,
    ) -> None:
        self.config = config
        self.shuffles = shuffles
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.seed = seed
        self.engine: Optional[GameEngine] = None

    def run(self) -> Hand:
        self.output_fn("Welcome to Poker!\n")
        if self.config is None:
            self.config = TableConfig(
                players=self._ask_players(),
                shuffles=self.shuffles,
                computer_player=self._ask_computer(),
            )
        self.engine = GameEngine(self.config)

        stage = GameStage.DEAL
        winner: Optional[Hand] = None
        while stage != GameStage.END:
            if stage == GameStage.DEAL:
                self._deal()
                stage = GameStage.DRAW
            elif stage == GameStage.DRAW:
                self._draw()
                stage = GameStage.SCORE
            elif stage == GameStage.SCORE:
                winner = self._score()
                stage = GameStage.END

        self.output_fn("\nThanks for playing!")
        assert winner is not None
        return winner

    # Prompts ---------------------------------------------------------

    def _ask_players(self) -> int:
        while True:
            count = parse_player_count(self.input_fn(f"Please input number of players ({MIN_PLAYERS}-{MAX_PLAYERS}): "))
            self.output_fn("")
            if count is not None:
                return count

    def _ask_computer(self) -> bool:
        return parse_yes(self.input_fn("Computer is player? "))

    # Stages ----------------------------------------------------------

    def _deal(self) -> None:
        assert self.engine is not None
        ctx = self.engine.start_round(seed=self.seed)
        LOGGER.info("Round %s dealt to %s players", ctx.round_id, len(ctx.hands))
        self.output_fn("\nAll hands are dealt\n")
        for hand in ctx.hands:
            self._show_hand(hand)

    def _draw(self) -> None:
        assert self.engine is not None and self.engine.round is not None
        self.output_fn("\nNow time to choose draw\n")
        for hand in self.engine.round.hands:
            self._show_hand(hand)
            if self._is_computer(hand.player):
                slots = draw_strategy(hand.cards)[: self.engine.deck_remaining()]
                self.engine.draw(hand.player, slots)
                self.output_fn(f"Computer draws {len(slots)} card(s)\n")
                continue
            while True:
                self.output_fn("\nEnter the cards you would like to use in the draw")
                slots = parse_draw_input(
                    self.input_fn("(card numbers separated by commas, hit enter for none): ")
                )
                try:
                    discarded = self.engine.draw(hand.player, slots)
                except EmptyDeckError as exc:
                    LOGGER.warning("Draw refused for player %s: %s", hand.player, exc)
                    self.output_fn(f"Only {self.engine.deck_remaining()} card(s) left in the deck, choose fewer")
                    continue
                LOGGER.info("Player %s drew %s card(s)", hand.player, len(discarded))
                break
            self.output_fn("")

    def _score(self) -> Hand:
        assert self.engine is not None and self.engine.round is not None
        ordered = self.engine.score()
        self.output_fn("\nFinal hands of players\n")
        for hand in self.engine.round.hands:
            self._show_hand(hand)
            assert hand.high_card is not None
            self.output_fn(f"High Card: {hand.high_card.display}")
            self.output_fn(f"RANK: {hand.rank.display}\n")
        winner = ordered[0]
        assert winner.high_card is not None
        self.output_fn(f"Winner is player {winner.player}")
        self.output_fn(f"with a rank of: {winner.rank.display}, high card: {winner.high_card.display}")
        LOGGER.info("Player %s wins with %s", winner.player, winner.rank.display)
        return winner

    def _show_hand(self, hand: Hand) -> None:
        label = " (computer)" if self._is_computer(hand.player) else ""
        self.output_fn(f"Player {hand.player}{label} hand:")
        self.output_fn("\n".join(hand.display_lines()) + "\n")

    def _is_computer(self, player: int) -> bool:
        assert self.config is not None
        return self.config.computer_player and player == self.config.players
