"""Driver for running a game without a front end.

Each hand cycle is: optionally discard some cards and redraw, then
optionally play some cards. Indices refer to the main hand as it stands
when that step begins.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from balatro_jack.game import ActionResult, Game
from balatro_jack.state import GameConfig
from balatro_jack.ui import GameUI

logger = logging.getLogger(__name__)


@dataclass
class HandCycleStatus:
    """Where the game stands after one hand cycle."""

    is_complete: bool
    ante: int
    blind: int
    round_score: float
    hands_played: int
    discards_used: int
    cards_in_hand: int
    discard: ActionResult | None = None
    play: ActionResult | None = None


class GameLoop:
    """Runs one game through a sequence of hand cycles."""

    def __init__(
        self,
        config: GameConfig | None = None,
        ui: GameUI | None = None,
        seed: int | None = None,
    ):
        self.game = Game(ui=ui, config=config, seed=seed)
        self.is_running = False

    def start(self) -> Game:
        """Start a new game and deal the first blind."""
        logger.info("Starting new game")
        self.game.start_game()
        self.is_running = True
        return self.game

    def _select(self, indices: Iterable[int]) -> None:
        main = self.game.state.hands.main
        for index in sorted(set(indices)):
            self.game.select_card(main, index)

    def execute_hand_cycle(
        self,
        discard_indices: Iterable[int] = (),
        play_indices: Iterable[int] = (),
    ) -> HandCycleStatus:
        """Discard then play, redrawing after the discard."""
        game = self.game
        state = game.state
        discard_result = None
        play_result = None

        discard_indices = list(discard_indices)
        play_indices = list(play_indices)

        if discard_indices and not game.is_game_over:
            self._select(discard_indices)
            discard_result = game.discard_cards()
            if discard_result.success:
                game.deal_cards()
                if len(state.hands.main) == 0:
                    game.declare_loss("No cards left in hand. Game Over!")
            else:
                logger.info(f"Discard rejected: {discard_result.message}")
                game.clear_selection()

        if play_indices and not game.is_game_over:
            self._select(play_indices)
            play_result = game.play_cards()
            if not play_result.success:
                logger.info(f"Play rejected: {play_result.message}")
                game.clear_selection()

        if game.is_game_over:
            self.is_running = False

        return HandCycleStatus(
            is_complete=game.is_game_over,
            ante=state.ante,
            blind=state.blind,
            round_score=state.round_score,
            hands_played=state.hands_played,
            discards_used=state.discards_used,
            cards_in_hand=len(state.hands.main),
            discard=discard_result,
            play=play_result,
        )
