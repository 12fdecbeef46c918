"""Game orchestrator.

Owns the game state (deck, four hands, counters) and exposes the player
actions: deal, select, discard, play. Playing hands the cards to the
scoring engine and then settles the blind:

- Target reached: pay out and move to the next blind
- Out of hands below target: game over
- Otherwise: redeal and keep playing

Every action runs to completion before returning. Rejected actions are
logged and reported through the return value without touching state.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Any

from balatro_jack.deck import Deck
from balatro_jack.hand import Hand
from balatro_jack.jokers import Joker, JokerHook, create_joker, invoke_at
from balatro_jack.models import Card, create_standard_deck
from balatro_jack.scoring import ScoreResult, ScoringEngine
from balatro_jack.state import BLIND_NAMES, GameConfig, GamePhase, GameState
from balatro_jack.storage import GameStorage, restore_state, snapshot_state
from balatro_jack.ui import (
    DECK,
    DISCARD_PILE,
    HAND_JOKER,
    HAND_MAIN,
    HAND_PLAYED,
    OFFSCREEN,
    GameUI,
    NullUI,
)

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Result of performing an action."""

    success: bool
    message: str
    result: ScoreResult | None = None
    blind_beaten: bool = False
    game_over: bool = False
    won: bool = False


class Game:
    """A single game session.

    Args:
        ui: Presentation layer to notify (defaults to NullUI)
        config: Starting values (defaults to GameConfig())
        storage: Save slot and lifetime stats (defaults to in-memory)
        seed: Seed for deck shuffles
    """

    def __init__(
        self,
        ui: GameUI | None = None,
        config: GameConfig | None = None,
        storage: GameStorage | None = None,
        seed: int | None = None,
    ):
        self.ui: GameUI = ui if ui is not None else NullUI()
        self.config = config if config is not None else GameConfig()
        self.storage = storage if storage is not None else GameStorage()
        self.rng = random.Random(seed)
        self.scoring = ScoringEngine(self)
        self.reset_game()

    # =========================================================================
    # Setup
    # =========================================================================

    def reset_game(self, seed: int | None = None) -> None:
        """Start over with a fresh 52-card deck and empty hands."""
        if seed is not None:
            self.rng = random.Random(seed)

        deck = Deck(create_standard_deck(), self.rng)
        self.state = GameState.from_config(self.config, deck)

        self.storage.update_stat("games_started")
        self.ui.new_game()
        self.ui.update_scoreboard(self.scoreboard())

    def start_game(self, seed: int | None = None) -> None:
        """Reset and deal the first blind."""
        self.reset_game(seed)
        self.start_blind()

    def start_blind(self) -> None:
        """Deal the opening hand of the current blind."""
        self.scoring.fire(JokerHook.ON_BLIND_START)
        self.deal_cards()
        self.scoring.fire(JokerHook.ON_ROUND_START)
        self.ui.enable_play()

    def scoreboard(self) -> dict[str, Any]:
        """Every scoreboard value at once."""
        state = self.state
        return {
            "ante": state.ante,
            "blindName": state.blind_name,
            "minScore": state.min_score,
            "roundScore": state.round_score,
            "handScore": state.hand_score,
            "handMult": state.hand_mult,
            "money": state.money,
            "handsRemaining": state.hands_remaining,
            "discardsRemaining": state.discards_remaining,
        }

    # =========================================================================
    # Deck Management
    # =========================================================================

    def draw_to_main_hand(self) -> Card | None:
        """Draw one card into the main hand. None if the deck is empty."""
        card = self.state.deck.draw_card()
        if card is None:
            return None

        self.state.hands.main.add_card(card)
        self.ui.create_card_visual(card)
        self.ui.move_cards([card], DECK, HAND_MAIN)
        self.scoring.fire(JokerHook.ON_DRAW, card=card)
        return card

    def deal_cards(self) -> int:
        """Draw until the main hand is full or the deck runs out.

        Returns:
            Number of cards drawn
        """
        drawn = 0
        while len(self.state.hands.main) < self.state.hand_size:
            if self.draw_to_main_hand() is None:
                logger.info("No more cards to deal.")
                break
            drawn += 1
        return drawn

    def _return_main_hand(self) -> None:
        """Take the main hand off the table at the end of a blind."""
        cards = self.state.hands.main.clear()
        if not cards:
            return
        self.ui.move_cards(cards, HAND_MAIN, DECK)
        for card in cards:
            self.ui.remove_card_visual(card)

    # =========================================================================
    # Game Actions
    # =========================================================================

    def select_card(self, hand: Hand, index: int) -> bool:
        """Toggle selection of the card at ``index``.

        Returns:
            False if the index is out of range, True otherwise
        """
        if index < 0 or index >= len(hand):
            logger.error(f"Invalid card index {index} for hand of {len(hand)}")
            return False

        card = hand[index]
        selected = card.toggle_select()
        logger.debug(f"Card {card} is now {'selected' if selected else 'deselected'}")
        return True

    def clear_selection(self) -> None:
        for card in self.state.hands.main.selected_cards():
            card.toggle_select()

    def discard_cards(self) -> ActionResult:
        """Discard the selected cards from the main hand.

        Uses one discard regardless of how many cards go. Does not redraw.
        """
        state = self.state
        if state.is_game_over:
            return ActionResult(False, "Game is over")

        if state.discards_used >= state.discard_budget:
            logger.warning("Maximum discards reached.")
            return ActionResult(False, "No discards remaining")

        selected = state.hands.main.selected_cards()
        if not selected:
            logger.warning("No cards selected for discard.")
            return ActionResult(False, "No cards selected")

        self.ui.disable_play()

        for card in selected:
            card.toggle_select()
            state.hands.main.remove_card(card)
            logger.debug(f"Discarded card: {card}")

        self.ui.move_cards(selected, HAND_MAIN, DISCARD_PILE)
        for card in selected:
            self.ui.remove_card_visual(card)

        state.discards_used += 1
        self.ui.update_scoreboard({"discardsRemaining": state.discards_remaining})
        self.ui.enable_play()

        return ActionResult(
            True,
            f"Discarded {len(selected)} cards. {state.discards_remaining} discards left.",
        )

    def play_cards(self) -> ActionResult:
        """Play the selected cards, score them and settle the blind."""
        state = self.state
        if state.is_game_over:
            return ActionResult(False, "Game is over")

        selected = state.hands.main.selected_cards()
        if not selected:
            logger.warning("No cards selected for play.")
            return ActionResult(False, "No cards selected")

        self.ui.disable_play()

        for card in selected:
            card.toggle_select()
            state.hands.main.remove_card(card)
            state.hands.played.add_card(card)
            logger.debug(f"Played card: {card}")

        self.ui.move_cards(selected, HAND_MAIN, HAND_PLAYED)
        self.storage.update_stat("total_hands_played")

        result = self.scoring.score_hand()
        return self._settle_blind(result)

    def _settle_blind(self, result: ScoreResult) -> ActionResult:
        """Decide what happens after a hand has been scored."""
        state = self.state
        target = state.min_score

        if state.hands_played < state.total_hands and state.round_score < target:
            self.deal_cards()
            self.ui.enable_play()
            return ActionResult(
                True,
                f"Round score {state.round_score}/{target}. {state.hands_remaining} hands left.",
                result=result,
            )

        self._return_main_hand()

        if state.round_score < target:
            message = f"Failed to meet blind requirement of {target}. Game Over!"
            self.declare_loss(message)
            return ActionResult(True, message, result=result, game_over=True)

        if not self.next_blind():
            return ActionResult(
                True,
                "Final blind beaten. YOU WIN!",
                result=result,
                blind_beaten=True,
                game_over=True,
                won=True,
            )

        return ActionResult(
            True,
            f"Blind beaten. Now playing {state.blind_name} of ante {state.ante}.",
            result=result,
            blind_beaten=True,
        )

    def declare_loss(self, message: str) -> None:
        """End the game as lost."""
        logger.info(message)
        self.state.phase = GamePhase.GAME_OVER
        self.storage.record_high("highest_ante_reached", self.state.ante)
        self.ui.show_loss(message)

    # =========================================================================
    # Blind Management
    # =========================================================================

    def _payout(self) -> None:
        """Pay the blind reward plus extras for remaining hands and interest."""
        state = self.state
        base = state.base_reward
        extras: list[tuple[str, int]] = []

        if state.hands_remaining > 0:
            extras.append(("Remaining Hands", state.hands_remaining))

        interest = math.floor(base * self.config.interest_rate)
        if interest > 0 and state.money < state.interest_cap:
            interest = min(interest, state.interest_cap - state.money)
            extras.append(("Interest", interest))

        state.money += base + sum(value for _, value in extras)
        logger.info(f"Earned ${base} + {extras}. Money: ${state.money}")

        self.ui.show_money_won(base, extras)
        self.ui.update_scoreboard({"money": state.money})

    def next_blind(self) -> bool:
        """Pay out the beaten blind and set up the next one.

        Returns:
            True if play continues, False if the game has finished
        """
        state = self.state
        self.ui.disable_play()
        self._payout()

        if state.blind + 1 > state.blinds_per_ante:
            state.blind = 1
            state.ante += 1
            scaling = self.config.ante_scaling
            state.blind_requirements = [math.ceil(r * scaling) for r in state.blind_requirements]
            state.blind_rewards = [math.ceil(r * scaling) for r in state.blind_rewards]
            self.storage.record_high("highest_ante_reached", state.ante)

            if state.ante > state.total_antes and not state.endless_mode:
                self.storage.update_stat("games_completed")
                self.ui.show_win()

                if self.ui.prompt_endless_mode():
                    state.endless_mode = True
                    logger.info("Entering endless mode.")
                else:
                    state.phase = GamePhase.GAME_OVER
                    logger.info("Game finished. Player chose not to enter endless mode.")
                    self.ui.exit_game()
                    return False
        else:
            state.blind += 1

        state.round_score = 0
        state.hands_played = 0
        state.discards_used = 0

        self._return_main_hand()
        state.deck.reset_deck()
        state.blind_name = BLIND_NAMES.get(state.blind, f"Blind {state.blind}")
        logger.info(f"Advancing to {state.blind_name} of ante {state.ante}")

        self.ui.update_scoreboard(self.scoreboard())
        self.start_blind()
        return True

    # =========================================================================
    # Jokers
    # =========================================================================

    def add_joker(self, joker: Joker) -> bool:
        """Put a joker in the rightmost joker slot.

        Returns:
            False if the joker slots are full
        """
        jokers = self.state.hands.joker
        if len(jokers) >= self.state.joker_slots:
            logger.warning(f"Joker slots full ({len(jokers)}/{self.state.joker_slots})")
            return False

        index = jokers.add_card(joker)
        self.storage.update_stat("total_jokers_used")
        self.ui.create_card_visual(joker)
        self.ui.move_cards([joker], DECK, HAND_JOKER)

        invoke_at(joker, index, JokerHook.ON_JOKER_ENTER, self.scoring.context())
        return True

    def remove_joker(self, index: int) -> Joker | None:
        """Take the joker at ``index`` out of play. None if out of range."""
        jokers = self.state.hands.joker
        if index < 0 or index >= len(jokers):
            logger.error(f"Invalid joker index {index} for {len(jokers)} jokers")
            return None

        joker = jokers[index]
        invoke_at(joker, index, JokerHook.ON_JOKER_LEAVE, self.scoring.context())
        jokers.remove_at(index)

        self.ui.move_cards([joker], HAND_JOKER, OFFSCREEN)
        self.ui.remove_card_visual(joker)
        return joker

    def buy_joker(self, name: str, cost: int) -> ActionResult:
        """Buy a joker by type name."""
        state = self.state
        if state.money < cost:
            return ActionResult(False, f"Not enough money (have ${state.money}, need ${cost})")

        if len(state.hands.joker) >= state.joker_slots:
            return ActionResult(False, f"Joker slots full ({state.joker_slots}/{state.joker_slots})")

        try:
            joker = create_joker(name)
        except ValueError as e:
            return ActionResult(False, str(e))

        state.money -= cost
        self.add_joker(joker)
        self.ui.update_scoreboard({"money": state.money})
        return ActionResult(True, f"Bought {joker.name} for ${cost}. ${state.money} remaining.")

    # =========================================================================
    # Persistence
    # =========================================================================

    def snapshot(self) -> dict[str, Any]:
        return snapshot_state(self.state)

    def load_snapshot(self, data: dict[str, Any]) -> None:
        """Replace the current state with a snapshot."""
        self.state = restore_state(data, self.rng)
        self.ui.new_game()
        self.ui.update_scoreboard(self.scoreboard())

    def save(self) -> None:
        self.storage.save_game(self.snapshot())

    def load(self) -> bool:
        """Load the stored save. Returns False if there is none."""
        data = self.storage.load_game()
        if data is None:
            return False
        self.load_snapshot(data)
        return True

    # =========================================================================
    # State Queries
    # =========================================================================

    @property
    def is_game_over(self) -> bool:
        return self.state.is_game_over

    def get_state_summary(self) -> dict:
        """Get a summary of current game state."""
        state = self.state
        return {
            "phase": state.phase.name,
            "ante": state.ante,
            "blind": state.blind_name,
            "score": f"{state.round_score}/{state.min_score}",
            "hands": state.hands_remaining,
            "discards": state.discards_remaining,
            "money": state.money,
            "hand": [str(c) for c in state.hands.main],
            "deck_remaining": state.deck.remaining,
            "jokers": [j.rank for j in state.hands.joker],
        }
