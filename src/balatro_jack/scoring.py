"""Scoring engine for played hands.

A scoring pass moves through IDLE -> ACCUMULATING -> {BUST, COMMITTED}:

1. Reset hand score to 0 and hand mult to 1, fire on_scoring_start
2. Name the poker hand for the scoreboard (display only)
3. For each played card, left to right:
   a. Add the card's chip value to the hand score
   b. Fire on_card_score for every joker
4. Fire on_scoring_end with the accumulated hand score
5. If the blackjack total of the played cards is over 21 the hand is BUST:
   score and mult drop back to (0, 1) and nothing is added to the round
6. Otherwise COMMITTED: round score += hand score x hand mult

Either way the played cards leave the table and the hand counts as played.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from balatro_jack.hand_evaluation import blackjack_score, classify_hand
from balatro_jack.jokers import Joker, JokerHook, dispatch_hook
from balatro_jack.models import Card, HandType
from balatro_jack.ui import HAND_PLAYED, OFFSCREEN

if TYPE_CHECKING:
    from balatro_jack.game import Game

logger = logging.getLogger(__name__)

CHIPS_COLOR = "#00FFFF"
MULT_COLOR = "#FFFF00"


class ScoringState(Enum):
    """Where a scoring pass ended up."""

    IDLE = auto()  # Nothing played
    ACCUMULATING = auto()
    BUST = auto()  # Blackjack total over 21
    COMMITTED = auto()  # Added to the round score


@dataclass
class ScoringContext:
    """Context passed to jokers on every hook.

    Built fresh for each event and thrown away afterwards.
    """

    game: "Game"
    engine: "ScoringEngine"

    # Card being scored or drawn, and its position in the played hand
    card: Card | None = None
    card_index: int | None = None

    # Joker whose hook is running, and its slot in the joker hand
    joker: Joker | None = None
    joker_index: int | None = None

    # Joker in the slot being dispatched. Differs from ``joker`` when a
    # wrapper runs a neighbour's effect.
    actor: Joker | None = None

    # Hand score at the end of the per-card pass
    score: float | None = None


@dataclass
class ScoreResult:
    """Outcome of one scoring pass."""

    state: ScoringState
    hand_type: HandType = HandType.NO_CARDS
    hand_score: float = 0
    hand_mult: float = 1
    total_added: float = 0
    blackjack_total: int = 0

    @property
    def busted(self) -> bool:
        return self.state == ScoringState.BUST

    @property
    def scored(self) -> bool:
        return self.state == ScoringState.COMMITTED


class ScoringEngine:
    """Scores the played hand of a game and applies joker effects."""

    def __init__(self, game: "Game"):
        self.game = game
        self.state = ScoringState.IDLE

    def context(self, **kwargs) -> ScoringContext:
        """New hook context for this engine's game."""
        return ScoringContext(game=self.game, engine=self, **kwargs)

    def fire(self, hook: JokerHook, **kwargs) -> None:
        """Dispatch ``hook`` to every joker with a fresh context."""
        dispatch_hook(hook, self.context(**kwargs))

    def score_hand(self) -> ScoreResult:
        """Score the played hand and clear it from the table."""
        game = self.game
        state = game.state
        ui = game.ui
        played = state.hands.played

        if len(played) == 0:
            logger.info("No cards played. No score.")
            self.state = ScoringState.IDLE
            return ScoreResult(ScoringState.IDLE)

        self.state = ScoringState.ACCUMULATING
        state.hand_score = 0
        state.hand_mult = 1

        self.fire(JokerHook.ON_SCORING_START)

        hand_type = classify_hand(played)
        ui.update_scoreboard({"handType": hand_type.value})

        for index, card in enumerate(list(played)):
            value = card.base_value
            state.hand_score = round(state.hand_score + value, 1)
            ui.update_scoreboard({"handScore": state.hand_score})
            ui.show_score_popup(card, [f"+{value} Chips"], [CHIPS_COLOR])
            logger.debug(f"Card {card} scored: {value}")

            self.fire(JokerHook.ON_CARD_SCORE, card=card, card_index=index)

        self.fire(JokerHook.ON_SCORING_END, score=state.hand_score)

        total = blackjack_score(played)
        if total > 21:
            result = self._bust(hand_type, total)
        else:
            result = self._commit(hand_type, total)

        cards = played.clear()
        ui.move_cards(cards, HAND_PLAYED, OFFSCREEN)
        for card in cards:
            ui.remove_card_visual(card)

        state.hands_played += 1
        ui.update_scoreboard({"handsRemaining": state.hands_remaining})

        self.state = ScoringState.IDLE
        return result

    def _bust(self, hand_type: HandType, total: int) -> ScoreResult:
        state = self.game.state
        logger.info(f"Hand totals {total}, over 21. Hand is bust.")
        self.state = ScoringState.BUST

        state.hand_score = 0
        state.hand_mult = 1
        self.game.ui.update_scoreboard({"handScore": 0, "handMult": 1})
        self.game.ui.show_bust()

        return ScoreResult(ScoringState.BUST, hand_type=hand_type, blackjack_total=total)

    def _commit(self, hand_type: HandType, total: int) -> ScoreResult:
        state = self.game.state
        self.state = ScoringState.COMMITTED

        hand_score = state.hand_score
        hand_mult = state.hand_mult
        total_added = round(hand_score * hand_mult, 1)
        state.round_score = round(state.round_score + total_added, 1)
        logger.info(
            f"Scored {hand_score} x {hand_mult} = {total_added}. "
            f"Round score: {state.round_score}"
        )

        self.game.ui.show_hand_scored(hand_score, hand_mult, total_added)
        self.game.storage.record_high("highest_round_score", state.round_score)

        state.hand_score = 0
        state.hand_mult = 1
        self.game.ui.update_scoreboard(
            {"roundScore": state.round_score, "handScore": 0, "handMult": 1}
        )

        return ScoreResult(
            ScoringState.COMMITTED,
            hand_type=hand_type,
            hand_score=hand_score,
            hand_mult=hand_mult,
            total_added=total_added,
            blackjack_total=total,
        )

    # =========================================================================
    # Effects
    # =========================================================================

    def add_chips(self, ctx: ScoringContext, chips: float) -> None:
        """Add chips to the current hand score."""
        state = self.game.state
        state.hand_score = round(state.hand_score + chips, 1)
        self.game.ui.update_scoreboard({"handScore": state.hand_score})
        self.game.ui.show_score_popup(
            self._source(ctx), [f"+{chips} Chips"], [CHIPS_COLOR]
        )
        logger.debug(f"Added {chips} chips. Hand score: {state.hand_score}")

    def add_mult(self, ctx: ScoringContext, mult: float) -> None:
        """Add to the current hand multiplier (0.2 = +20%)."""
        state = self.game.state
        state.hand_mult = round(state.hand_mult + mult, 2)
        self.game.ui.update_scoreboard({"handMult": state.hand_mult})
        self.game.ui.show_score_popup(
            self._source(ctx), [f"+{mult * 100:.0f}% Mult"], [MULT_COLOR]
        )
        logger.debug(f"Added {mult * 100:.0f}% mult. Hand mult: {state.hand_mult}")

    @staticmethod
    def _source(ctx: ScoringContext) -> Card | None:
        """Card the effect popup should appear on."""
        if ctx.actor is not None:
            return ctx.actor
        return ctx.joker if ctx.joker is not None else ctx.card
