"""Tests for the scoring engine."""

from balatro_jack.game import Game
from balatro_jack.models import Card, HandType
from balatro_jack.scoring import CHIPS_COLOR, ScoringState
from balatro_jack.ui import HeadlessUI


def cards(card_strings: list[str]) -> list[Card]:
    """Helper to create cards from strings."""
    return [Card.from_string(s) for s in card_strings]


def game_with_played(card_strings: list[str]) -> Game:
    """Game whose played hand holds the given cards."""
    game = Game(ui=HeadlessUI(), seed=42)
    for card in cards(card_strings):
        game.state.hands.played.add_card(card)
    return game


class TestCommit:
    """Test hands at or under 21."""

    def test_score_added_to_round(self):
        """10 + 5 = 15 chips at 1x mult."""
        game = game_with_played(["10H", "5D"])
        result = game.scoring.score_hand()

        assert result.state == ScoringState.COMMITTED
        assert result.scored
        assert result.hand_score == 15
        assert result.hand_mult == 1
        assert result.total_added == 15
        assert result.blackjack_total == 15
        assert game.state.round_score == 15

    def test_played_hand_is_cleared(self):
        game = game_with_played(["10H", "5D"])
        game.scoring.score_hand()

        assert len(game.state.hands.played) == 0
        assert game.state.hands_played == 1
        assert game.state.hand_score == 0
        assert game.state.hand_mult == 1
        assert game.scoring.state == ScoringState.IDLE

    def test_soft_ace_still_scores_eleven_chips(self):
        """A + K + 5 totals 16 for bust purposes, chips are still 26."""
        game = game_with_played(["AH", "KD", "5C"])
        result = game.scoring.score_hand()

        assert result.blackjack_total == 16
        assert result.hand_score == 26
        assert game.state.round_score == 26

    def test_round_score_accumulates(self):
        game = game_with_played(["10H", "5D"])
        game.scoring.score_hand()
        game.state.hands.played.add_card(Card.from_string("7S"))
        game.scoring.score_hand()

        assert game.state.round_score == 22
        assert game.state.hands_played == 2

    def test_ui_notifications(self):
        game = game_with_played(["AH", "AD"])
        ui = game.ui
        game.scoring.score_hand()

        popups = ui.of("show_score_popup")
        assert [e.args[1] for e in popups] == [["+11 Chips"], ["+11 Chips"]]
        assert all(e.args[2] == [CHIPS_COLOR] for e in popups)
        assert ui.scoreboard["handType"] == HandType.PAIR.value
        assert ui.scoreboard["roundScore"] == 22
        assert ui.scoreboard["handsRemaining"] == 3
        assert ui.of("show_hand_scored")[0].args == (22, 1, 22)

        moved = ui.of("move_cards")[-1]
        assert moved.args[1:] == ("handPlayed", "offscreen")

    def test_high_score_recorded(self):
        game = game_with_played(["10H", "5D"])
        game.scoring.score_hand()
        assert game.storage.stats.highest_round_score == 15


class TestBust:
    """Test hands over 21."""

    def test_bust_adds_nothing(self):
        """K + 10 + 5 = 25 busts."""
        game = game_with_played(["KH", "10D", "5C"])
        result = game.scoring.score_hand()

        assert result.state == ScoringState.BUST
        assert result.busted
        assert result.blackjack_total == 25
        assert result.total_added == 0
        assert game.state.round_score == 0

    def test_bust_still_uses_a_hand(self):
        game = game_with_played(["KH", "10D", "5C"])
        game.scoring.score_hand()

        assert game.state.hands_played == 1
        assert len(game.state.hands.played) == 0
        assert game.state.hand_score == 0
        assert game.state.hand_mult == 1

    def test_bust_notifies_ui(self):
        game = game_with_played(["KH", "10D", "5C"])
        game.scoring.score_hand()

        assert "show_bust" in game.ui.names()
        assert "show_hand_scored" not in game.ui.names()
        assert game.ui.scoreboard["handScore"] == 0
        assert game.ui.scoreboard["handMult"] == 1


class TestEmptyHand:
    """Test scoring with nothing played."""

    def test_no_cards_no_score(self, caplog):
        game = game_with_played([])
        with caplog.at_level("INFO"):
            result = game.scoring.score_hand()

        assert result.state == ScoringState.IDLE
        assert result.hand_type == HandType.NO_CARDS
        assert game.state.hands_played == 0
        assert "No cards played" in caplog.text


class TestEffects:
    """Test the chip and mult effect helpers."""

    def test_add_chips(self):
        game = game_with_played([])
        game.scoring.add_chips(game.scoring.context(), 3)
        assert game.state.hand_score == 3
        assert game.ui.of("show_score_popup")[-1].args[1] == ["+3 Chips"]

    def test_add_mult(self):
        game = game_with_played([])
        ctx = game.scoring.context()
        game.scoring.add_mult(ctx, 0.2)
        game.scoring.add_mult(ctx, 0.1)
        assert game.state.hand_mult == 1.3
        assert game.ui.of("show_score_popup")[-1].args[1] == ["+10% Mult"]
