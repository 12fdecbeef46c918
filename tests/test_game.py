"""Tests for the game orchestrator."""

import json

import pytest

from balatro_jack.game import Game
from balatro_jack.jokers import EvenSteven, LuckyRabbit, MirrorJoker, create_joker
from balatro_jack.models import Card
from balatro_jack.state import GameConfig, GamePhase
from balatro_jack.storage import GameStorage
from balatro_jack.ui import HeadlessUI


def cards(card_strings: list[str]) -> list[Card]:
    """Helper to create cards from strings."""
    return [Card.from_string(s) for s in card_strings]


def new_game(config: GameConfig | None = None, endless: bool = False) -> Game:
    return Game(ui=HeadlessUI(endless=endless), config=config, seed=42)


def play(game: Game, card_strings: list[str]):
    """Replace the main hand with the given cards and play all of them."""
    main = game.state.hands.main
    main.clear()
    for card in cards(card_strings):
        main.add_card(card)
    for i in range(len(main)):
        game.select_card(main, i)
    return game.play_cards()


class TestGameInitialization:
    """Test game reset and start."""

    def test_reset_state(self):
        game = new_game()
        state = game.state

        assert len(state.deck) == 52
        assert state.deck.remaining == 52
        assert state.ante == 1
        assert state.blind == 1
        assert state.blind_name == "Small Blind"
        assert state.money == 24
        assert state.min_score == 40
        assert state.hands_remaining == 4
        assert state.discards_remaining == 4
        assert state.phase == GamePhase.PLAYING

    def test_reset_does_not_deal(self):
        game = new_game()
        assert len(game.state.hands.main) == 0
        assert len(game.state.deck.used_cards) == 0

    def test_reset_notifies_ui(self):
        game = new_game()
        assert game.ui.names()[0] == "new_game"
        assert game.ui.scoreboard["minScore"] == 40
        assert game.ui.scoreboard["blindName"] == "Small Blind"

    def test_reset_with_seed_is_deterministic(self):
        a = new_game()
        b = new_game()
        assert [str(c) for c in a.state.deck.available_cards] == [
            str(c) for c in b.state.deck.available_cards
        ]

    def test_start_game_deals_and_enables_play(self):
        game = new_game()
        game.start_game()
        assert len(game.state.hands.main) == 5
        assert game.ui.play_enabled

    def test_reset_counts_games_started(self):
        game = new_game()
        game.reset_game()
        assert game.storage.stats.games_started == 2

    def test_custom_config(self):
        game = new_game(GameConfig(hand_size=7, starting_money=0, discard_budget=2))
        game.deal_cards()
        assert len(game.state.hands.main) == 7
        assert game.state.money == 0
        assert game.state.discards_remaining == 2


class TestDealAndDiscard:
    """Test dealing, selecting and discarding."""

    def test_deal_discard_scenario(self):
        """Reset, deal, discard one card."""
        game = new_game()
        assert len(game.state.deck) == 52

        game.deal_cards()
        assert len(game.state.hands.main) == 5
        assert game.state.deck.remaining == 47

        assert game.select_card(game.state.hands.main, 0)
        result = game.discard_cards()

        assert result.success
        assert len(game.state.hands.main) == 4
        assert len(game.state.deck.used_cards) == 5
        assert game.state.discards_used == 1

    def test_deal_stops_when_deck_is_empty(self):
        game = new_game(GameConfig(hand_size=60))
        assert game.deal_cards() == 52
        assert len(game.state.hands.main) == 52

    def test_dealt_cards_are_in_used_pile(self):
        game = new_game()
        game.deal_cards()
        for card in game.state.hands.main:
            assert card in game.state.deck.used_cards

    def test_select_out_of_range(self, caplog):
        game = new_game()
        game.deal_cards()
        assert not game.select_card(game.state.hands.main, 5)
        assert not any(c.is_selected for c in game.state.hands.main)
        assert "Invalid card index" in caplog.text

    def test_select_toggles(self):
        game = new_game()
        game.deal_cards()
        main = game.state.hands.main
        game.select_card(main, 2)
        game.select_card(main, 2)
        assert main.selected_cards() == []

    def test_discard_budget(self):
        """Four discards succeed, the fifth is refused."""
        game = new_game()
        game.deal_cards()
        main = game.state.hands.main

        for _ in range(4):
            game.select_card(main, 0)
            assert game.discard_cards().success

        assert game.state.discards_remaining == 0
        game.select_card(main, 0)
        result = game.discard_cards()

        assert not result.success
        assert "No discards" in result.message
        assert len(main) == 1
        assert game.state.discards_used == 4

    def test_discard_many_cards_uses_one_discard(self):
        game = new_game()
        game.deal_cards()
        main = game.state.hands.main
        for i in range(3):
            game.select_card(main, i)
        game.discard_cards()
        assert len(main) == 2
        assert game.state.discards_used == 1

    def test_discard_does_not_redraw(self):
        game = new_game()
        game.deal_cards()
        game.select_card(game.state.hands.main, 0)
        game.discard_cards()
        assert game.state.deck.remaining == 47

    def test_discard_nothing_selected(self):
        game = new_game()
        game.deal_cards()
        result = game.discard_cards()
        assert not result.success
        assert game.state.discards_used == 0

    def test_discard_notifies_ui(self):
        game = new_game()
        game.deal_cards()
        card = game.state.hands.main[0]
        game.select_card(game.state.hands.main, 0)
        game.discard_cards()

        moved = game.ui.of("move_cards")[-1]
        assert moved.args == ([card], "handMain", "discard_pile")
        assert game.ui.scoreboard["discardsRemaining"] == 3
        assert not card.is_selected


class TestPlay:
    """Test playing hands and settling blinds."""

    def test_play_nothing_selected(self):
        game = new_game()
        game.start_game()
        assert not game.play_cards().success
        assert game.state.hands_played == 0

    def test_play_below_target_redeals(self):
        game = new_game()
        game.start_game()
        result = play(game, ["10H", "5D"])

        assert result.success
        assert result.result.scored
        assert not result.blind_beaten
        assert game.state.round_score == 15
        assert game.state.hands_remaining == 3
        assert len(game.state.hands.main) == 5

    def test_play_counts_hands_stat(self):
        game = new_game()
        game.start_game()
        play(game, ["10H"])
        assert game.storage.stats.total_hands_played == 1

    def test_blind_beaten(self):
        """15 >= 10: reward 4 + 3 remaining hands, no interest."""
        game = new_game(GameConfig(blind_requirements=(10, 60, 80)))
        game.start_game()
        result = play(game, ["10H", "5D"])

        assert result.blind_beaten
        assert not result.game_over
        state = game.state
        assert state.money == 24 + 4 + 3
        assert state.blind == 2
        assert state.blind_name == "Big Blind"
        assert state.min_score == 60
        assert state.round_score == 0
        assert state.hands_played == 0
        assert state.discards_used == 0
        assert len(state.hands.main) == 5
        assert state.deck.remaining == 47

    def test_out_of_hands_is_game_over(self):
        game = new_game(GameConfig(hands_per_blind=1))
        game.start_game()
        result = play(game, ["2H"])

        assert result.game_over
        assert game.is_game_over
        assert game.state.phase == GamePhase.GAME_OVER
        assert len(game.state.hands.main) == 0
        assert game.ui.of("show_loss")[0].args[0].startswith("Failed to meet blind requirement")

    def test_bust_uses_last_hand(self):
        game = new_game(GameConfig(hands_per_blind=1))
        game.start_game()
        result = play(game, ["KH", "10D", "5C"])
        assert result.result.busted
        assert result.game_over

    def test_no_actions_after_game_over(self):
        game = new_game(GameConfig(hands_per_blind=1))
        game.start_game()
        play(game, ["2H"])

        assert not play(game, ["3H"]).success
        game.select_card(game.state.hands.main, 0)
        assert not game.discard_cards().success

    def test_loss_records_highest_ante(self):
        game = new_game(GameConfig(hands_per_blind=1))
        game.start_game()
        play(game, ["2H"])
        assert game.storage.stats.highest_ante_reached == 1


class TestBlindProgression:
    """Test next_blind payouts and ante changes."""

    def test_ante_rollover(self):
        """After the third blind requirements and rewards grow by half."""
        game = new_game()
        game.state.blind = 3
        assert game.next_blind()

        state = game.state
        assert state.ante == 2
        assert state.blind == 1
        assert state.blind_name == "Small Blind"
        assert state.blind_requirements == [60, 90, 120]
        assert state.blind_rewards == [6, 9, 12]
        assert state.money == 24 + 8 + 4

    def test_scaling_rounds_up(self):
        game = new_game(GameConfig(blind_requirements=(45, 61, 81), blind_rewards=(3, 5, 7)))
        game.state.blind = 3
        game.next_blind()
        assert game.state.blind_requirements == [68, 92, 122]
        assert game.state.blind_rewards == [5, 8, 11]

    def test_interest(self):
        """10% of the base reward."""
        game = new_game(GameConfig(blind_rewards=(20, 20, 20)))
        game.next_blind()
        assert game.state.money == 24 + 20 + 4 + 2
        extras = game.ui.of("show_money_won")[0].args[1]
        assert extras == [("Remaining Hands", 4), ("Interest", 2)]

    def test_interest_capped(self):
        game = new_game(GameConfig(blind_rewards=(20, 20, 20), starting_money=39))
        game.next_blind()
        assert game.state.money == 39 + 20 + 4 + 1

    def test_no_interest_at_cap(self):
        game = new_game(GameConfig(blind_rewards=(20, 20, 20), starting_money=40))
        game.next_blind()
        assert game.state.money == 40 + 20 + 4

    def test_win_without_endless(self):
        game = new_game(GameConfig(total_antes=1))
        game.state.blind = 3
        assert not game.next_blind()

        assert game.is_game_over
        assert "show_win" in game.ui.names()
        assert "exit_game" in game.ui.names()
        assert game.storage.stats.games_completed == 1

    def test_win_into_endless(self):
        game = new_game(GameConfig(total_antes=1), endless=True)
        game.state.blind = 3
        assert game.next_blind()

        assert game.state.endless_mode
        assert not game.is_game_over
        assert game.state.ante == 2
        assert len(game.state.hands.main) == 5

        # Endless mode is only offered once
        game.state.blind = 3
        game.next_blind()
        assert game.ui.names().count("prompt_endless_mode") == 1

    def test_final_blind_beaten_through_play(self):
        game = new_game(GameConfig(total_antes=1, blind_requirements=(10, 10, 10)))
        game.start_game()
        game.state.blind = 3
        result = play(game, ["10H"])
        assert result.won
        assert result.game_over


class TestJokerManagement:
    """Test adding, removing and buying jokers."""

    def test_slot_limit(self):
        game = new_game()
        for _ in range(4):
            assert game.add_joker(create_joker("odd_rod"))
        assert not game.add_joker(create_joker("odd_rod"))
        assert len(game.state.hands.joker) == 4
        assert game.storage.stats.total_jokers_used == 4

    def test_remove_joker_out_of_range(self):
        game = new_game()
        assert game.remove_joker(0) is None

    def test_remove_joker(self):
        game = new_game()
        joker = create_joker("odd_rod")
        game.add_joker(joker)
        assert game.remove_joker(0) is joker
        assert len(game.state.hands.joker) == 0
        assert ("remove_card_visual", (joker,)) in [(e.name, e.args) for e in game.ui.events]

    def test_buy_joker(self):
        game = new_game()
        result = game.buy_joker("softie", 5)
        assert result.success
        assert game.state.money == 19
        assert game.state.hands.joker[0].name == "softie"

    def test_buy_unknown_joker(self):
        game = new_game()
        result = game.buy_joker("nope", 5)
        assert not result.success
        assert "Unknown joker type" in result.message
        assert game.state.money == 24

    def test_buy_without_money(self):
        game = new_game()
        assert not game.buy_joker("softie", 25).success
        assert len(game.state.hands.joker) == 0


class TestPersistence:
    """Test snapshots and the save slot."""

    def test_snapshot_round_trip(self):
        game = new_game()
        game.start_game()
        game.add_joker(create_joker("lucky_rabbit"))
        game.add_joker(create_joker("mirror_mask"))
        game.draw_to_main_hand()
        game.state.hands.main.sort_by_value()
        data = json.loads(json.dumps(game.snapshot()))

        restored = new_game()
        restored.load_snapshot(data)
        state = restored.state

        assert [str(c) for c in state.hands.main] == [str(c) for c in game.state.hands.main]
        assert state.hands.main.sort_method == game.state.hands.main.sort_method
        assert state.deck.remaining == game.state.deck.remaining
        assert [str(c) for c in state.deck.available_cards] == [
            str(c) for c in game.state.deck.available_cards
        ]
        assert state.money == game.state.money
        assert state.blind_name == game.state.blind_name

        rabbit = state.hands.joker[0]
        assert isinstance(rabbit, LuckyRabbit)
        # The mirror to its right banks a second time on each draw
        assert rabbit.state == {"chips": 4}
        assert state.hands.joker[1].name == "mirror_mask"

    def test_wrapped_joker_round_trip(self):
        game = new_game()
        game.add_joker(MirrorJoker(EvenSteven()))
        restored = new_game()
        restored.load_snapshot(json.loads(json.dumps(game.snapshot())))

        joker = restored.state.hands.joker[0]
        assert isinstance(joker, MirrorJoker)
        assert isinstance(joker.inner, EvenSteven)

        for card in cards(["10H", "4D"]):
            restored.state.hands.played.add_card(card)
        assert restored.scoring.score_hand().hand_mult == 1.2

    def test_copied_entry_survives_round_trip(self):
        """A restored mirror still takes back the discard it copied."""
        game = new_game()
        game.add_joker(create_joker("stick_shift"))
        game.add_joker(create_joker("mirror_mask"))
        restored = new_game()
        restored.load_snapshot(json.loads(json.dumps(game.snapshot())))

        stick_shift, mirror = restored.state.hands.joker
        assert mirror.entered == [stick_shift]
        assert restored.state.discard_budget == 6

        restored.remove_joker(0)
        restored.remove_joker(0)
        assert restored.state.discard_budget == 4

    def test_restored_hand_cards_are_deck_cards(self):
        game = new_game()
        game.start_game()
        restored = new_game()
        restored.load_snapshot(game.snapshot())

        used = restored.state.deck.used_cards
        for card in restored.state.hands.main:
            assert any(card is c for c in used)

    def test_bad_snapshot_version(self):
        game = new_game()
        data = game.snapshot()
        data["version"] = 99
        with pytest.raises(ValueError, match="Unsupported snapshot version"):
            game.load_snapshot(data)

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "save.json"
        game = Game(storage=GameStorage(path), seed=1)
        game.start_game()
        game.save()

        other = Game(storage=GameStorage(path), seed=2)
        assert other.load()
        assert [str(c) for c in other.state.hands.main] == [str(c) for c in game.state.hands.main]

    def test_load_without_save(self):
        assert not new_game().load()

    def test_state_summary(self):
        game = new_game()
        game.start_game()
        summary = game.get_state_summary()
        assert summary["phase"] == "PLAYING"
        assert summary["score"] == "0/40"
        assert len(summary["hand"]) == 5
        assert summary["deck_remaining"] == 47
