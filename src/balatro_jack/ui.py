"""Notification contract between the game core and a presentation layer.

The core only ever calls these methods and never reads their results,
except ``prompt_endless_mode``. A front end implements ``GameUI``;
``NullUI`` ignores everything and ``HeadlessUI`` records what it was told.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from balatro_jack.models import Card

logger = logging.getLogger(__name__)

# Location tags for move_cards
DECK = "deck"
HAND_MAIN = "handMain"
HAND_PLAYED = "handPlayed"
HAND_JOKER = "handJoker"
DISCARD_PILE = "discard_pile"
OFFSCREEN = "offscreen"


class GameUI(Protocol):
    """What the core expects from a presentation layer."""

    def new_game(self) -> None: ...

    def exit_game(self) -> None: ...

    def create_card_visual(self, card: Card) -> None: ...

    def remove_card_visual(self, card: Card) -> None: ...

    def move_cards(self, cards: Sequence[Card], origin: str, destination: str) -> None: ...

    def show_score_popup(
        self, card: Card | None, messages: list[str], colors: list[str]
    ) -> None: ...

    def update_scoreboard(self, values: dict[str, Any]) -> None:
        """Partial update. Keys: minScore, roundScore, handScore, handMult,
        money, discardsRemaining, handsRemaining, ante, blindName, handType."""
        ...

    def show_bust(self) -> None: ...

    def show_hand_scored(self, hand_score: float, hand_mult: float, total_added: float) -> None: ...

    def show_loss(self, message: str) -> None: ...

    def show_win(self) -> None: ...

    def show_money_won(self, base: int, extras: list[tuple[str, int]]) -> None: ...

    def prompt_endless_mode(self) -> bool: ...

    def enable_play(self) -> None: ...

    def disable_play(self) -> None: ...


class NullUI:
    """A UI that ignores every notification and declines endless mode."""

    def new_game(self) -> None:
        pass

    def exit_game(self) -> None:
        pass

    def create_card_visual(self, card: Card) -> None:
        pass

    def remove_card_visual(self, card: Card) -> None:
        pass

    def move_cards(self, cards: Sequence[Card], origin: str, destination: str) -> None:
        pass

    def show_score_popup(self, card: Card | None, messages: list[str], colors: list[str]) -> None:
        pass

    def update_scoreboard(self, values: dict[str, Any]) -> None:
        pass

    def show_bust(self) -> None:
        pass

    def show_hand_scored(self, hand_score: float, hand_mult: float, total_added: float) -> None:
        pass

    def show_loss(self, message: str) -> None:
        pass

    def show_win(self) -> None:
        pass

    def show_money_won(self, base: int, extras: list[tuple[str, int]]) -> None:
        pass

    def prompt_endless_mode(self) -> bool:
        return False

    def enable_play(self) -> None:
        pass

    def disable_play(self) -> None:
        pass


@dataclass
class UIEvent:
    """One notification received by a HeadlessUI."""

    name: str
    args: tuple = ()


@dataclass
class HeadlessUI(NullUI):
    """Records every notification and logs it at debug level.

    Useful for driving a game without a front end and for tests. The
    scoreboard keeps the latest value seen for each key.
    """

    endless: bool = False
    events: list[UIEvent] = field(default_factory=list)
    scoreboard: dict[str, Any] = field(default_factory=dict)
    play_enabled: bool = False

    def _record(self, name: str, *args) -> None:
        logger.debug(f"ui.{name}{args}")
        self.events.append(UIEvent(name, args))

    def names(self) -> list[str]:
        """Event names in the order they arrived."""
        return [e.name for e in self.events]

    def of(self, name: str) -> list[UIEvent]:
        return [e for e in self.events if e.name == name]

    def new_game(self) -> None:
        self.scoreboard.clear()
        self._record("new_game")

    def exit_game(self) -> None:
        self._record("exit_game")

    def create_card_visual(self, card: Card) -> None:
        self._record("create_card_visual", card)

    def remove_card_visual(self, card: Card) -> None:
        self._record("remove_card_visual", card)

    def move_cards(self, cards: Sequence[Card], origin: str, destination: str) -> None:
        self._record("move_cards", list(cards), origin, destination)

    def show_score_popup(self, card: Card | None, messages: list[str], colors: list[str]) -> None:
        self._record("show_score_popup", card, list(messages), list(colors))

    def update_scoreboard(self, values: dict[str, Any]) -> None:
        self.scoreboard.update(values)
        self._record("update_scoreboard", dict(values))

    def show_bust(self) -> None:
        self._record("show_bust")

    def show_hand_scored(self, hand_score: float, hand_mult: float, total_added: float) -> None:
        self._record("show_hand_scored", hand_score, hand_mult, total_added)

    def show_loss(self, message: str) -> None:
        self._record("show_loss", message)

    def show_win(self) -> None:
        self._record("show_win")

    def show_money_won(self, base: int, extras: list[tuple[str, int]]) -> None:
        self._record("show_money_won", base, list(extras))

    def prompt_endless_mode(self) -> bool:
        self._record("prompt_endless_mode")
        return self.endless

    def enable_play(self) -> None:
        self.play_enabled = True
        self._record("enable_play")

    def disable_play(self) -> None:
        self.play_enabled = False
        self._record("disable_play")
