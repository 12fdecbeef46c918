"""Game snapshots and lifetime statistics.

A snapshot is a plain JSON-compatible dict. Deck cards are listed once and
hands refer to them by position, so a restored game keeps card identity
(a card drawn into the main hand is the same object as the deck's used
card).

Snapshot shape:
{
  "version": 1,
  "deck": {"cards": [card, ...], "available": [int, ...], "used": [int, ...]},
  "hands": {"main": {"sort_method": "suit" | "value" | null,
                     "cards": [{"deck_index": int} | card, ...]}, ...},
  "counters": {"ante": int, "money": int, ...}
}

Jokers carry their ``state``. Wrapped jokers carry ``wrapper`` (kind),
``intercepts``, the wrapped joker under ``inner`` and the jokers whose
entry effects they applied under ``entered``.
"""

import json
import logging
import random
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from balatro_jack.deck import Deck
from balatro_jack.hand import Hand, SortMethod
from balatro_jack.jokers import WRAPPER_TYPES, Joker, JokerDecorator, JokerHook, create_joker
from balatro_jack.models import Card, Suit
from balatro_jack.state import GamePhase, GameState, HandSet

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

# GameState fields copied as-is into "counters"
COUNTER_FIELDS = (
    "ante",
    "blind",
    "blinds_per_ante",
    "total_antes",
    "blind_name",
    "endless_mode",
    "hand_size",
    "joker_slots",
    "consumable_slots",
    "money",
    "total_hands",
    "hands_played",
    "discard_budget",
    "discards_used",
    "blind_requirements",
    "blind_rewards",
    "interest_cap",
    "round_score",
    "hand_score",
    "hand_mult",
)


def _unwrap(joker: Card, depth: int) -> Card:
    for _ in range(depth):
        if not isinstance(joker, JokerDecorator):
            raise ValueError(f"Joker reference unwraps past {joker}")
        joker = joker.inner
    return joker


def _joker_ref(joker: Joker, owner: JokerDecorator, slots: list[Card]) -> dict[str, Any]:
    """Reference to a joker an owner entered through.

    {"own": depth} points into the owner's own wrapping, {"slot": i,
    "depth": d} into the joker hand. Anything else is stored in full.
    """
    for name, roots in (("own", [owner]), ("slot", slots)):
        for i, root in enumerate(roots):
            current, depth = root, 0
            while True:
                if current is joker:
                    return {"own": depth} if name == "own" else {"slot": i, "depth": depth}
                if not isinstance(current, JokerDecorator):
                    break
                current, depth = current.inner, depth + 1
    return card_to_dict(joker)


def card_to_dict(card: Card, slots: list[Card] | None = None) -> dict[str, Any]:
    """Serialize a card. ``slots`` is the joker hand, for wrapper references."""
    data: dict[str, Any] = {
        "suit": card.suit.value,
        "rank": card.rank,
        "flipped": card.is_flipped,
        "selected": card.is_selected,
        "properties": sorted(card.properties),
    }
    if isinstance(card, JokerDecorator):
        data["wrapper"] = card.kind
        data["intercepts"] = sorted(hook.value for hook in card.intercepts)
        data["inner"] = card_to_dict(card.inner, slots)
        data["entered"] = [_joker_ref(j, card, slots or []) for j in card.entered]
    elif isinstance(card, Joker):
        data["state"] = dict(card.state)
        if type(card) is Joker:
            data["plain"] = True
    return data


def _joker_from_dict(data: dict[str, Any]) -> Joker:
    wrapper = data.get("wrapper")
    if wrapper is not None:
        if wrapper not in WRAPPER_TYPES:
            raise ValueError(f"Unknown joker wrapper: {wrapper}")
        inner = card_from_dict(data["inner"])
        if not isinstance(inner, Joker):
            raise ValueError(f"Wrapped card is not a joker: {data['inner']!r}")
        intercepts = [JokerHook(value) for value in data["intercepts"]]
        return WRAPPER_TYPES[wrapper](inner, intercepts)

    joker = Joker(data["rank"]) if data.get("plain") else create_joker(data["rank"])
    joker.state.update(data.get("state", {}))
    return joker


def _link_entered(joker: Card, data: dict[str, Any], slots: list[Card] | None) -> None:
    """Resolve the ``entered`` references of a restored wrapper.

    Slot references are skipped when ``slots`` is None.
    """
    if not isinstance(joker, JokerDecorator):
        return
    _link_entered(joker.inner, data["inner"], slots)

    entered = []
    for ref in data.get("entered", []):
        if "own" in ref:
            entered.append(_unwrap(joker, ref["own"]))
        elif "slot" in ref:
            if slots is None:
                continue
            entered.append(_unwrap(slots[ref["slot"]], ref["depth"]))
        else:
            entered.append(card_from_dict(ref))
    joker.entered = entered


def card_from_dict(data: dict[str, Any]) -> Card:
    """Rebuild a card. Jokers are recreated through the joker registry."""
    try:
        suit = Suit(data["suit"])
        rank = data["rank"]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Malformed card in snapshot: {data!r}") from e

    if suit == Suit.JOKER:
        try:
            card: Card = _joker_from_dict(data)
            _link_entered(card, data, None)
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Malformed card in snapshot: {data!r}") from e
    else:
        card = Card(suit=suit, rank=rank)

    card.is_flipped = data.get("flipped", False)
    card.is_selected = data.get("selected", False)
    card.properties = set(data.get("properties", []))
    return card


def snapshot_state(state: GameState) -> dict[str, Any]:
    """Serialize a game state to a JSON-compatible dict."""
    deck = state.deck
    positions = {id(card): i for i, card in enumerate(deck.all_cards)}
    slots = list(state.hands.joker)

    def hand_entry(card: Card) -> dict[str, Any]:
        if id(card) in positions:
            return {"deck_index": positions[id(card)]}
        return card_to_dict(card, slots)

    counters = {name: getattr(state, name) for name in COUNTER_FIELDS}
    counters["blind_requirements"] = list(state.blind_requirements)
    counters["blind_rewards"] = list(state.blind_rewards)
    counters["phase"] = state.phase.name

    return {
        "version": SNAPSHOT_VERSION,
        "deck": {
            "cards": [card_to_dict(c) for c in deck.all_cards],
            "available": [positions[id(c)] for c in deck.available_cards],
            "used": [positions[id(c)] for c in deck.used_cards],
        },
        "hands": {
            name: {
                "sort_method": hand.sort_method.value if hand.sort_method else None,
                "cards": [hand_entry(c) for c in hand],
            }
            for name, hand in state.hands.items()
        },
        "counters": counters,
    }


def restore_state(data: dict[str, Any], rng: random.Random | None = None) -> GameState:
    """Rebuild a game state from ``snapshot_state`` output.

    Raises:
        ValueError: unsupported version or malformed content
    """
    if data.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {data.get('version')!r}")

    try:
        return _restore_state(data, rng)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed snapshot: {e!r}") from e


def _restore_state(data: dict[str, Any], rng: random.Random | None) -> GameState:
    deck_data = data["deck"]
    all_cards = [card_from_dict(c) for c in deck_data["cards"]]

    def deck_card(index: int) -> Card:
        if not 0 <= index < len(all_cards):
            raise IndexError(f"deck index {index} out of range")
        return all_cards[index]

    deck = Deck.from_piles(
        all_cards,
        [deck_card(i) for i in deck_data["available"]],
        [deck_card(i) for i in deck_data["used"]],
        rng,
    )

    def hand_from_dict(hand_data: dict[str, Any]) -> Hand:
        cards = [
            deck_card(entry["deck_index"]) if "deck_index" in entry else card_from_dict(entry)
            for entry in hand_data["cards"]
        ]
        method = hand_data.get("sort_method")
        return Hand(cards, SortMethod(method) if method else None)

    hands_data = data["hands"]
    hands = HandSet(
        main=hand_from_dict(hands_data["main"]),
        played=hand_from_dict(hands_data["played"]),
        joker=hand_from_dict(hands_data["joker"]),
        consumable=hand_from_dict(hands_data["consumable"]),
    )

    # Wrappers may point at jokers in other slots, which only exist now
    slots = list(hands.joker)
    for joker, entry in zip(slots, hands_data["joker"]["cards"]):
        if "deck_index" not in entry:
            _link_entered(joker, entry, slots)

    counters = dict(data["counters"])
    phase = GamePhase[counters.pop("phase", GamePhase.PLAYING.name)]
    known = {name: counters[name] for name in COUNTER_FIELDS if name in counters}
    return GameState(deck=deck, hands=hands, phase=phase, **known)


# =============================================================================
# Persistence
# =============================================================================


@dataclass
class GameStats:
    """Lifetime statistics across games."""

    games_started: int = 0
    games_completed: int = 0
    highest_ante_reached: int = 0
    highest_round_score: float = 0
    total_hands_played: int = 0
    total_jokers_used: int = 0
    first_game_date: str | None = None


class GameStorage:
    """Holds the current save and lifetime stats.

    With a path the data is mirrored to a JSON file after every change;
    without one it lives in memory only.
    """

    VERSION = "1.0"

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        self.stats = GameStats()
        self.current_save: dict[str, Any] | None = None
        self.last_saved: str | None = None

        if self.path is not None and self.path.exists():
            self._read()

    def update_stat(self, name: str, amount: int = 1) -> None:
        """Add ``amount`` to a counting stat."""
        self._check_stat(name)
        setattr(self.stats, name, getattr(self.stats, name) + amount)
        if name == "games_started" and self.stats.first_game_date is None:
            self.stats.first_game_date = datetime.now(timezone.utc).isoformat()
        self._write()

    def record_high(self, name: str, value: float) -> None:
        """Raise a high-water-mark stat to ``value`` if it is higher."""
        self._check_stat(name)
        if value > getattr(self.stats, name):
            setattr(self.stats, name, value)
            self._write()

    def save_game(self, snapshot: dict[str, Any]) -> None:
        self.current_save = snapshot
        self.last_saved = datetime.now(timezone.utc).isoformat()
        self._write()

    def load_game(self) -> dict[str, Any] | None:
        return self.current_save

    def clear_save(self) -> None:
        self.current_save = None
        self._write()

    def _check_stat(self, name: str) -> None:
        if name not in {f.name for f in fields(GameStats)}:
            raise ValueError(f"Unknown stat: {name}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.VERSION,
            "current_save": self.current_save,
            "stats": asdict(self.stats),
            "last_saved": self.last_saved,
        }

    def _write(self) -> None:
        if self.path is None:
            return
        self.path.write_text(json.dumps(self.to_dict(), indent=2))

    def _read(self) -> None:
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.error(f"Invalid save file {self.path}: {e}. Starting fresh.")
            return

        known = {f.name for f in fields(GameStats)}
        self.stats = GameStats(**{k: v for k, v in data.get("stats", {}).items() if k in known})
        self.current_save = data.get("current_save")
        self.last_saved = data.get("last_saved")
