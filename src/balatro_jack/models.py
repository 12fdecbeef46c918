"""Core data models for the blackjack deck-builder.

Cards compare by identity: a deck may hold two Aces of Hearts and they are
still different cards for deck and hand membership.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Self


class Suit(Enum):
    """Card suits, including the two non-playing card families."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"
    JOKER = "joker"
    CONSUMABLE = "consumable"

    def __str__(self) -> str:
        symbols = {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}
        return symbols.get(self.value, self.value)

    @property
    def is_standard(self) -> bool:
        """True for the four playing-card suits."""
        return self in STANDARD_SUITS


STANDARD_SUITS = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)

# Lowest to highest
RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
FACE_RANKS = ("J", "Q", "K")


class HandType(Enum):
    """Poker-style hand categories, shown to the player but not scored."""

    NO_CARDS = "No Cards"
    HIGH_CARD = "High Card"
    PAIR = "Pair"
    TWO_PAIR = "Two Pair"
    THREE_OF_A_KIND = "Three of a Kind"
    FLUSH = "Flush"
    FULL_HOUSE = "Full House"
    FOUR_OF_A_KIND = "Four of a Kind"

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class Card:
    """A playing card, or the shell of a joker/consumable.

    For jokers and consumables ``rank`` holds the type tag instead of a rank.
    ``properties`` holds free-form tags such as ``holo`` or ``alwaysFlipped``.
    """

    suit: Suit
    rank: str
    is_flipped: bool = False
    is_selected: bool = False
    properties: set[str] = field(default_factory=set)

    def __str__(self) -> str:
        if self.is_playing_card:
            return f"{self.rank}{self.suit}"
        return f"{self.suit.value}:{self.rank}"

    @property
    def is_playing_card(self) -> bool:
        """True unless this is a joker or consumable."""
        return self.suit.is_standard

    @property
    def is_ace(self) -> bool:
        return self.is_playing_card and self.rank == "A"

    @property
    def is_face(self) -> bool:
        return self.is_playing_card and self.rank in FACE_RANKS

    @property
    def base_value(self) -> int:
        """Chip value when scored: A=11, face=10, numbers at face value."""
        if not self.is_playing_card:
            return 0
        if self.rank == "A":
            return 11
        if self.rank in FACE_RANKS:
            return 10
        return int(self.rank)

    def flip(self) -> None:
        self.is_flipped = not self.is_flipped

    def toggle_select(self) -> bool:
        """Toggle selection and return the new state."""
        self.is_selected = not self.is_selected
        return self.is_selected

    def add_property(self, prop: str) -> bool:
        """Add a tag. Returns False if the card already had it."""
        if prop in self.properties:
            return False
        self.properties.add(prop)
        return True

    def remove_property(self, prop: str) -> bool:
        """Remove a tag. Returns False if the card did not have it."""
        if prop not in self.properties:
            return False
        self.properties.remove(prop)
        return True

    def has_property(self, prop: str) -> bool:
        return prop in self.properties

    @classmethod
    def from_string(cls, s: str) -> Self:
        """Parse card from string like 'AH' (Ace of Hearts) or '10S' (Ten of Spades)."""
        s = s.upper().strip()
        suit_char = s[-1:]
        rank_str = s[:-1]

        suit_map = {
            "H": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "C": Suit.CLUBS,
            "S": Suit.SPADES,
        }

        if suit_char not in suit_map:
            raise ValueError(f"Invalid suit: {suit_char}")
        if rank_str not in RANKS:
            raise ValueError(f"Invalid rank: {rank_str}")

        return cls(suit=suit_map[suit_char], rank=rank_str)


def create_standard_deck() -> list[Card]:
    """Create a standard 52-card deck."""
    return [Card(suit=suit, rank=rank) for suit in STANDARD_SUITS for rank in RANKS]
