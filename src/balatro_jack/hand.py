"""Ordered card collections (main hand, played cards, jokers, consumables).

A hand may carry a sort method. While it is set, cards added without an
explicit index are inserted at their sorted position. Placing a card by
hand (explicit index or a move) clears the sort method.
"""

import bisect
import logging
from collections.abc import Iterator
from enum import Enum
from typing import Callable

from balatro_jack.models import RANKS, STANDARD_SUITS, Card

logger = logging.getLogger(__name__)


class SortMethod(Enum):
    """How a hand keeps itself ordered."""

    SUIT = "suit"
    VALUE = "value"


def suit_order(card: Card) -> int:
    """Hearts < Diamonds < Clubs < Spades. Joker/consumable sort first."""
    if card.suit in STANDARD_SUITS:
        return STANDARD_SUITS.index(card.suit)
    return -1


def rank_order(card: Card) -> int:
    """2 < 3 < ... < 10 < J < Q < K < A. Type tags sort first."""
    if card.rank in RANKS:
        return RANKS.index(card.rank)
    return -1


def suit_sort_key(card: Card) -> tuple[int, int]:
    return suit_order(card), rank_order(card)


def value_sort_key(card: Card) -> tuple[int, int]:
    return rank_order(card), suit_order(card)


SORT_KEYS: dict[SortMethod, Callable[[Card], tuple[int, int]]] = {
    SortMethod.SUIT: suit_sort_key,
    SortMethod.VALUE: value_sort_key,
}


class Hand:
    """An ordered sequence of cards with optional auto-sort."""

    def __init__(self, cards: list[Card] | None = None, sort_method: SortMethod | None = None):
        self.cards: list[Card] = list(cards) if cards else []
        self.sort_method = sort_method

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __getitem__(self, index: int) -> Card:
        return self.cards[index]

    def __contains__(self, card: object) -> bool:
        return card in self.cards

    def __repr__(self) -> str:
        return f"Hand([{', '.join(str(c) for c in self.cards)}], sort_method={self.sort_method})"

    def sort_by_suit(self) -> None:
        """Sort by suit, then by value."""
        self.cards.sort(key=suit_sort_key)
        self.sort_method = SortMethod.SUIT

    def sort_by_value(self) -> None:
        """Sort by value, then by suit."""
        self.cards.sort(key=value_sort_key)
        self.sort_method = SortMethod.VALUE

    def get_insert_index(self, card: Card) -> int:
        """Index where ``card`` belongs under the active sort method.

        New cards go before existing cards that compare equal. Without a
        sort method this is the end of the hand.
        """
        if self.sort_method is None:
            return len(self.cards)
        key = SORT_KEYS[self.sort_method]
        return bisect.bisect_left(self.cards, key(card), key=key)

    def add_card(self, card: Card, index: int | None = None) -> int:
        """Add a card to the hand.

        Args:
            card: Card to add
            index: Explicit position. Disables sorting. Out-of-range values
                are logged and replaced by the end of the hand.

        Returns:
            The index the card was inserted at
        """
        if index is None:
            index = self.get_insert_index(card)
        else:
            self.sort_method = None
            if index < 0 or index > len(self.cards):
                logger.error(f"Invalid index {index} for hand of {len(self.cards)}, adding to end")
                index = len(self.cards)

        self.cards.insert(index, card)
        return index

    def move_card(self, from_index: int, to_index: int) -> bool:
        """Move a card to a new position. Disables sorting if the card moves.

        Returns:
            False if either index is out of range, True otherwise
        """
        size = len(self.cards)
        if not (0 <= from_index < size and 0 <= to_index < size):
            logger.error(f"Invalid move {from_index} -> {to_index} for hand of {size}")
            return False
        if from_index == to_index:
            return True

        card = self.cards.pop(from_index)
        self.cards.insert(to_index, card)
        self.sort_method = None
        return True

    def index_of(self, card: Card) -> int | None:
        """Position of this exact card, or None if it is not in the hand."""
        for i, c in enumerate(self.cards):
            if c is card:
                return i
        return None

    def remove_at(self, index: int) -> Card | None:
        """Remove and return the card at ``index``. None if out of range."""
        if index < 0 or index >= len(self.cards):
            return None
        return self.cards.pop(index)

    def remove_card(self, card: Card) -> Card | None:
        """Remove and return ``card``. None if it is not in the hand."""
        index = self.index_of(card)
        if index is None:
            return None
        return self.cards.pop(index)

    def selected_cards(self) -> list[Card]:
        return [c for c in self.cards if c.is_selected]

    def clear(self) -> list[Card]:
        """Empty the hand and return what it held."""
        cards, self.cards = self.cards, []
        return cards
