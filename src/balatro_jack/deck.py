"""Draw pile for a game.

Every card in ``all_cards`` is in exactly one of ``available_cards`` (not yet
drawn, top of the deck at the end of the list) or ``used_cards`` (drawn
this blind). Membership is by identity.
"""

import logging
import random
from typing import Self

from balatro_jack.models import Card

logger = logging.getLogger(__name__)


class Deck:
    """Ordered pool of cards with draw/return/reset/shuffle."""

    def __init__(self, cards: list[Card], rng: random.Random | None = None):
        self.rng = rng if rng is not None else random.Random()
        self.all_cards: list[Card] = list(cards)
        self.available_cards: list[Card] = list(cards)
        self.used_cards: list[Card] = []
        self.shuffle()

    @classmethod
    def from_piles(
        cls,
        all_cards: list[Card],
        available_cards: list[Card],
        used_cards: list[Card],
        rng: random.Random | None = None,
    ) -> Self:
        """Rebuild a deck with explicit piles, keeping their order."""
        deck = cls([], rng)
        deck.all_cards = list(all_cards)
        deck.available_cards = list(available_cards)
        deck.used_cards = list(used_cards)
        return deck

    def __len__(self) -> int:
        return len(self.all_cards)

    @property
    def remaining(self) -> int:
        """Cards left to draw."""
        return len(self.available_cards)

    def shuffle(self) -> None:
        """Shuffle the cards left to draw in place."""
        self.rng.shuffle(self.available_cards)

    def draw_card(self) -> Card | None:
        """Draw the top card. Returns None when the deck is empty."""
        if not self.available_cards:
            logger.info("Deck is empty, nothing to draw")
            return None
        card = self.available_cards.pop()
        self.used_cards.append(card)
        return card

    def return_card(self, card: Card) -> bool:
        """Put a drawn card back on top of the deck.

        Returns False (and does nothing) if the card was not drawn.
        """
        if card not in self.used_cards:
            return False
        self.used_cards.remove(card)
        self.available_cards.append(card)
        return True

    def reset_deck(self) -> None:
        """Return every card to the draw pile and shuffle."""
        self.available_cards = list(self.all_cards)
        self.used_cards = []
        self.shuffle()

    def add_card(self, card: Card) -> bool:
        """Add a new card to the deck and reshuffle.

        Returns:
            True if added, False if the card is already part of the deck
        """
        if card in self.all_cards:
            logger.error(f"Card {card} already exists in the deck")
            return False
        self.all_cards.append(card)
        self.available_cards.append(card)
        self.shuffle()
        return True

    def remove_card(self, card: Card) -> bool:
        """Remove a card from the deck entirely, whichever pile it is in.

        Returns:
            True if removed, False if the card is not part of the deck
        """
        if card not in self.all_cards:
            logger.error(f"Card {card} does not exist in the deck")
            return False
        self.all_cards.remove(card)
        if card in self.available_cards:
            self.available_cards.remove(card)
        else:
            self.used_cards.remove(card)
        return True
