"""Hand evaluation: blackjack totals and poker-style hand names.

The blackjack total decides whether a played hand busts. The poker-style
classification is only shown to the player.
"""

from collections import Counter
from collections.abc import Iterable

from balatro_jack.models import Card, HandType


def _blackjack_total(cards: Iterable[Card]) -> tuple[int, int]:
    """Return (total, aces still counted as 11)."""
    total = 0
    aces = 0

    for card in cards:
        if not card.is_playing_card:
            continue
        if card.is_ace:
            aces += 1
        total += card.base_value

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total, aces


def blackjack_score(cards: Iterable[Card]) -> int:
    """Blackjack total of a set of cards.

    Jokers and consumables are skipped. Aces count 11 and drop to 1 one at
    a time while the total is over 21.

    Example:
        [A♥, K♦, 5♣] -> 16
    """
    total, _ = _blackjack_total(cards)
    return total


def is_soft_hand(cards: Iterable[Card]) -> bool:
    """True if at least one Ace is still counted as 11."""
    _, soft_aces = _blackjack_total(cards)
    return soft_aces > 0


def is_bust(cards: Iterable[Card]) -> bool:
    return blackjack_score(cards) > 21


def classify_hand(cards: Iterable[Card]) -> HandType:
    """Name the poker hand formed by the playing cards among ``cards``.

    A flush is any five or more cards of one suit, contiguous or not.
    """
    cards = list(cards)
    if not cards:
        return HandType.NO_CARDS
    playing = [c for c in cards if c.is_playing_card]
    if not playing:
        return HandType.HIGH_CARD

    rank_counts = sorted(Counter(c.rank for c in playing).values(), reverse=True)
    max_same_suit = max(Counter(c.suit for c in playing).values())

    # Pad so the second-highest count can always be read
    top, second = (rank_counts + [0])[:2]

    if top >= 4:
        return HandType.FOUR_OF_A_KIND
    if top == 3 and second == 2:
        return HandType.FULL_HOUSE
    if max_same_suit >= 5:
        return HandType.FLUSH
    if top == 3:
        return HandType.THREE_OF_A_KIND
    if top == 2 and second == 2:
        return HandType.TWO_PAIR
    if top == 2:
        return HandType.PAIR
    return HandType.HIGH_CARD
