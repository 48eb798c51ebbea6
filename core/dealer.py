"""Dealer drawing policy."""

from typing import Iterable

from core.cards import Card
from core.hand import Hand, score

DEALER_STAND_TOTAL = 17


def dealer_should_draw(
    hand: Hand | Iterable[Card],
    hits_soft_17: bool = True,
) -> bool:
    """
    Determine if the dealer must take another card.

    The dealer draws on 16 or less and stands on hard 17 or more. A soft 17
    is drawn to unless ``hits_soft_17`` is False.
    """
    total, is_soft = score(hand)
    if total < DEALER_STAND_TOTAL:
        return True
    return total == DEALER_STAND_TOTAL and is_soft and hits_soft_17
