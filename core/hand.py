"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, NamedTuple

from core.cards import Card, Rank, Suit
from core.exceptions import InvalidHandError

BLACKJACK = 21


class Score(NamedTuple):
    """Point total of a hand and whether an Ace still counts as 11."""

    total: int
    is_soft: bool


def score(hand: "Hand | Iterable[Card]") -> Score:
    """
    Calculate the best total of a hand.

    Every Ace starts at 11; while the total is over 21, Aces are downgraded
    to 1 one at a time. The result may still exceed 21 (a bust), which is
    for the caller to detect.

    Raises:
        InvalidHandError: If an item is not a card with a valid rank and suit
    """
    total = 0
    aces = 0

    for card in hand:
        if not isinstance(card, Card):
            raise InvalidHandError(f"Not a card: {card!r}")
        if not isinstance(card.rank, Rank) or not isinstance(card.suit, Suit):
            raise InvalidHandError(f"Malformed card: {card!r}")

        if card.is_ace:
            aces += 1
            total += 11
        else:
            total += card.point_value

    # Reduce aces from 11 to 1 as needed
    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1

    return Score(total=total, is_soft=aces > 0)


@dataclass
class Hand:
    """An ordered, append-only run of cards held by one player."""

    cards: list[Card] = field(default_factory=list)

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def clear(self) -> None:
        """Remove all cards; only done when a new round starts."""
        self.cards.clear()

    @property
    def score(self) -> Score:
        return score(self.cards)

    @property
    def value(self) -> int:
        """Return the best total, see ``score``."""
        return self.score.total

    @property
    def is_soft(self) -> bool:
        return self.score.is_soft

    @property
    def is_natural(self) -> bool:
        """Check if the hand is a natural blackjack (21 with 2 cards)."""
        return len(self.cards) == 2 and self.value == BLACKJACK

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > BLACKJACK

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_natural:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value})"
