"""Card and Deck classes - immutable cards, a per-round deck, and the draw."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import TYPE_CHECKING, Iterator

from core.exceptions import EmptyDeckError

if TYPE_CHECKING:
    from core.hand import Hand


class Suit(Enum):
    """Card suits."""

    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    SPADES = "Spades"

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, Ace low."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }.get(self, str(self.value))

    @property
    def point_value(self) -> int:
        """Return the base point value (Ace = 1, face cards = 10)."""
        return min(self.value, 10)


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def display_label(self) -> str:
        """Return the printed rank: "A", "2".."10", "J", "Q" or "K"."""
        return str(self.rank)

    @property
    def point_value(self) -> int:
        """Return the base point value; scoring may count an Ace as 11."""
        return self.rank.point_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank is Rank.ACE

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like 'A♠', 'AS', '10h'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {str(rank): rank for rank in Rank}
        rank_map["T"] = Rank.TEN

        suit_map = {
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


class Deck:
    """An ordered single deck that only ever shrinks.

    Build one per round with ``create_deck()``; order carries no meaning and
    randomness comes from ``draw()``.
    """

    def __init__(
        self,
        cards: list[Card] | None = None,
        rng: Random | None = None,
    ) -> None:
        self._rng = rng or Random()
        self._cards: list[Card] = (
            list(cards) if cards is not None
            else [Card(rank, suit) for suit in Suit for rank in Rank]
        )

    def remove_at(self, index: int) -> Card:
        """Remove and return the card at ``index``, keeping the rest in order."""
        return self._cards.pop(index)

    @property
    def rng(self) -> Random:
        """Return the random generator draws use by default."""
        return self._rng

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards


def create_deck(rng: Random | None = None) -> Deck:
    """Return a fresh deck of all 52 cards, 4 suits by 13 ranks."""
    return Deck(rng=rng)


def draw(deck: Deck, hand: "Hand", rng: Random | None = None) -> Card:
    """
    Move one uniformly random card from ``deck`` to ``hand``.

    The index is drawn uniformly from ``[0, len(deck))`` and the card is
    removed in order, so the cards left behind keep their relative order.

    Args:
        deck: Deck to draw from (mutated)
        hand: Hand receiving the card (mutated)
        rng: Random generator (defaults to the deck's own)

    Returns:
        The drawn card

    Raises:
        EmptyDeckError: If the deck has no cards left
    """
    if deck.is_empty:
        raise EmptyDeckError("Cannot draw from empty deck")

    rng = rng or deck.rng
    card = deck.remove_at(rng.randrange(len(deck)))
    hand.add_card(card)
    return card
