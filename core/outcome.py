"""Round outcome classification."""

from enum import Enum, auto

from core.hand import BLACKJACK


class Outcome(Enum):
    """How a round ended, from the player's point of view."""

    PLAYER_BUST_LOSS = auto()
    DEALER_BUST_WIN = auto()
    PLAYER_BLACKJACK_WIN = auto()
    DEALER_BLACKJACK_LOSS = auto()
    PUSH_BOTH_BLACKJACK = auto()
    PLAYER_WIN = auto()
    DEALER_WIN = auto()
    TIE = auto()

    @property
    def result(self) -> str:
        """Return the tally bucket: "win", "loss" or "tie"."""
        if self in _WINS:
            return "win"
        if self in _TIES:
            return "tie"
        return "loss"

    @property
    def message(self) -> str:
        """Return the line shown to the player."""
        return _MESSAGES[self]


_WINS = frozenset({Outcome.DEALER_BUST_WIN, Outcome.PLAYER_BLACKJACK_WIN, Outcome.PLAYER_WIN})
_TIES = frozenset({Outcome.PUSH_BOTH_BLACKJACK, Outcome.TIE})

_MESSAGES = {
    Outcome.PLAYER_BUST_LOSS: "Player Busted - Player loses!",
    Outcome.DEALER_BUST_WIN: "Dealer Busted! - Player wins!",
    Outcome.PLAYER_BLACKJACK_WIN: "Blackjack! Player wins!",
    Outcome.DEALER_BLACKJACK_LOSS: "Dealer has Blackjack! Player loses!",
    Outcome.PUSH_BOTH_BLACKJACK: "Both have Blackjack! It's a draw!",
    Outcome.PLAYER_WIN: "Player wins!",
    Outcome.DEALER_WIN: "Player loses!",
    Outcome.TIE: "It's a tie!",
}


def resolve_outcome(
    player_score: int,
    dealer_score: int,
    player_natural: bool = False,
    dealer_natural: bool = False,
) -> Outcome:
    """
    Classify a finished round.

    Checks run in order: player bust, naturals, dealer bust, then totals.
    A player bust loses whatever the dealer holds.

    Args:
        player_score: Player's final total
        dealer_score: Dealer's final total
        player_natural: Player was dealt a two-card 21
        dealer_natural: Dealer was dealt a two-card 21

    Returns:
        The round outcome

    Raises:
        ValueError: If a natural is flagged for a total other than 21
    """
    if player_natural and player_score != BLACKJACK:
        raise ValueError(f"Player natural must total 21, got {player_score}")
    if dealer_natural and dealer_score != BLACKJACK:
        raise ValueError(f"Dealer natural must total 21, got {dealer_score}")

    if player_score > BLACKJACK:
        return Outcome.PLAYER_BUST_LOSS

    if player_natural and dealer_natural:
        return Outcome.PUSH_BOTH_BLACKJACK
    if player_natural:
        return Outcome.PLAYER_BLACKJACK_WIN
    if dealer_natural:
        return Outcome.DEALER_BLACKJACK_LOSS

    if dealer_score > BLACKJACK:
        return Outcome.DEALER_BUST_WIN

    if player_score > dealer_score:
        return Outcome.PLAYER_WIN
    if dealer_score > player_score:
        return Outcome.DEALER_WIN
    return Outcome.TIE
