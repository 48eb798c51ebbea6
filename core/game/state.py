"""Game state enumeration."""

from enum import Enum, auto


class GameState(Enum):
    """
    Round state machine states.

    Flow: WAITING_TO_DEAL → DEALING → PLAYER_TURN → DEALER_TURN → RESOLVING → ROUND_COMPLETE
    """

    # No round dealt yet
    WAITING_TO_DEAL = auto()

    # Initial four cards being dealt
    DEALING = auto()

    # Player hits or stands
    PLAYER_TURN = auto()

    # Dealer draws per house policy
    DEALER_TURN = auto()

    # Determining the outcome
    RESOLVING = auto()

    # Round finished, ready for next
    ROUND_COMPLETE = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

