"""Exceptions raised by the blackjack core."""


class BlackjackError(Exception):
    """Base class for all core errors."""


class EmptyDeckError(BlackjackError, IndexError):
    """A card was drawn from a deck with no cards left.

    A two-player single-deck round never exhausts the deck, so this signals a
    logic error. The round must be abandoned, not retried.
    """


class InvalidHandError(BlackjackError, ValueError):
    """A hand contains something that is not a well-formed card."""
