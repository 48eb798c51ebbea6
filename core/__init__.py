"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Deck, Rank, Suit, create_deck, draw
from core.dealer import dealer_should_draw
from core.exceptions import BlackjackError, EmptyDeckError, InvalidHandError
from core.hand import Hand, Score, score
from core.outcome import Outcome, resolve_outcome
from core.player import Player

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "Hand",
    "Score",
    "Player",
    "Outcome",
    "create_deck",
    "draw",
    "score",
    "dealer_should_draw",
    "resolve_outcome",
    "BlackjackError",
    "EmptyDeckError",
    "InvalidHandError",
]
