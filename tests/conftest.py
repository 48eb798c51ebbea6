"""Pytest fixtures for blackjack table tests."""

import pytest
from random import Random

from core.cards import Card, Suit, create_deck
from core.hand import Hand
from core.game import BlackjackGame


def _hand_of(*labels: str) -> Hand:
    """Build a hand from rank labels, cycling through suits."""
    suits = list(Suit)
    hand = Hand()
    for i, label in enumerate(labels):
        hand.add_card(Card.from_string(f"{label}{suits[i % 4].name[0]}"))
    return hand


@pytest.fixture
def hand_of():
    """Factory building a hand from rank labels, e.g. hand_of("A", "K")."""
    return _hand_of


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A fresh deck drawing with the seeded generator."""
    return create_deck(rng=rng)


@pytest.fixture
def empty_hand():
    """An empty hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return _hand_of("A", "K")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return _hand_of("A", "6")


@pytest.fixture
def hard_17_hand():
    """A hard 17 hand (10-6-A)."""
    return _hand_of("10", "6", "A")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return _hand_of("10", "6", "K")


@pytest.fixture
def game(rng):
    """A new game instance."""
    return BlackjackGame(player_name="Tester", rng=rng)
