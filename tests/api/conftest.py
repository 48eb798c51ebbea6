"""Fixtures for API tests."""

import pytest
import pytest_asyncio
from random import Random
from httpx import AsyncClient, ASGITransport

from api import websocket
from api.main import app
from api.routes import game as game_routes
from api.session import InMemorySessionStore, get_session_signer, set_session_store
from config import PacingConfig
from core.cards import Card, Deck, create_deck
from core.game import BlackjackGame


class TopCardRandom(Random):
    """Generator that always picks the first remaining card."""

    def randrange(self, *args, **kwargs):
        return 0


@pytest.fixture(autouse=True)
def memory_sessions():
    """Use a fresh in-memory session store and game cache per test."""
    store = InMemorySessionStore()
    set_session_store(store)
    game_routes._games.clear()
    game_routes._last_used.clear()
    yield store
    set_session_store(None)
    game_routes._games.clear()
    game_routes._last_used.clear()


@pytest.fixture(autouse=True)
def no_pacing(monkeypatch):
    """Stream websocket events without delays."""
    monkeypatch.setattr(websocket, "pacer", websocket.DealPacer(PacingConfig(enabled=False)))


@pytest.fixture
def session_token():
    """Sign a raw session id the way the API issues them."""
    return get_session_signer().sign


@pytest.fixture
def stack_deck(monkeypatch):
    """
    Make new games deal the given cards in order.

    Deal order is player, dealer, player, dealer, then any hits.
    """

    def stack(*codes: str) -> None:
        top = [Card.from_string(code) for code in codes]
        stacked = top + [c for c in create_deck() if c not in top]
        monkeypatch.setattr(
            "core.game.engine.create_deck",
            lambda rng=None: Deck(stacked, rng=rng),
        )
        monkeypatch.setattr(
            game_routes,
            "new_game",
            lambda player_name, rng=None: BlackjackGame(player_name=player_name, rng=TopCardRandom()),
        )
        monkeypatch.setattr(
            websocket,
            "new_game",
            lambda player_name, rng=None: BlackjackGame(player_name=player_name, rng=TopCardRandom()),
        )

    return stack


@pytest_asyncio.fixture
async def client():
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
