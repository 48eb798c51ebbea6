"""Game API endpoints."""

import logging
import time
from random import Random
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from api.assets import card_back_url, card_image_url, card_text
from api.routes.stats import record_outcome
from api.schemas import (
    ActionRequest,
    CardResponse,
    GameStateResponse,
    HandResponse,
    NewGameRequest,
    NewGameResponse,
    RoundResultResponse,
)
from api.session import (
    SessionId,
    create_session,
    get_session_store,
    optional_session_id,
)
from core.cards import Card, Deck
from core.game import BlackjackGame, GameState
from core.hand import score
from core.outcome import Outcome
from core.player import Player

from config import config

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory game cache backed by the session store. Entries idle longer
# than the session TTL are dropped.
_games: dict[str, BlackjackGame] = {}
_last_used: dict[str, float] = {}

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


def _serialize_card(card: Card) -> str:
    """Serialize a card to its short code, e.g. '10H'."""
    return f"{card.display_label}{card.suit.name[0]}"


def _deserialize_card(code: str) -> Card:
    """Deserialize a card from its short code."""
    return Card.from_string(code)


def _serialize_game(game: BlackjackGame) -> dict[str, Any]:
    """Serialize game state for session storage."""
    return {
        "state": game._machine_state,
        "player_name": game.player.name,
        "hits_soft_17": game.hits_soft_17,
        "player_hand": [_serialize_card(c) for c in game.player.hand],
        "dealer_hand": [_serialize_card(c) for c in game.dealer.hand],
        "deck": [_serialize_card(c) for c in game.deck],
        "player_natural": game.player_natural,
        "dealer_natural": game.dealer_natural,
        "outcome": game.outcome.name if game.outcome else None,
    }


def _deserialize_game(data: dict[str, Any]) -> BlackjackGame:
    """Restore game from session data."""
    game = BlackjackGame(
        player_name=data["player_name"],
        hits_soft_17=data["hits_soft_17"],
    )

    # Restore state machine state
    game._machine_state = data["state"]

    game.player.hand.cards = [_deserialize_card(c) for c in data["player_hand"]]
    game.dealer.hand.cards = [_deserialize_card(c) for c in data["dealer_hand"]]
    game.deck = Deck([_deserialize_card(c) for c in data["deck"]], rng=game.rng)
    game.player_natural = data["player_natural"]
    game.dealer_natural = data["dealer_natural"]
    game.outcome = Outcome[data["outcome"]] if data["outcome"] else None

    return game


async def _load_game(session_id: str) -> BlackjackGame | None:
    """Load game from session store."""
    store = await get_session_store()
    session_data = await store.get(session_id)
    if session_data and SESSION_KEY_GAME in session_data:
        return _deserialize_game(session_data[SESSION_KEY_GAME])
    return None


async def _save_game(session_id: str, game: BlackjackGame) -> None:
    """Save game to session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    session_data[SESSION_KEY_GAME] = _serialize_game(game)
    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    session_data.setdefault(SESSION_KEY_CREATED_AT, int(time.time()))
    await store.set(session_id, session_data)


def _forget_game(session_id: str) -> None:
    _games.pop(session_id, None)
    _last_used.pop(session_id, None)


def _cache_game(session_id: str, game: BlackjackGame) -> None:
    """Cache a game and drop games whose sessions have gone idle."""
    now = time.monotonic()
    for idle_id in [sid for sid, used in _last_used.items() if now - used > config.session_ttl]:
        logger.debug("Dropping idle game for session %s", idle_id)
        _forget_game(idle_id)
    _games[session_id] = game
    _last_used[session_id] = now


async def _get_game(session_id: str) -> BlackjackGame:
    """Get the game for a live session from cache or the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id)
    if not session_data or SESSION_KEY_GAME not in session_data:
        # Session expired or never dealt
        _forget_game(session_id)
        raise HTTPException(status_code=404, detail="No game for this session")

    game = _games.get(session_id) or _deserialize_game(session_data[SESSION_KEY_GAME])
    _cache_game(session_id, game)
    return game


def _card_to_response(card: Card, hidden: bool = False) -> CardResponse:
    """Convert a Card to CardResponse, masking it when face down."""
    if hidden:
        return CardResponse(
            rank="?",
            suit="?",
            suit_symbol="?",
            value=0,
            image_url=card_back_url(),
            text="Hidden card",
            hidden=True,
        )
    return CardResponse(
        rank=card.display_label,
        suit=card.suit.value,
        suit_symbol=str(card.suit),
        value=card.point_value,
        image_url=card_image_url(card),
        text=card_text(card),
    )


def _hand_to_response(player: Player, hide_hole_card: bool = False) -> HandResponse:
    """Convert a Player's hand to HandResponse."""
    cards = player.hand.cards
    if hide_hole_card:
        showing = score(cards[:1])
        return HandResponse(
            name=player.name,
            cards=[
                _card_to_response(c, hidden=i == 1)
                for i, c in enumerate(cards)
            ],
            value=showing.total if cards else None,
            is_soft=showing.is_soft,
            is_blackjack=False,
            is_busted=False,
        )

    return HandResponse(
        name=player.name,
        cards=[_card_to_response(c) for c in cards],
        value=player.hand.value,
        is_soft=player.hand.is_soft,
        is_blackjack=player.hand.is_natural,
        is_busted=player.hand.is_busted,
    )


def _game_state_response(game: BlackjackGame) -> GameStateResponse:
    """Convert game state to response."""
    result = None
    if game.outcome is not None:
        result = RoundResultResponse(
            outcome=game.outcome.name,
            result=game.outcome.result,
            message=game.outcome.message,
            player_score=game.player.hand.value,
            dealer_score=game.dealer.hand.value,
        )

    return GameStateResponse(
        state=game.state.name,
        player_hand=_hand_to_response(game.player),
        dealer_hand=_hand_to_response(game.dealer, hide_hole_card=game.hole_card_hidden),
        cards_remaining=len(game.deck),
        can_hit=game.can_hit,
        can_stand=game.can_stand,
        can_deal=game.can_deal,
        result=result,
    )


def new_game(player_name: str, rng: Random | None = None) -> BlackjackGame:
    """Create a game with the configured table rules."""
    return BlackjackGame(
        player_name=player_name,
        hits_soft_17=config.game.dealer_hits_soft_17,
        rng=rng,
    )


async def _finish_step(session_id: str, game: BlackjackGame, was_over: bool) -> None:
    """Persist the game and tally a round that just finished."""
    if not was_over and game.state == GameState.ROUND_COMPLETE and game.outcome is not None:
        logger.info(
            "Round finished for %s: %s (%d vs %d)",
            game.player.name,
            game.outcome.name,
            game.player.hand.value,
            game.dealer.hand.value,
        )
        await record_outcome(session_id, game.outcome)
    await _save_game(session_id, game)


@router.post("/new")
async def create_game(
    request: NewGameRequest,
    session_id: Annotated[str | None, Depends(optional_session_id)],
) -> NewGameResponse:
    """Create a game session and deal the first round."""
    if session_id is None:
        session_id = await create_session()

    game = new_game(request.player_name)
    _cache_game(session_id, game)
    logger.debug("New game for %s", request.player_name)

    game.start_round()
    await _finish_step(session_id, game, was_over=False)

    return NewGameResponse(session_id=session_id, player_name=game.player.name)


@router.get("/state")
async def get_state(
    session_id: SessionId,
) -> GameStateResponse:
    """Get current game state."""
    game = await _get_game(session_id)
    return _game_state_response(game)


@router.post("/round")
async def next_round(
    session_id: SessionId,
) -> GameStateResponse:
    """Deal the next round for the same player."""
    game = await _get_game(session_id)

    if not game.start_round():
        raise HTTPException(status_code=400, detail="Round already in progress")

    await _finish_step(session_id, game, was_over=False)
    return _game_state_response(game)


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: SessionId,
) -> GameStateResponse:
    """Execute a player action."""
    game = await _get_game(session_id)

    actions = {
        "hit": game.hit,
        "stand": game.stand,
    }

    was_over = game.is_round_over
    if not actions[request.action]():
        raise HTTPException(status_code=400, detail=f"Cannot {request.action} now")

    await _finish_step(session_id, game, was_over=was_over)
    return _game_state_response(game)
