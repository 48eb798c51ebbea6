"""WebSocket game table with paced card dealing."""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from api.routes.game import _game_state_response, new_game
from api.routes.stats import record_outcome
from api.session import extract_session_id
from core.exceptions import BlackjackError
from core.game import BlackjackGame, GameEvent

from config import PacingConfig, config

logger = logging.getLogger(__name__)

router = APIRouter()


class DealPacer:
    """
    Delay schedule for replaying engine events.

    The engine finishes every draw before returning, so pacing only spaces
    out events that already happened; it never lets two draws overlap.
    """

    def __init__(self, pacing: PacingConfig | None = None) -> None:
        self._pacing = pacing or config.pacing

    def delays(self, events: list[GameEvent], opening_deal: bool = False) -> list[float]:
        """Return the pause in seconds before sending each event."""
        if not self._pacing.enabled:
            return [0.0] * len(events)

        delays = []
        initial = list(self._pacing.initial_deal_ms)
        previous_ms = 0
        for event in events:
            if not event.is_draw:
                delays.append(0.0)
                continue
            if opening_deal and initial:
                # Opening deal times are offsets from the start of the round
                target_ms = initial.pop(0)
                delays.append(max(target_ms - previous_ms, 0) / 1000)
                previous_ms = target_ms
            elif event.data.get("hand") == "dealer":
                delays.append(self._pacing.dealer_draw_ms / 1000)
            else:
                delays.append(self._pacing.player_hit_ms / 1000)
        return delays


class ConnectionManager:
    """Manage WebSocket connections and their games."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._games: dict[str, BlackjackGame] = {}

    async def connect(self, websocket: WebSocket, session_id: str) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        self._connections[session_id] = websocket

    def disconnect(self, session_id: str) -> None:
        """Remove a connection and the game played over it."""
        self._connections.pop(session_id, None)
        self._games.pop(session_id, None)

    def get_game(self, session_id: str) -> BlackjackGame | None:
        return self._games.get(session_id)

    def start_game(self, session_id: str, player_name: str) -> BlackjackGame:
        """Seat a player at a new table for the session."""
        game = new_game(player_name)
        self._games[session_id] = game
        return game

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific session."""
        websocket = self._connections.get(session_id)
        if websocket is not None:
            await websocket.send_json(message)

    @property
    def active_connections(self) -> int:
        """Return number of active connections."""
        return len(self._connections)


# Global connection manager
manager = ConnectionManager()
pacer = DealPacer()


def _state_message(game: BlackjackGame) -> dict[str, Any]:
    return {"type": "state_update", "state": _game_state_response(game).model_dump()}


def _event_message(event: GameEvent) -> dict[str, Any]:
    return {
        "type": "event",
        "event_type": event.event_type.name,
        "data": event.data,
    }


async def _run_step(session_id: str, game: BlackjackGame, step: str) -> None:
    """Run one engine step, then stream its events with pacing."""
    opening_deal = step in ("start", "new_round")
    # A new deal always starts an untallied round
    was_over = game.is_round_over and not opening_deal

    steps = {
        "start": game.start_round,
        "new_round": game.start_round,
        "hit": game.hit,
        "stand": game.stand,
    }
    events: list[GameEvent] = []
    game.subscribe(events.append)
    try:
        ok = steps[step]()
    finally:
        game.events.unsubscribe(events.append)

    for delay, event in zip(pacer.delays(events, opening_deal=opening_deal), events):
        if delay:
            await asyncio.sleep(delay)
        await manager.send_message(session_id, _event_message(event))

    if ok and not was_over and game.is_round_over and game.outcome is not None:
        await record_outcome(session_id, game.outcome)

    await manager.send_message(session_id, _state_message(game))


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for a paced game.

    The path carries the signed session token issued by the HTTP API; other
    values are refused with a policy-violation close.

    Messages from client:
    - {"type": "start", "player_name": "Ada"}
    - {"type": "action", "action": "hit"|"stand"}
    - {"type": "new_round"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}}
    - {"type": "error", "message": "..."}
    """
    if extract_session_id(session_id) is None:
        logger.info("Refusing WebSocket with invalid session token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, session_id)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_message(session_id, {"type": "error", "message": "Invalid JSON"})
                continue

            msg_type = message.get("type")
            game = manager.get_game(session_id)

            if msg_type == "start":
                try:
                    game = manager.start_game(
                        session_id,
                        message.get("player_name", config.game.default_player_name),
                    )
                except ValueError as e:
                    await manager.send_message(session_id, {"type": "error", "message": str(e)})
                    continue
                await _run_step(session_id, game, "start")

            elif game is None:
                await manager.send_message(session_id, {
                    "type": "error",
                    "message": "No game started",
                })

            elif msg_type == "get_state":
                await manager.send_message(session_id, _state_message(game))

            elif msg_type == "new_round":
                await _run_step(session_id, game, "new_round")

            elif msg_type == "action":
                action = message.get("action")
                if action not in ("hit", "stand"):
                    await manager.send_message(session_id, {
                        "type": "error",
                        "message": f"Unknown action: {action}",
                    })
                    continue
                await _run_step(session_id, game, action)

            else:
                await manager.send_message(session_id, {
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}",
                })

    except WebSocketDisconnect:
        logger.debug("WebSocket %s disconnected", session_id)
    except BlackjackError as e:
        logger.error("Round aborted for %s: %s", session_id, e)
        await manager.send_message(session_id, {"type": "error", "message": str(e)})
    finally:
        manager.disconnect(session_id)
