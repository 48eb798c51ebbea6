"""Statistics API endpoints."""

import time

from fastapi import APIRouter

from api.schemas import StatsResponse
from api.session import SessionId, get_session_store
from core.outcome import Outcome
from core.statistics import GameStats

router = APIRouter()

# Session data keys
SESSION_KEY_STATS = "stats"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


async def load_stats(session_id: str) -> GameStats:
    """Load the tally from the session store (zeros if none yet)."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    return GameStats.from_dict(session_data.get(SESSION_KEY_STATS))


async def save_stats(session_id: str, stats: GameStats) -> None:
    """Save the tally to the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    session_data[SESSION_KEY_STATS] = stats.to_dict()
    session_data[SESSION_KEY_LAST_ACTIVITY] = int(time.time())
    await store.set(session_id, session_data)


async def record_outcome(session_id: str, outcome: Outcome) -> GameStats:
    """Add one finished round to the session tally."""
    stats = await load_stats(session_id)
    stats.record(outcome)
    await save_stats(session_id, stats)
    return stats


def _stats_response(stats: GameStats) -> StatsResponse:
    return StatsResponse(
        games_played=stats.games_played,
        wins=stats.wins,
        losses=stats.losses,
        ties=stats.ties,
        win_rate=round(stats.win_rate, 4),
    )


@router.get("")
async def get_stats(
    session_id: SessionId,
) -> StatsResponse:
    """Get games played, wins, losses and ties for the session."""
    return _stats_response(await load_stats(session_id))


@router.post("/reset")
async def reset_stats(
    session_id: SessionId,
) -> StatsResponse:
    """Zero the session tally."""
    stats = GameStats()
    await save_stats(session_id, stats)
    return _stats_response(stats)
