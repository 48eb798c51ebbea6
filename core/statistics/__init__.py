"""Statistics kept across rounds."""

from core.statistics.tally import GameStats

__all__ = [
    "GameStats",
]
