"""Win/loss/tie tally across rounds."""

from dataclasses import asdict, dataclass
from typing import Any

from core.outcome import Outcome


@dataclass
class GameStats:
    """Cumulative results for one player."""

    games_played: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0

    def record(self, outcome: Outcome) -> None:
        """Count one finished round."""
        self.games_played += 1
        result = outcome.result
        if result == "win":
            self.wins += 1
        elif result == "tie":
            self.ties += 1
        else:
            self.losses += 1

    @property
    def win_rate(self) -> float:
        """Return wins as a fraction of games played (0.0 before any game)."""
        if self.games_played == 0:
            return 0.0
        return self.wins / self.games_played

    def reset(self) -> None:
        self.games_played = 0
        self.wins = 0
        self.losses = 0
        self.ties = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "GameStats":
        """Restore a tally, treating missing counters as zero."""
        data = data or {}
        return cls(
            games_played=int(data.get("games_played") or 0),
            wins=int(data.get("wins") or 0),
            losses=int(data.get("losses") or 0),
            ties=int(data.get("ties") or 0),
        )
