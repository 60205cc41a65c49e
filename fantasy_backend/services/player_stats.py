"""
Player statistics: per-gameweek lookup and cumulative aggregation.

Cumulative stats are always recomputed from the full gameweek_scores history
of a player, never adjusted by deltas, so the incremental write hook and the
full refresh cannot drift apart.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone

from fantasy_backend.models import GameweekScore, GameweekStats, PlayerTotals
from fantasy_backend.persistence.repositories import GameweekScoreRepository, PlayerRepository

logger = logging.getLogger(__name__)


class PlayerStatsService:
    def __init__(self) -> None:
        self._player_repo = PlayerRepository()
        self._score_repo = GameweekScoreRepository()

    def install(self, score_repo: GameweekScoreRepository) -> GameweekScoreRepository:
        """Register on_gameweek_score_written as a write hook on score_repo."""
        score_repo.register_write_hook(self.on_gameweek_score_written)
        return score_repo

    def player_gameweek_stats(self, conn: sqlite3.Connection, player_id: str, gameweek: int) -> GameweekStats:
        """Stats for one player and gameweek; all zero/False when there is no record."""
        score = self._score_repo.get(conn, player_id, gameweek)
        if score is None:
            return GameweekStats()
        return score.stats

    def refresh_all_player_stats(self, conn: sqlite3.Connection) -> int:
        """
        Full recomputation of every player's cumulative stats
        (points, games played, goals, assists, clean sheets, cards).
        Players with no rows get zeros. Returns the number of players updated.
        """
        totals = self._score_repo.totals_by_player(conn)
        player_ids = self._player_repo.list_ids(conn)
        for pid in player_ids:
            self._player_repo.update_totals(conn, pid, totals.get(pid, PlayerTotals()))
        logger.info("refreshed cumulative stats for %d players (%d with scores)", len(player_ids), len(totals))
        return len(player_ids)

    def on_gameweek_score_written(self, conn: sqlite3.Connection, score: GameweekScore) -> None:
        """
        Write hook: recompute total_points, goals_scored and assists for the
        affected player from all of their rows and stamp updated_at.
        Runs inside the transaction of the write that fired it.
        """
        totals = self._score_repo.totals_for_player(conn, score.player_id)
        self._player_repo.update_scoring_totals(
            conn,
            score.player_id,
            total_points=totals.total_points,
            goals_scored=totals.goals_scored,
            assists=totals.assists,
            updated_at_iso=datetime.now(timezone.utc).isoformat(),
        )
        logger.debug(
            "player %s totals recomputed after gw %s write: %s pts",
            score.player_id, score.gameweek, totals.total_points,
        )
