"""
League standings. rank is maintained outside this backend; this is a sorted
projection of fantasy teams and their owners, not a ranking algorithm.
"""
from __future__ import annotations

import sqlite3

from fantasy_backend.models import StandingRow
from fantasy_backend.persistence.repositories import LeagueRepository


class LeagueNotFoundError(ValueError):
    """No league with that id."""


class StandingsService:
    def __init__(self) -> None:
        self._league_repo = LeagueRepository()

    def league_standings(self, conn: sqlite3.Connection, league_id: str) -> list[StandingRow]:
        """Teams in the league with owner username, ascending by rank."""
        return self._league_repo.standings(conn, league_id)

    def assert_league_exists(self, conn: sqlite3.Connection, league_id: str) -> None:
        if self._league_repo.get(conn, league_id) is None:
            raise LeagueNotFoundError(f"League not found: {league_id}")
