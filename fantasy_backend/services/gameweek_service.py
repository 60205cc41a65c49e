"""
Gameweek lifecycle: transfer window check and status reconciliation.

Statuses move upcoming -> active -> locked from real match completion.
finalized is terminal and only ever set by an explicit finalize_gameweek call.
"""
from __future__ import annotations

import logging
import sqlite3

from fantasy_backend.models import GameweekStatus
from fantasy_backend.persistence.repositories import GameweekRepository, RealMatchRepository

logger = logging.getLogger(__name__)


# ---------- Exceptions ----------


class GameweekNotFoundError(ValueError):
    """No gameweek with that number."""


class GameweekTransitionError(ValueError):
    """Invalid gameweek status transition (e.g. upcoming -> finalized)."""


# ---------- GameweekService ----------


class GameweekService:
    """
    Domain logic for gameweeks. Persistence is delegated to repositories;
    callers own the transaction.
    """

    def __init__(self) -> None:
        self._gameweek_repo = GameweekRepository()
        self._match_repo = RealMatchRepository()

    def transfers_allowed(self, conn: sqlite3.Connection) -> bool:
        """
        True iff the earliest active-or-upcoming gameweek is upcoming.
        With no such gameweek the window is treated as open.
        """
        current = self._gameweek_repo.get_earliest_open(conn)
        status = current.status if current is not None else GameweekStatus.UPCOMING.value
        return status == GameweekStatus.UPCOMING.value

    def current_transfer_gameweek(self, conn: sqlite3.Connection) -> int | None:
        """Number of the earliest active-or-upcoming gameweek, if any."""
        current = self._gameweek_repo.get_earliest_open(conn)
        return current.gameweek_number if current is not None else None

    def advance_gameweek_statuses(self, conn: sqlite3.Connection) -> list[tuple[int, str, str]]:
        """
        Reconcile every non-finalized gameweek with its real match results,
        in ascending gameweek order:
          - all matches completed (and at least one) -> locked
          - some completed and status upcoming -> active
          - otherwise unchanged
        Idempotent. Returns (gameweek_number, old_status, new_status) for each change.
        """
        changes: list[tuple[int, str, str]] = []
        for gw in self._gameweek_repo.list_not_finalized(conn):
            total, completed = self._match_repo.count_by_gameweek(conn, gw.gameweek_number)
            if total > 0 and completed == total:
                if gw.status == GameweekStatus.LOCKED.value:
                    continue
                if self._gameweek_repo.update_status(conn, gw.gameweek_number, GameweekStatus.LOCKED.value):
                    changes.append((gw.gameweek_number, gw.status, GameweekStatus.LOCKED.value))
            elif completed > 0 and gw.status == GameweekStatus.UPCOMING.value:
                if self._gameweek_repo.update_status(
                    conn,
                    gw.gameweek_number,
                    GameweekStatus.ACTIVE.value,
                    from_status=GameweekStatus.UPCOMING.value,
                ):
                    changes.append((gw.gameweek_number, gw.status, GameweekStatus.ACTIVE.value))
        for number, old, new in changes:
            logger.info("gameweek %s status %s -> %s", number, old, new)
        return changes

    def finalize_gameweek(self, conn: sqlite3.Connection, gameweek_number: int) -> None:
        """Externally triggered terminal transition. Only a locked gameweek can be finalized."""
        gw = self._gameweek_repo.get(conn, gameweek_number)
        if gw is None:
            raise GameweekNotFoundError(f"Gameweek not found: {gameweek_number}")
        if gw.status != GameweekStatus.LOCKED.value:
            raise GameweekTransitionError(
                f"Invalid transition: {gw.status} -> finalized. Gameweek must be locked first"
            )
        self._gameweek_repo.update_status(
            conn, gameweek_number, GameweekStatus.FINALIZED.value, from_status=GameweekStatus.LOCKED.value
        )
        logger.info("gameweek %s finalized", gameweek_number)
