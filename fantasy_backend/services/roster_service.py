"""
Roster rules for fantasy teams: squad value, formation, transfers.
"""
from __future__ import annotations

import logging
import sqlite3
from decimal import Decimal

from fantasy_backend.persistence.repositories import (
    FantasyTeamRepository,
    PlayerRepository,
    RosterRepository,
    TransactionRepository,
)
from fantasy_backend.models import Transaction
from fantasy_backend.services.formation import count_positions, is_valid_formation, render_formation
from fantasy_backend.services.gameweek_service import GameweekService

logger = logging.getLogger(__name__)

TRANSFER = "transfer"


# ---------- Exceptions ----------


class FantasyTeamNotFoundError(ValueError):
    """No fantasy team with that id."""


class RosterError(ValueError):
    """Roster change refers to a player that is missing from the roster or the database."""


class TransferNotAllowedError(ValueError):
    """Transfer window is closed (current gameweek is active)."""


# ---------- RosterService ----------


class RosterService:
    def __init__(self) -> None:
        self._team_repo = FantasyTeamRepository()
        self._roster_repo = RosterRepository()
        self._player_repo = PlayerRepository()
        self._transaction_repo = TransactionRepository()
        self._gameweeks = GameweekService()

    def team_value(self, conn: sqlite3.Connection, fantasy_team_id: str) -> Decimal:
        """Sum of player prices over the roster; 0 for an empty roster."""
        return sum(self._roster_repo.list_prices(conn, fantasy_team_id), Decimal("0"))

    def team_formation(self, conn: sqlite3.Connection, fantasy_team_id: str) -> str:
        """Starters rendered as DEF-MID-FWD, e.g. '4-4-2'."""
        positions = self._roster_repo.list_starter_positions(conn, fantasy_team_id)
        return render_formation(count_positions(positions))

    def validate_formation(self, conn: sqlite3.Connection, fantasy_team_id: str) -> bool:
        """1 GK, 3-5 DEF, 2-5 MID, 1-3 FWD and exactly 11 starters. Reports, never raises."""
        positions = self._roster_repo.list_starter_positions(conn, fantasy_team_id)
        return is_valid_formation(count_positions(positions), len(positions))

    def make_transfer(
        self,
        conn: sqlite3.Connection,
        fantasy_team_id: str,
        player_out_id: str,
        player_in_id: str,
    ) -> Transaction:
        """
        Swap player_out for player_in (keeping the starter flag) and log the transfer.
        Only while the transfer window is open. A player already on the roster
        violates the roster key; the caller's transaction then rolls back.
        """
        if self._team_repo.get(conn, fantasy_team_id) is None:
            raise FantasyTeamNotFoundError(f"Fantasy team not found: {fantasy_team_id}")
        if not self._gameweeks.transfers_allowed(conn):
            raise TransferNotAllowedError("Transfers are not allowed while the current gameweek is active")
        if player_in_id == player_out_id:
            raise RosterError(f"Player {player_in_id} cannot be transferred for themselves")
        entry = self._roster_repo.get(conn, fantasy_team_id, player_out_id)
        if entry is None:
            raise RosterError(f"Player {player_out_id} is not on roster {fantasy_team_id}")
        player_out = self._player_repo.get(conn, player_out_id)
        player_in = self._player_repo.get(conn, player_in_id)
        if player_in is None:
            raise RosterError(f"Player not found: {player_in_id}")
        self._roster_repo.remove(conn, fantasy_team_id, player_out_id)
        self._roster_repo.add(conn, fantasy_team_id, player_in_id, is_starter=entry.is_starter)
        txn = self._transaction_repo.create(
            conn,
            fantasy_team_id,
            TRANSFER,
            player_in_id=player_in_id,
            player_out_id=player_out_id,
            gameweek=self._gameweeks.current_transfer_gameweek(conn),
            price_in=player_in.price,
            price_out=player_out.price if player_out else None,
        )
        logger.info("team %s transferred %s out, %s in", fantasy_team_id, player_out_id, player_in_id)
        return txn
