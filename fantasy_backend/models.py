"""
Data models for the fantasy football backend.
Domain objects only. No persistence or API logic.

Reference data (clubs, players, real matches, gameweek scores) is maintained by
admins or the service identity; users own fantasy teams, rosters and transactions.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


# ---------- Player position ----------
class Position(str, Enum):
    GK = "GK"
    DEF = "DEF"
    MID = "MID"
    FWD = "FWD"


# ---------- Gameweek status ----------
class GameweekStatus(str, Enum):
    """Gameweek lifecycle: upcoming -> active -> locked -> finalized."""
    UPCOMING = "upcoming"    # Transfers open
    ACTIVE = "active"        # Some matches completed
    LOCKED = "locked"        # All matches completed, awaiting finalization
    FINALIZED = "finalized"  # Terminal; set externally only


# ---------- Real match status ----------
class RealMatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    POSTPONED = "postponed"


# ---------- User role ----------
class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


# ---------- User ----------
@dataclass
class User:
    """An app user. role is 'user' or 'admin'; password_hash is never plain text."""
    id: str
    username: str
    created_at: datetime
    role: str = UserRole.USER.value
    password_hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Club (real-world team) ----------
@dataclass
class Club:
    id: str
    name: str
    short_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "short_name": self.short_name}


# ---------- Player ----------
@dataclass
class Player:
    """
    A real-world player. Cumulative stats are derived from gameweek_scores
    and only ever written by the stats aggregation.
    """
    id: str
    name: str
    position: str  # Position value
    price: Decimal
    team_id: str | None = None
    total_points: int = 0
    games_played: int = 0
    goals_scored: int = 0
    assists: int = 0
    clean_sheets: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "price": str(self.price),
            "team_id": self.team_id,
            "total_points": self.total_points,
            "games_played": self.games_played,
            "goals_scored": self.goals_scored,
            "assists": self.assists,
            "clean_sheets": self.clean_sheets,
            "yellow_cards": self.yellow_cards,
            "red_cards": self.red_cards,
        }
        if self.updated_at is not None:
            d["updated_at"] = self.updated_at.isoformat()
        return d


# ---------- Per-gameweek stats ----------
@dataclass
class GameweekStats:
    """Statistics for one player in one gameweek. All-zero when the player has no record."""
    minutes_played: int = 0
    goals: int = 0
    assists: int = 0
    clean_sheet: bool = False
    yellow_cards: int = 0
    red_cards: int = 0
    saves: int = 0
    bonus_points: int = 0
    total_points: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "minutes_played": self.minutes_played,
            "goals": self.goals,
            "assists": self.assists,
            "clean_sheet": self.clean_sheet,
            "yellow_cards": self.yellow_cards,
            "red_cards": self.red_cards,
            "saves": self.saves,
            "bonus_points": self.bonus_points,
            "total_points": self.total_points,
        }


@dataclass
class PlayerTotals:
    """Cumulative stats aggregated from a player's gameweek_scores rows."""
    total_points: int = 0
    games_played: int = 0
    goals_scored: int = 0
    assists: int = 0
    clean_sheets: int = 0
    yellow_cards: int = 0
    red_cards: int = 0


@dataclass
class GameweekScore:
    """One gameweek_scores row. Unique per (player_id, gameweek)."""
    id: str
    player_id: str
    gameweek: int
    stats: GameweekStats

    def to_dict(self) -> dict[str, Any]:
        d = {"id": self.id, "player_id": self.player_id, "gameweek": self.gameweek}
        d.update(self.stats.to_dict())
        return d


# ---------- Gameweek ----------
@dataclass
class Gameweek:
    gameweek_number: int
    status: str  # GameweekStatus value
    start_date: datetime | None = None
    end_date: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "gameweek_number": self.gameweek_number,
            "status": self.status,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


# ---------- Real match ----------
@dataclass
class RealMatch:
    """A real-world fixture within a gameweek."""
    id: str
    gameweek: int
    home_team_id: str
    away_team_id: str
    status: str  # RealMatchStatus value
    home_score: int | None = None
    away_score: int | None = None


# ---------- League ----------
@dataclass
class League:
    id: str
    name: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "created_at": self.created_at.isoformat()}


# ---------- Fantasy team ----------
@dataclass
class FantasyTeam:
    """
    A user's fantasy team within a league.
    total_points, rank and gameweek_points are maintained outside this backend.
    """
    id: str
    user_id: str
    team_name: str
    league_id: str | None
    total_points: int = 0
    rank: int | None = None
    gameweek_points: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "team_name": self.team_name,
            "league_id": self.league_id,
            "total_points": self.total_points,
            "rank": self.rank,
            "gameweek_points": self.gameweek_points,
        }


# ---------- Roster entry ----------
@dataclass
class RosterEntry:
    """(fantasy team, player, starter flag). A player appears at most once per team."""
    fantasy_team_id: str
    player_id: str
    is_starter: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "fantasy_team_id": self.fantasy_team_id,
            "player_id": self.player_id,
            "is_starter": self.is_starter,
        }


# ---------- Transaction ----------
@dataclass
class Transaction:
    """Transfer log entry for a fantasy team."""
    id: str
    fantasy_team_id: str
    transaction_type: str
    player_in_id: str | None
    player_out_id: str | None
    gameweek: int | None
    price_in: Decimal | None
    price_out: Decimal | None
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fantasy_team_id": self.fantasy_team_id,
            "transaction_type": self.transaction_type,
            "player_in_id": self.player_in_id,
            "player_out_id": self.player_out_id,
            "gameweek": self.gameweek,
            "price_in": str(self.price_in) if self.price_in is not None else None,
            "price_out": str(self.price_out) if self.price_out is not None else None,
            "created_at": self.created_at.isoformat(),
        }


# ---------- League standings row ----------
@dataclass
class StandingRow:
    fantasy_team_id: str
    team_name: str
    username: str
    total_points: int
    rank: int | None
    gameweek_points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "fantasy_team_id": self.fantasy_team_id,
            "team_name": self.team_name,
            "username": self.username,
            "total_points": self.total_points,
            "rank": self.rank,
            "gameweek_points": self.gameweek_points,
        }
