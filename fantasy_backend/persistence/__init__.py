"""
Persistence layer for fantasy football data.
No business logic, only read/write interfaces and the unit of work.
"""
from .db import get_connection, init_db, transaction
from .repositories import (
    UserRepository,
    ClubRepository,
    PlayerRepository,
    LeagueRepository,
    GameweekRepository,
    RealMatchRepository,
    FantasyTeamRepository,
    RosterRepository,
    GameweekScoreRepository,
    TransactionRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "transaction",
    "UserRepository",
    "ClubRepository",
    "PlayerRepository",
    "LeagueRepository",
    "GameweekRepository",
    "RealMatchRepository",
    "FantasyTeamRepository",
    "RosterRepository",
    "GameweekScoreRepository",
    "TransactionRepository",
]
