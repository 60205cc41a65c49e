"""
Service layer: scoring and roster rules over the persistence layer.
Services never commit; callers wrap each operation in persistence.db.transaction().
"""
from fantasy_backend.persistence.repositories import GameweekScoreRepository

from .gameweek_service import GameweekService, GameweekNotFoundError, GameweekTransitionError
from .player_stats import PlayerStatsService
from .roster_service import (
    RosterService,
    FantasyTeamNotFoundError,
    RosterError,
    TransferNotAllowedError,
)
from .standings import StandingsService, LeagueNotFoundError


def build_score_repository() -> GameweekScoreRepository:
    """Score repository with the player stats write hook installed."""
    return PlayerStatsService().install(GameweekScoreRepository())


__all__ = [
    "GameweekService",
    "GameweekNotFoundError",
    "GameweekTransitionError",
    "PlayerStatsService",
    "RosterService",
    "FantasyTeamNotFoundError",
    "RosterError",
    "TransferNotAllowedError",
    "StandingsService",
    "LeagueNotFoundError",
    "build_score_repository",
]
