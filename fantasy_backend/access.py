"""
Access control: role + ownership predicates checked before each operation.

  - users read and write only their own fantasy teams, rosters and transactions
  - every authenticated principal reads reference data
    (clubs, players, leagues, gameweeks, real matches, scores)
  - only admins write reference data
  - the service identity has unrestricted access (batch jobs)

Computation services know nothing about principals; the API calls these checks.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from fantasy_backend.models import FantasyTeam

logger = logging.getLogger(__name__)


class Role(str, Enum):
    AUTHENTICATED = "user"
    ADMIN = "admin"
    SERVICE = "service"


class AccessDeniedError(PermissionError):
    """Principal may not perform this operation."""


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = Role.AUTHENTICATED.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_service(self) -> bool:
        return self.role == Role.SERVICE.value

    @property
    def is_privileged(self) -> bool:
        return self.is_admin or self.is_service


# ---------- Predicates ----------


def can_read_reference_data(principal: Principal | None) -> bool:
    return principal is not None


def can_write_reference_data(principal: Principal | None) -> bool:
    return principal is not None and principal.is_privileged


def can_run_batch_jobs(principal: Principal | None) -> bool:
    return principal is not None and principal.is_privileged


def can_read_fantasy_team(principal: Principal | None, team: FantasyTeam) -> bool:
    """Owner, admin or service. Covers the team's roster and transactions too."""
    if principal is None:
        return False
    return principal.is_privileged or team.user_id == principal.user_id


def can_write_fantasy_team(principal: Principal | None, team: FantasyTeam) -> bool:
    """Owner or service; admins manage reference data, not other users' squads."""
    if principal is None:
        return False
    return principal.is_service or team.user_id == principal.user_id


def can_read_user(principal: Principal | None, user_id: str) -> bool:
    if principal is None:
        return False
    return principal.is_privileged or principal.user_id == user_id


# ---------- Assertions ----------


def _deny(principal: Principal | None, action: str) -> None:
    who = f"{principal.user_id} ({principal.role})" if principal else "anonymous"
    logger.warning("access denied: %s may not %s", who, action)
    raise AccessDeniedError(f"Not allowed to {action}")


def assert_can_read_reference_data(principal: Principal | None) -> None:
    if not can_read_reference_data(principal):
        _deny(principal, "read reference data")


def assert_can_write_reference_data(principal: Principal | None) -> None:
    if not can_write_reference_data(principal):
        _deny(principal, "write reference data")


def assert_can_run_batch_jobs(principal: Principal | None) -> None:
    if not can_run_batch_jobs(principal):
        _deny(principal, "run batch jobs")


def assert_can_read_fantasy_team(principal: Principal | None, team: FantasyTeam) -> None:
    if not can_read_fantasy_team(principal, team):
        _deny(principal, f"read fantasy team {team.id}")


def assert_can_write_fantasy_team(principal: Principal | None, team: FantasyTeam) -> None:
    if not can_write_fantasy_team(principal, team):
        _deny(principal, f"modify fantasy team {team.id}")


def assert_can_read_user(principal: Principal | None, user_id: str) -> None:
    if not can_read_user(principal, user_id):
        _deny(principal, f"read user {user_id}")
