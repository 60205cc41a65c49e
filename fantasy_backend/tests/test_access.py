"""
Tests for access-control predicates and assertions.
"""
from __future__ import annotations

import pytest

from fantasy_backend.access import (
    AccessDeniedError,
    Principal,
    assert_can_read_fantasy_team,
    assert_can_run_batch_jobs,
    assert_can_write_fantasy_team,
    assert_can_write_reference_data,
    can_read_fantasy_team,
    can_read_reference_data,
    can_read_user,
    can_run_batch_jobs,
    can_write_fantasy_team,
    can_write_reference_data,
)
from fantasy_backend.models import FantasyTeam

OWNER = Principal("owner-1")
STRANGER = Principal("stranger-1")
ADMIN = Principal("admin-1", role="admin")
SERVICE = Principal("service", role="service")
TEAM = FantasyTeam(id="ft-1", user_id="owner-1", team_name="Owner XI", league_id=None)


def test_reference_data_readable_by_any_authenticated():
    for p in (OWNER, STRANGER, ADMIN, SERVICE):
        assert can_read_reference_data(p) is True
    assert can_read_reference_data(None) is False


def test_reference_data_writable_by_admin_and_service_only():
    assert can_write_reference_data(ADMIN) is True
    assert can_write_reference_data(SERVICE) is True
    assert can_write_reference_data(OWNER) is False
    assert can_write_reference_data(None) is False


def test_batch_jobs_need_privilege():
    assert can_run_batch_jobs(SERVICE) is True
    assert can_run_batch_jobs(ADMIN) is True
    assert can_run_batch_jobs(OWNER) is False


def test_fantasy_team_read_owner_admin_service():
    assert can_read_fantasy_team(OWNER, TEAM) is True
    assert can_read_fantasy_team(ADMIN, TEAM) is True
    assert can_read_fantasy_team(SERVICE, TEAM) is True
    assert can_read_fantasy_team(STRANGER, TEAM) is False
    assert can_read_fantasy_team(None, TEAM) is False


def test_fantasy_team_write_owner_and_service():
    assert can_write_fantasy_team(OWNER, TEAM) is True
    assert can_write_fantasy_team(SERVICE, TEAM) is True
    assert can_write_fantasy_team(ADMIN, TEAM) is False
    assert can_write_fantasy_team(STRANGER, TEAM) is False


def test_user_profile_self_or_admin():
    assert can_read_user(OWNER, "owner-1") is True
    assert can_read_user(ADMIN, "owner-1") is True
    assert can_read_user(STRANGER, "owner-1") is False


def test_assertions_raise_access_denied():
    with pytest.raises(AccessDeniedError):
        assert_can_read_fantasy_team(STRANGER, TEAM)
    with pytest.raises(AccessDeniedError):
        assert_can_write_fantasy_team(ADMIN, TEAM)
    with pytest.raises(AccessDeniedError):
        assert_can_write_reference_data(OWNER)
    with pytest.raises(AccessDeniedError):
        assert_can_run_batch_jobs(None)


def test_assertions_pass_silently_when_allowed():
    assert_can_read_fantasy_team(OWNER, TEAM)
    assert_can_write_reference_data(ADMIN)
    assert_can_run_batch_jobs(SERVICE)


def test_access_denied_is_permission_error():
    assert issubclass(AccessDeniedError, PermissionError)
