"""
Tests for the batch job CLI.
"""
from __future__ import annotations

import pytest

from fantasy_backend.models import GameweekStats
from fantasy_backend.persistence.db import get_connection, set_db_path, transaction
from fantasy_backend.persistence.repositories import (
    ClubRepository,
    GameweekRepository,
    GameweekScoreRepository,
    PlayerRepository,
    RealMatchRepository,
    UserRepository,
)
from fantasy_backend.run_batch import main


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "batch_test.db"
    main(["advance", "--db", str(path)])
    return path


def _read(db_path, fn):
    set_db_path(db_path)
    conn = get_connection()
    try:
        return fn(conn)
    finally:
        conn.close()


def test_advance_locks_completed_gameweek(db_path, capsys):
    conn = get_connection()
    try:
        with transaction(conn):
            home = ClubRepository().create(conn, "Home", "HOM")
            away = ClubRepository().create(conn, "Away", "AWY")
            GameweekRepository().create(conn, 1)
            RealMatchRepository().create(conn, 1, home.id, away.id, status="completed")
    finally:
        conn.close()
    main(["advance", "--db", str(db_path)])
    out = capsys.readouterr().out
    assert "GW1: upcoming -> locked" in out
    gw = _read(db_path, lambda c: GameweekRepository().get(c, 1))
    assert gw.status == "locked"


def test_refresh_recomputes_totals(db_path, capsys):
    conn = get_connection()
    try:
        with transaction(conn):
            p = PlayerRepository().create(conn, "Striker", "FWD", "7.5")
            # Bare repository: no write hook, totals stay stale until refresh
            GameweekScoreRepository().upsert(conn, p.id, 1, GameweekStats(minutes_played=90, goals=2, total_points=12))
    finally:
        conn.close()
    assert _read(db_path, lambda c: PlayerRepository().get(c, p.id)).total_points == 0
    main(["refresh", "--db", str(db_path)])
    assert "Refreshed stats for 1 players" in capsys.readouterr().out
    player = _read(db_path, lambda c: PlayerRepository().get(c, p.id))
    assert player.total_points == 12
    assert player.goals_scored == 2
    assert player.games_played == 1


def test_promote_user(db_path):
    conn = get_connection()
    try:
        with transaction(conn):
            UserRepository().create(conn, "boss")
    finally:
        conn.close()
    main(["promote", "--db", str(db_path), "--username", "boss"])
    assert _read(db_path, lambda c: UserRepository().get_by_username(c, "boss")).role == "admin"


def test_promote_requires_known_user(db_path):
    with pytest.raises(SystemExit):
        main(["promote", "--db", str(db_path), "--username", "nobody"])
    with pytest.raises(SystemExit):
        main(["promote", "--db", str(db_path)])
