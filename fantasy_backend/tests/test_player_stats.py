"""
Tests for player stats: per-gameweek lookup, full refresh, and the write hook
that recomputes totals inside the writing transaction.
"""
from __future__ import annotations

import sqlite3

import pytest

from fantasy_backend.models import GameweekStats
from fantasy_backend.persistence.db import get_connection, init_db, set_db_path, transaction
from fantasy_backend.persistence.repositories import GameweekScoreRepository, PlayerRepository
from fantasy_backend.services import build_score_repository
from fantasy_backend.services.player_stats import PlayerStatsService


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "stats_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def stats_service():
    return PlayerStatsService()


@pytest.fixture
def players(db_conn):
    repo = PlayerRepository()
    with transaction(db_conn):
        striker = repo.create(db_conn, "Striker", "FWD", 9.0)
        keeper = repo.create(db_conn, "Keeper", "GK", 4.5)
        unused = repo.create(db_conn, "Unused", "MID", 4.5)
    return striker, keeper, unused


def _write_raw(conn, player_id, gameweek, stats):
    """Write without hooks, as a bulk import would."""
    with transaction(conn):
        GameweekScoreRepository().upsert(conn, player_id, gameweek, stats)


# ---------- player_gameweek_stats ----------


def test_lookup_missing_record_is_all_zero(db_conn, stats_service, players):
    striker, _, _ = players
    stats = stats_service.player_gameweek_stats(db_conn, striker.id, 7)
    assert stats == GameweekStats()
    assert stats.clean_sheet is False
    assert stats.total_points == 0


def test_lookup_unknown_player_is_all_zero(db_conn, stats_service):
    assert stats_service.player_gameweek_stats(db_conn, "nobody", 1) == GameweekStats()


def test_lookup_existing_record(db_conn, stats_service, players):
    _, keeper, _ = players
    recorded = GameweekStats(minutes_played=90, clean_sheet=True, saves=5, bonus_points=2, total_points=9)
    _write_raw(db_conn, keeper.id, 3, recorded)
    assert stats_service.player_gameweek_stats(db_conn, keeper.id, 3) == recorded


# ---------- refresh_all_player_stats ----------


def test_refresh_aggregates_every_field(db_conn, stats_service, players):
    striker, keeper, unused = players
    _write_raw(db_conn, striker.id, 1, GameweekStats(minutes_played=90, goals=2, assists=1, yellow_cards=1, total_points=14))
    _write_raw(db_conn, striker.id, 2, GameweekStats(minutes_played=0, total_points=0))
    _write_raw(db_conn, striker.id, 3, GameweekStats(minutes_played=75, goals=1, red_cards=1, total_points=3))
    _write_raw(db_conn, keeper.id, 1, GameweekStats(minutes_played=90, clean_sheet=True, saves=6, total_points=8))
    _write_raw(db_conn, keeper.id, 2, GameweekStats(minutes_played=90, clean_sheet=True, total_points=6))

    with transaction(db_conn):
        updated = stats_service.refresh_all_player_stats(db_conn)
    assert updated == 3

    repo = PlayerRepository()
    s = repo.get(db_conn, striker.id)
    assert (s.total_points, s.games_played, s.goals_scored, s.assists) == (17, 2, 3, 1)
    assert (s.clean_sheets, s.yellow_cards, s.red_cards) == (0, 1, 1)
    k = repo.get(db_conn, keeper.id)
    assert (k.total_points, k.games_played, k.clean_sheets) == (14, 2, 2)
    u = repo.get(db_conn, unused.id)
    assert (u.total_points, u.games_played, u.goals_scored, u.assists, u.clean_sheets, u.yellow_cards, u.red_cards) == (0,) * 7


def test_refresh_is_idempotent(db_conn, stats_service, players):
    striker, keeper, _ = players
    _write_raw(db_conn, striker.id, 1, GameweekStats(minutes_played=90, goals=1, total_points=6))
    _write_raw(db_conn, keeper.id, 1, GameweekStats(minutes_played=90, clean_sheet=True, total_points=6))
    repo = PlayerRepository()
    with transaction(db_conn):
        stats_service.refresh_all_player_stats(db_conn)
    first = [repo.get(db_conn, p.id) for p in players]
    with transaction(db_conn):
        stats_service.refresh_all_player_stats(db_conn)
    second = [repo.get(db_conn, p.id) for p in players]
    assert first == second


def test_refresh_with_no_scores_zeroes_stale_totals(db_conn, stats_service, players):
    striker, _, _ = players
    db_conn.execute("UPDATE players SET total_points = 99, goals_scored = 9 WHERE player_id = ?", (striker.id,))
    db_conn.commit()
    with transaction(db_conn):
        stats_service.refresh_all_player_stats(db_conn)
    s = PlayerRepository().get(db_conn, striker.id)
    assert s.total_points == 0
    assert s.goals_scored == 0


# ---------- on_gameweek_score_written (write hook) ----------


def test_insert_recomputes_player_totals(db_conn, players):
    striker, _, _ = players
    scores = build_score_repository()
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 1, GameweekStats(minutes_played=90, goals=1, total_points=6))
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 2, GameweekStats(minutes_played=90, goals=2, assists=1, total_points=13))
    s = PlayerRepository().get(db_conn, striker.id)
    assert s.total_points == 19
    assert s.goals_scored == 3
    assert s.assists == 1
    assert s.updated_at is not None


def test_total_matches_sum_of_history_including_new_row(db_conn, players):
    striker, _, _ = players
    _write_raw(db_conn, striker.id, 1, GameweekStats(total_points=4))
    _write_raw(db_conn, striker.id, 2, GameweekStats(total_points=2))
    with transaction(db_conn):
        build_score_repository().upsert(db_conn, striker.id, 3, GameweekStats(total_points=10))
    history = GameweekScoreRepository().list_by_player(db_conn, striker.id)
    s = PlayerRepository().get(db_conn, striker.id)
    assert s.total_points == sum(r.stats.total_points for r in history) == 16


def test_update_recomputes_not_double_counts(db_conn, players):
    striker, _, _ = players
    scores = build_score_repository()
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 1, GameweekStats(goals=1, total_points=6))
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 1, GameweekStats(goals=2, total_points=10))
    s = PlayerRepository().get(db_conn, striker.id)
    assert s.total_points == 10
    assert s.goals_scored == 2
    assert len(GameweekScoreRepository().list_by_player(db_conn, striker.id)) == 1


def test_hook_only_touches_scoring_fields(db_conn, players):
    """Games played, clean sheets and cards are left to the full refresh."""
    _, keeper, _ = players
    with transaction(db_conn):
        build_score_repository().upsert(
            db_conn, keeper.id, 1, GameweekStats(minutes_played=90, clean_sheet=True, yellow_cards=1, total_points=6)
        )
    k = PlayerRepository().get(db_conn, keeper.id)
    assert k.total_points == 6
    assert k.games_played == 0
    assert k.clean_sheets == 0
    assert k.yellow_cards == 0


def test_hook_and_full_refresh_agree(db_conn, stats_service, players):
    striker, _, _ = players
    scores = build_score_repository()
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 1, GameweekStats(minutes_played=90, goals=1, assists=2, total_points=11))
        scores.upsert(db_conn, striker.id, 2, GameweekStats(minutes_played=60, goals=1, total_points=6))
    after_hook = PlayerRepository().get(db_conn, striker.id)
    with transaction(db_conn):
        stats_service.refresh_all_player_stats(db_conn)
    after_refresh = PlayerRepository().get(db_conn, striker.id)
    assert (after_hook.total_points, after_hook.goals_scored, after_hook.assists) == (
        after_refresh.total_points, after_refresh.goals_scored, after_refresh.assists,
    )


def test_hook_failure_rolls_back_the_write(db_conn, players):
    striker, _, _ = players
    scores = build_score_repository()
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 1, GameweekStats(total_points=5))

    def failing_hook(conn, score):
        raise RuntimeError("aggregation failed")

    scores.register_write_hook(failing_hook)
    with pytest.raises(RuntimeError):
        with transaction(db_conn):
            scores.upsert(db_conn, striker.id, 2, GameweekStats(total_points=7))

    assert GameweekScoreRepository().get(db_conn, striker.id, 2) is None
    assert PlayerRepository().get(db_conn, striker.id).total_points == 5


def test_install_registers_hook_once(players, db_conn):
    svc = PlayerStatsService()
    repo = GameweekScoreRepository()
    svc.install(repo)
    svc.install(repo)
    striker, _, _ = players
    with transaction(db_conn):
        repo.upsert(db_conn, striker.id, 1, GameweekStats(total_points=3))
    assert PlayerRepository().get(db_conn, striker.id).total_points == 3


# ---------- Concurrent writers ----------


def _other_connection():
    conn = get_connection()
    conn.execute("PRAGMA busy_timeout = 50")
    return conn


def test_refresh_snapshot_blocks_concurrent_score_write(db_conn, stats_service, players, monkeypatch):
    """A score committed by another connection cannot slip in between the refresh's read and its writes."""
    striker, _, _ = players
    scores = build_score_repository()
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 1, GameweekStats(total_points=5))

    read_totals = GameweekScoreRepository.totals_by_player

    def read_then_write_elsewhere(self, conn):
        totals = read_totals(self, conn)
        other = _other_connection()
        try:
            with pytest.raises(sqlite3.OperationalError):
                with transaction(other):
                    build_score_repository().upsert(other, striker.id, 2, GameweekStats(total_points=10))
        finally:
            other.close()
        return totals

    monkeypatch.setattr(GameweekScoreRepository, "totals_by_player", read_then_write_elsewhere)
    with transaction(db_conn):
        stats_service.refresh_all_player_stats(db_conn)
    monkeypatch.undo()

    # The blocked writer retries once the refresh has committed
    with transaction(db_conn):
        scores.upsert(db_conn, striker.id, 2, GameweekStats(total_points=10))
    history = GameweekScoreRepository().list_by_player(db_conn, striker.id)
    s = PlayerRepository().get(db_conn, striker.id)
    assert s.total_points == sum(r.stats.total_points for r in history) == 15


def test_transaction_takes_write_lock_before_first_read(db_conn, players):
    striker, _, _ = players
    other = _other_connection()
    try:
        with transaction(db_conn):
            GameweekScoreRepository().totals_for_player(db_conn, striker.id)
            with pytest.raises(sqlite3.OperationalError):
                other.execute("BEGIN IMMEDIATE")
        with transaction(other):
            build_score_repository().upsert(other, striker.id, 1, GameweekStats(total_points=4))
    finally:
        other.close()
    assert PlayerRepository().get(db_conn, striker.id).total_points == 4
