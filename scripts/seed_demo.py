#!/usr/bin/env python3
"""
Demo slice: seed clubs, players, a gameweek with fixtures, one fantasy team,
record scores -> advance gameweek -> print value, formation and standings.
Run from project root: python3 scripts/seed_demo.py
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fantasy_backend.models import GameweekStats
from fantasy_backend.persistence import (
    init_db,
    get_connection,
    transaction,
    UserRepository,
    ClubRepository,
    PlayerRepository,
    LeagueRepository,
    GameweekRepository,
    RealMatchRepository,
    FantasyTeamRepository,
    RosterRepository,
)
from fantasy_backend.persistence.db import set_db_path
from fantasy_backend.services import GameweekService, RosterService, StandingsService, build_score_repository

# 4-4-2 plus four substitutes
SQUAD = [
    ("Keeper One", "GK", 4.5, True),
    ("Back One", "DEF", 5.0, True),
    ("Back Two", "DEF", 4.5, True),
    ("Back Three", "DEF", 5.5, True),
    ("Back Four", "DEF", 4.0, True),
    ("Mid One", "MID", 8.0, True),
    ("Mid Two", "MID", 7.5, True),
    ("Mid Three", "MID", 6.0, True),
    ("Mid Four", "MID", 5.5, True),
    ("Striker One", "FWD", 9.0, True),
    ("Striker Two", "FWD", 7.0, True),
    ("Keeper Two", "GK", 4.0, False),
    ("Back Five", "DEF", 4.0, False),
    ("Mid Five", "MID", 4.5, False),
    ("Striker Three", "FWD", 4.5, False),
]


def main() -> None:
    db_path = PROJECT_ROOT / "data" / "demo.db"
    if db_path.exists():
        db_path.unlink()
    set_db_path(db_path)
    init_db(db_path=db_path)

    conn = get_connection()
    try:
        with transaction(conn):
            user = UserRepository().create(conn, "demo-manager")
            home = ClubRepository().create(conn, "Northside", "NTH")
            away = ClubRepository().create(conn, "Southside", "STH")
            league = LeagueRepository().create(conn, "Demo League")
            GameweekRepository().create(conn, 1)
            GameweekRepository().create(conn, 2)
            match = RealMatchRepository().create(conn, 1, home.id, away.id)
            team = FantasyTeamRepository().create(conn, user.id, "Demo XI", league_id=league.id)
            player_repo = PlayerRepository()
            roster_repo = RosterRepository()
            player_ids = []
            for i, (name, position, price, starter) in enumerate(SQUAD):
                club = home if i % 2 == 0 else away
                p = player_repo.create(conn, name, position, price, team_id=club.id)
                roster_repo.add(conn, team.id, p.id, is_starter=starter)
                player_ids.append(p.id)
        print(f"Created fantasy team {team.team_name} (id={team.id})")

        svc = RosterService()
        print(f"Team value: {svc.team_value(conn, team.id)}")
        print(f"Formation: {svc.team_formation(conn, team.id)} valid={svc.validate_formation(conn, team.id)}")

        # Score gameweek 1: the write hook refreshes each player's totals
        scores = build_score_repository()
        with transaction(conn):
            scores.upsert(conn, player_ids[9], 1, GameweekStats(minutes_played=90, goals=2, total_points=13))
            scores.upsert(conn, player_ids[5], 1, GameweekStats(minutes_played=90, assists=1, total_points=5))
            scores.upsert(conn, player_ids[0], 1, GameweekStats(minutes_played=90, clean_sheet=True, saves=4, total_points=7))
            RealMatchRepository().update_result(conn, match.id, "completed", 2, 0)
        striker = PlayerRepository().get(conn, player_ids[9])
        print(f"{striker.name}: {striker.total_points} pts, {striker.goals_scored} goals")

        gw_svc = GameweekService()
        with transaction(conn):
            changes = gw_svc.advance_gameweek_statuses(conn)
        print(f"Gameweek transitions: {changes}")
        print(f"Transfers allowed: {gw_svc.transfers_allowed(conn)}")

        with transaction(conn):
            FantasyTeamRepository().update_standing(conn, team.id, total_points=25, rank=1, gameweek_points=25)
        for row in StandingsService().league_standings(conn, league.id):
            print(f"  #{row.rank} {row.team_name} ({row.username}) {row.total_points} pts")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
