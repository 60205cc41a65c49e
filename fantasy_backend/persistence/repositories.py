"""
Repository interfaces for fantasy football data.
No business logic, only read/write operations.

Repositories never commit: callers wrap writes in persistence.db.transaction()
so that a failure anywhere in the unit of work rolls back every staged write.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from fantasy_backend.models import (
    Club,
    FantasyTeam,
    Gameweek,
    GameweekScore,
    GameweekStats,
    League,
    Player,
    PlayerTotals,
    RealMatch,
    RosterEntry,
    StandingRow,
    Transaction,
    User,
)


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _parse_optional_datetime(s: str | None) -> datetime | None:
    return _parse_datetime(s) if s else None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_decimal(value: float | int | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


# ---------- UserRepository ----------


class UserRepository:
    """CRUD for users. role: user | admin."""

    def create(
        self,
        conn: sqlite3.Connection,
        username: str,
        password_hash: str = "",
        role: str = "user",
        id: str | None = None,
    ) -> User:
        uid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO users (user_id, username, password_hash, role, created_at) VALUES (?, ?, ?, ?, ?)",
            (uid, username, password_hash, role, now),
        )
        return User(
            id=uid, username=username, created_at=datetime.fromisoformat(now),
            role=role, password_hash=password_hash,
        )

    def get(self, conn: sqlite3.Connection, user_id: str) -> User | None:
        row = conn.execute(
            "SELECT user_id, username, password_hash, role, created_at FROM users WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_username(self, conn: sqlite3.Connection, username: str) -> User | None:
        row = conn.execute(
            "SELECT user_id, username, password_hash, role, created_at FROM users WHERE username = ?",
            (username,),
        ).fetchone()
        return _row_to_user(row) if row is not None else None

    def update_role(self, conn: sqlite3.Connection, user_id: str, role: str) -> None:
        conn.execute("UPDATE users SET role = ? WHERE user_id = ?", (role, user_id))


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["user_id"],
        username=row["username"],
        created_at=_parse_datetime(row["created_at"]),
        role=row["role"],
        password_hash=row["password_hash"],
    )


# ---------- ClubRepository ----------


class ClubRepository:
    """CRUD for real-world clubs (teams table)."""

    def create(self, conn: sqlite3.Connection, name: str, short_name: str, id: str | None = None) -> Club:
        cid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO teams (team_id, name, short_name) VALUES (?, ?, ?)",
            (cid, name, short_name),
        )
        return Club(id=cid, name=name, short_name=short_name)


# ---------- PlayerRepository ----------

_PLAYER_COLS = (
    "player_id, team_id, name, position, price, total_points, games_played, goals_scored, "
    "assists, clean_sheets, yellow_cards, red_cards, updated_at"
)


def _row_to_player(row: sqlite3.Row) -> Player:
    return Player(
        id=row["player_id"],
        name=row["name"],
        position=row["position"],
        price=_to_decimal(row["price"]),
        team_id=row["team_id"],
        total_points=row["total_points"],
        games_played=row["games_played"],
        goals_scored=row["goals_scored"],
        assists=row["assists"],
        clean_sheets=row["clean_sheets"],
        yellow_cards=row["yellow_cards"],
        red_cards=row["red_cards"],
        updated_at=_parse_optional_datetime(row["updated_at"]),
    )


class PlayerRepository:
    """CRUD for players. Cumulative stats are written only through update_totals."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        position: str,
        price: Decimal | float | str,
        team_id: str | None = None,
        id: str | None = None,
    ) -> Player:
        pid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO players (player_id, team_id, name, position, price) VALUES (?, ?, ?, ?, ?)",
            (pid, team_id, name, position, float(price)),
        )
        return Player(id=pid, name=name, position=position, price=Decimal(str(price)), team_id=team_id)

    def get(self, conn: sqlite3.Connection, player_id: str) -> Player | None:
        row = conn.execute(
            f"SELECT {_PLAYER_COLS} FROM players WHERE player_id = ?", (player_id,)
        ).fetchone()
        return _row_to_player(row) if row is not None else None

    def list_all(self, conn: sqlite3.Connection, position: str | None = None, limit: int | None = None) -> list[Player]:
        sql = f"SELECT {_PLAYER_COLS} FROM players"
        args: list = []
        if position:
            sql += " WHERE position = ?"
            args.append(position)
        sql += " ORDER BY total_points DESC, name"
        if limit is not None:
            sql += " LIMIT ?"
            args.append(limit)
        return [_row_to_player(r) for r in conn.execute(sql, args).fetchall()]

    def list_ids(self, conn: sqlite3.Connection) -> list[str]:
        rows = conn.execute("SELECT player_id FROM players ORDER BY player_id").fetchall()
        return [r["player_id"] for r in rows]

    def update_totals(self, conn: sqlite3.Connection, player_id: str, totals: PlayerTotals) -> None:
        """Write every cumulative stat column from totals."""
        conn.execute(
            """UPDATE players SET
                   total_points = ?, games_played = ?, goals_scored = ?, assists = ?,
                   clean_sheets = ?, yellow_cards = ?, red_cards = ?
               WHERE player_id = ?""",
            (
                totals.total_points,
                totals.games_played,
                totals.goals_scored,
                totals.assists,
                totals.clean_sheets,
                totals.yellow_cards,
                totals.red_cards,
                player_id,
            ),
        )

    def update_scoring_totals(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        total_points: int,
        goals_scored: int,
        assists: int,
        updated_at_iso: str,
    ) -> None:
        """Write total_points, goals_scored, assists and stamp updated_at."""
        conn.execute(
            """UPDATE players SET total_points = ?, goals_scored = ?, assists = ?, updated_at = ?
               WHERE player_id = ?""",
            (total_points, goals_scored, assists, updated_at_iso, player_id),
        )


# ---------- LeagueRepository ----------


class LeagueRepository:
    """CRUD for leagues."""

    def create(self, conn: sqlite3.Connection, name: str, id: str | None = None) -> League:
        lid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO leagues (league_id, name, created_at) VALUES (?, ?, ?)",
            (lid, name, now),
        )
        return League(id=lid, name=name, created_at=datetime.fromisoformat(now))

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute(
            "SELECT league_id, name, created_at FROM leagues WHERE league_id = ?", (league_id,)
        ).fetchone()
        if row is None:
            return None
        return League(id=row["league_id"], name=row["name"], created_at=_parse_datetime(row["created_at"]))

    def standings(self, conn: sqlite3.Connection, league_id: str) -> list[StandingRow]:
        """Fantasy teams in the league joined with their owner, ordered by rank ascending, unranked last."""
        rows = conn.execute(
            """SELECT ft.fantasy_team_id, ft.team_name, u.username,
                      ft.total_points, ft.rank, ft.gameweek_points
               FROM fantasy_teams ft
               JOIN users u ON ft.user_id = u.user_id
               WHERE ft.league_id = ?
               ORDER BY ft.rank IS NULL, ft.rank ASC""",
            (league_id,),
        ).fetchall()
        return [
            StandingRow(
                fantasy_team_id=r["fantasy_team_id"],
                team_name=r["team_name"],
                username=r["username"],
                total_points=r["total_points"],
                rank=r["rank"],
                gameweek_points=r["gameweek_points"],
            )
            for r in rows
        ]


# ---------- GameweekRepository ----------


def _row_to_gameweek(row: sqlite3.Row) -> Gameweek:
    return Gameweek(
        gameweek_number=row["gameweek_number"],
        status=row["status"],
        start_date=_parse_optional_datetime(row["start_date"]),
        end_date=_parse_optional_datetime(row["end_date"]),
    )


class GameweekRepository:
    """CRUD for gameweeks. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        gameweek_number: int,
        status: str = "upcoming",
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Gameweek:
        conn.execute(
            "INSERT INTO gameweeks (gameweek_number, start_date, end_date, status) VALUES (?, ?, ?, ?)",
            (
                gameweek_number,
                start_date.isoformat() if start_date else None,
                end_date.isoformat() if end_date else None,
                status,
            ),
        )
        return Gameweek(gameweek_number=gameweek_number, status=status, start_date=start_date, end_date=end_date)

    def get(self, conn: sqlite3.Connection, gameweek_number: int) -> Gameweek | None:
        row = conn.execute(
            "SELECT gameweek_number, start_date, end_date, status FROM gameweeks WHERE gameweek_number = ?",
            (gameweek_number,),
        ).fetchone()
        return _row_to_gameweek(row) if row is not None else None

    def list_all(self, conn: sqlite3.Connection) -> list[Gameweek]:
        rows = conn.execute(
            "SELECT gameweek_number, start_date, end_date, status FROM gameweeks ORDER BY gameweek_number"
        ).fetchall()
        return [_row_to_gameweek(r) for r in rows]

    def list_not_finalized(self, conn: sqlite3.Connection) -> list[Gameweek]:
        rows = conn.execute(
            """SELECT gameweek_number, start_date, end_date, status FROM gameweeks
               WHERE status != 'finalized' ORDER BY gameweek_number"""
        ).fetchall()
        return [_row_to_gameweek(r) for r in rows]

    def get_earliest_open(self, conn: sqlite3.Connection) -> Gameweek | None:
        """Earliest gameweek (by number) whose status is active or upcoming."""
        row = conn.execute(
            """SELECT gameweek_number, start_date, end_date, status FROM gameweeks
               WHERE status IN ('active', 'upcoming')
               ORDER BY gameweek_number ASC LIMIT 1"""
        ).fetchone()
        return _row_to_gameweek(row) if row is not None else None

    def update_status(
        self,
        conn: sqlite3.Connection,
        gameweek_number: int,
        status: str,
        from_status: str | None = None,
    ) -> bool:
        """
        Set status. With from_status, only a row currently in that status is updated.
        A finalized row is never updated. Returns True if a row changed.
        """
        if from_status is not None:
            cur = conn.execute(
                "UPDATE gameweeks SET status = ? WHERE gameweek_number = ? AND status = ?",
                (status, gameweek_number, from_status),
            )
        else:
            cur = conn.execute(
                "UPDATE gameweeks SET status = ? WHERE gameweek_number = ? AND status != 'finalized'",
                (status, gameweek_number),
            )
        return cur.rowcount > 0


# ---------- RealMatchRepository ----------


class RealMatchRepository:
    """CRUD for real_matches (real-world fixtures)."""

    def create(
        self,
        conn: sqlite3.Connection,
        gameweek: int,
        home_team_id: str,
        away_team_id: str,
        status: str = "scheduled",
        id: str | None = None,
    ) -> RealMatch:
        mid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO real_matches (match_id, gameweek, home_team_id, away_team_id, status) VALUES (?, ?, ?, ?, ?)",
            (mid, gameweek, home_team_id, away_team_id, status),
        )
        return RealMatch(id=mid, gameweek=gameweek, home_team_id=home_team_id, away_team_id=away_team_id, status=status)

    def get(self, conn: sqlite3.Connection, match_id: str) -> RealMatch | None:
        row = conn.execute(
            """SELECT match_id, gameweek, home_team_id, away_team_id, home_score, away_score, status
               FROM real_matches WHERE match_id = ?""",
            (match_id,),
        ).fetchone()
        if row is None:
            return None
        return RealMatch(
            id=row["match_id"],
            gameweek=row["gameweek"],
            home_team_id=row["home_team_id"],
            away_team_id=row["away_team_id"],
            status=row["status"],
            home_score=row["home_score"],
            away_score=row["away_score"],
        )

    def update_result(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        status: str,
        home_score: int | None = None,
        away_score: int | None = None,
    ) -> None:
        conn.execute(
            "UPDATE real_matches SET status = ?, home_score = ?, away_score = ? WHERE match_id = ?",
            (status, home_score, away_score, match_id),
        )

    def count_by_gameweek(self, conn: sqlite3.Connection, gameweek: int) -> tuple[int, int]:
        """(total, completed) match counts for a gameweek."""
        row = conn.execute(
            """SELECT COUNT(*) AS total,
                      COUNT(CASE WHEN status = 'completed' THEN 1 END) AS completed
               FROM real_matches WHERE gameweek = ?""",
            (gameweek,),
        ).fetchone()
        return row["total"], row["completed"]


# ---------- FantasyTeamRepository ----------


def _row_to_fantasy_team(row: sqlite3.Row) -> FantasyTeam:
    return FantasyTeam(
        id=row["fantasy_team_id"],
        user_id=row["user_id"],
        team_name=row["team_name"],
        league_id=row["league_id"],
        total_points=row["total_points"],
        rank=row["rank"],
        gameweek_points=row["gameweek_points"],
    )


_FANTASY_TEAM_COLS = "fantasy_team_id, user_id, league_id, team_name, total_points, rank, gameweek_points"


class FantasyTeamRepository:
    """CRUD for fantasy_teams. Points and rank are written by an external ranking job."""

    def create(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        team_name: str,
        league_id: str | None = None,
        id: str | None = None,
    ) -> FantasyTeam:
        tid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO fantasy_teams (fantasy_team_id, user_id, league_id, team_name) VALUES (?, ?, ?, ?)",
            (tid, user_id, league_id, team_name),
        )
        return FantasyTeam(id=tid, user_id=user_id, team_name=team_name, league_id=league_id)

    def get(self, conn: sqlite3.Connection, fantasy_team_id: str) -> FantasyTeam | None:
        row = conn.execute(
            f"SELECT {_FANTASY_TEAM_COLS} FROM fantasy_teams WHERE fantasy_team_id = ?",
            (fantasy_team_id,),
        ).fetchone()
        return _row_to_fantasy_team(row) if row is not None else None

    def list_by_user(self, conn: sqlite3.Connection, user_id: str) -> list[FantasyTeam]:
        rows = conn.execute(
            f"SELECT {_FANTASY_TEAM_COLS} FROM fantasy_teams WHERE user_id = ? ORDER BY team_name",
            (user_id,),
        ).fetchall()
        return [_row_to_fantasy_team(r) for r in rows]

    def update_standing(
        self,
        conn: sqlite3.Connection,
        fantasy_team_id: str,
        total_points: int,
        rank: int | None,
        gameweek_points: int,
    ) -> None:
        conn.execute(
            "UPDATE fantasy_teams SET total_points = ?, rank = ?, gameweek_points = ? WHERE fantasy_team_id = ?",
            (total_points, rank, gameweek_points, fantasy_team_id),
        )


# ---------- RosterRepository ----------


class RosterRepository:
    """CRUD for rosters. (fantasy_team_id, player_id) is the primary key."""

    def add(self, conn: sqlite3.Connection, fantasy_team_id: str, player_id: str, is_starter: bool = False) -> RosterEntry:
        conn.execute(
            "INSERT INTO rosters (fantasy_team_id, player_id, is_starter) VALUES (?, ?, ?)",
            (fantasy_team_id, player_id, 1 if is_starter else 0),
        )
        return RosterEntry(fantasy_team_id=fantasy_team_id, player_id=player_id, is_starter=is_starter)

    def remove(self, conn: sqlite3.Connection, fantasy_team_id: str, player_id: str) -> None:
        conn.execute(
            "DELETE FROM rosters WHERE fantasy_team_id = ? AND player_id = ?",
            (fantasy_team_id, player_id),
        )

    def get(self, conn: sqlite3.Connection, fantasy_team_id: str, player_id: str) -> RosterEntry | None:
        row = conn.execute(
            "SELECT fantasy_team_id, player_id, is_starter FROM rosters WHERE fantasy_team_id = ? AND player_id = ?",
            (fantasy_team_id, player_id),
        ).fetchone()
        if row is None:
            return None
        return RosterEntry(row["fantasy_team_id"], row["player_id"], bool(row["is_starter"]))

    def list_by_team(self, conn: sqlite3.Connection, fantasy_team_id: str) -> list[RosterEntry]:
        rows = conn.execute(
            "SELECT fantasy_team_id, player_id, is_starter FROM rosters WHERE fantasy_team_id = ? ORDER BY player_id",
            (fantasy_team_id,),
        ).fetchall()
        return [RosterEntry(r["fantasy_team_id"], r["player_id"], bool(r["is_starter"])) for r in rows]

    def list_prices(self, conn: sqlite3.Connection, fantasy_team_id: str) -> list[Decimal]:
        """Price of every player on the roster."""
        rows = conn.execute(
            """SELECT p.price FROM rosters r
               JOIN players p ON r.player_id = p.player_id
               WHERE r.fantasy_team_id = ?""",
            (fantasy_team_id,),
        ).fetchall()
        return [_to_decimal(r["price"]) for r in rows]

    def list_starter_positions(self, conn: sqlite3.Connection, fantasy_team_id: str) -> list[str]:
        """Position of every starter on the roster."""
        rows = conn.execute(
            """SELECT p.position FROM rosters r
               JOIN players p ON r.player_id = p.player_id
               WHERE r.fantasy_team_id = ? AND r.is_starter = 1""",
            (fantasy_team_id,),
        ).fetchall()
        return [r["position"] for r in rows]


# ---------- GameweekScoreRepository ----------

ScoreWriteHook = Callable[[sqlite3.Connection, GameweekScore], None]

_SCORE_COLS = (
    "score_id, player_id, gameweek, minutes_played, goals, assists, clean_sheet, "
    "yellow_cards, red_cards, saves, bonus_points, total_points"
)


def _row_to_score(row: sqlite3.Row) -> GameweekScore:
    return GameweekScore(
        id=row["score_id"],
        player_id=row["player_id"],
        gameweek=row["gameweek"],
        stats=GameweekStats(
            minutes_played=row["minutes_played"],
            goals=row["goals"],
            assists=row["assists"],
            clean_sheet=bool(row["clean_sheet"]),
            yellow_cards=row["yellow_cards"],
            red_cards=row["red_cards"],
            saves=row["saves"],
            bonus_points=row["bonus_points"],
            total_points=row["total_points"],
        ),
    )


class GameweekScoreRepository:
    """
    CRUD for gameweek_scores. Unique per (player_id, gameweek).
    Write hooks run after every insert or update, on the same connection and
    inside the caller's transaction; a hook failure propagates to the caller.
    """

    def __init__(self, write_hooks: list[ScoreWriteHook] | None = None) -> None:
        self._write_hooks: list[ScoreWriteHook] = list(write_hooks or [])

    def register_write_hook(self, hook: ScoreWriteHook) -> None:
        if hook not in self._write_hooks:
            self._write_hooks.append(hook)

    def upsert(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        gameweek: int,
        stats: GameweekStats,
    ) -> GameweekScore:
        """Insert the (player, gameweek) row or update it in place, then fire write hooks."""
        conn.execute(
            f"""INSERT INTO gameweek_scores ({_SCORE_COLS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (player_id, gameweek) DO UPDATE SET
                    minutes_played = excluded.minutes_played,
                    goals = excluded.goals,
                    assists = excluded.assists,
                    clean_sheet = excluded.clean_sheet,
                    yellow_cards = excluded.yellow_cards,
                    red_cards = excluded.red_cards,
                    saves = excluded.saves,
                    bonus_points = excluded.bonus_points,
                    total_points = excluded.total_points""",
            (
                str(uuid.uuid4()),
                player_id,
                gameweek,
                stats.minutes_played,
                stats.goals,
                stats.assists,
                1 if stats.clean_sheet else 0,
                stats.yellow_cards,
                stats.red_cards,
                stats.saves,
                stats.bonus_points,
                stats.total_points,
            ),
        )
        score = self.get(conn, player_id, gameweek)
        if score is None:
            raise RuntimeError(f"gameweek score for {player_id} gw {gameweek} missing after write")
        for hook in self._write_hooks:
            hook(conn, score)
        return score

    def get(self, conn: sqlite3.Connection, player_id: str, gameweek: int) -> GameweekScore | None:
        row = conn.execute(
            f"SELECT {_SCORE_COLS} FROM gameweek_scores WHERE player_id = ? AND gameweek = ?",
            (player_id, gameweek),
        ).fetchone()
        return _row_to_score(row) if row is not None else None

    def list_by_player(self, conn: sqlite3.Connection, player_id: str) -> list[GameweekScore]:
        rows = conn.execute(
            f"SELECT {_SCORE_COLS} FROM gameweek_scores WHERE player_id = ? ORDER BY gameweek",
            (player_id,),
        ).fetchall()
        return [_row_to_score(r) for r in rows]

    def totals_for_player(self, conn: sqlite3.Connection, player_id: str) -> PlayerTotals:
        """Aggregate a player's full history. Zero for every field when there are no rows."""
        row = conn.execute(
            """SELECT COALESCE(SUM(total_points), 0) AS total_points,
                      COUNT(CASE WHEN minutes_played > 0 THEN 1 END) AS games_played,
                      COALESCE(SUM(goals), 0) AS goals_scored,
                      COALESCE(SUM(assists), 0) AS assists,
                      COUNT(CASE WHEN clean_sheet = 1 THEN 1 END) AS clean_sheets,
                      COALESCE(SUM(yellow_cards), 0) AS yellow_cards,
                      COALESCE(SUM(red_cards), 0) AS red_cards
               FROM gameweek_scores WHERE player_id = ?""",
            (player_id,),
        ).fetchone()
        return PlayerTotals(**dict(row))

    def totals_by_player(self, conn: sqlite3.Connection) -> dict[str, PlayerTotals]:
        """Aggregates for every player that has at least one row."""
        rows = conn.execute(
            """SELECT player_id,
                      COALESCE(SUM(total_points), 0) AS total_points,
                      COUNT(CASE WHEN minutes_played > 0 THEN 1 END) AS games_played,
                      COALESCE(SUM(goals), 0) AS goals_scored,
                      COALESCE(SUM(assists), 0) AS assists,
                      COUNT(CASE WHEN clean_sheet = 1 THEN 1 END) AS clean_sheets,
                      COALESCE(SUM(yellow_cards), 0) AS yellow_cards,
                      COALESCE(SUM(red_cards), 0) AS red_cards
               FROM gameweek_scores GROUP BY player_id"""
        ).fetchall()
        result: dict[str, PlayerTotals] = {}
        for r in rows:
            d = dict(r)
            pid = d.pop("player_id")
            result[pid] = PlayerTotals(**d)
        return result


# ---------- TransactionRepository ----------


class TransactionRepository:
    """Append-only transfer log."""

    def create(
        self,
        conn: sqlite3.Connection,
        fantasy_team_id: str,
        transaction_type: str,
        player_in_id: str | None,
        player_out_id: str | None,
        gameweek: int | None,
        price_in: Decimal | None,
        price_out: Decimal | None,
        id: str | None = None,
    ) -> Transaction:
        tid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            """INSERT INTO transactions (
                transaction_id, fantasy_team_id, transaction_type, player_in_id, player_out_id,
                gameweek, price_in, price_out, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                tid,
                fantasy_team_id,
                transaction_type,
                player_in_id,
                player_out_id,
                gameweek,
                float(price_in) if price_in is not None else None,
                float(price_out) if price_out is not None else None,
                now,
            ),
        )
        return Transaction(
            id=tid,
            fantasy_team_id=fantasy_team_id,
            transaction_type=transaction_type,
            player_in_id=player_in_id,
            player_out_id=player_out_id,
            gameweek=gameweek,
            price_in=price_in,
            price_out=price_out,
            created_at=datetime.fromisoformat(now),
        )

    def list_by_team(self, conn: sqlite3.Connection, fantasy_team_id: str) -> list[Transaction]:
        rows = conn.execute(
            """SELECT transaction_id, fantasy_team_id, transaction_type, player_in_id, player_out_id,
                      gameweek, price_in, price_out, created_at
               FROM transactions WHERE fantasy_team_id = ? ORDER BY created_at""",
            (fantasy_team_id,),
        ).fetchall()
        return [
            Transaction(
                id=r["transaction_id"],
                fantasy_team_id=r["fantasy_team_id"],
                transaction_type=r["transaction_type"],
                player_in_id=r["player_in_id"],
                player_out_id=r["player_out_id"],
                gameweek=r["gameweek"],
                price_in=_to_decimal(r["price_in"]),
                price_out=_to_decimal(r["price_out"]),
                created_at=_parse_datetime(r["created_at"]),
            )
            for r in rows
        ]
