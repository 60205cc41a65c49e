"""
SQLite schema for fantasy football entities.
Migration-friendly: each table and index created with IF NOT EXISTS.
"""
from __future__ import annotations


def users_schema() -> str:
    """role: user | admin. Service identity has no users row."""
    return """
    CREATE TABLE IF NOT EXISTS users (
        user_id TEXT PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL DEFAULT '',
        role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
        created_at TEXT NOT NULL
    );
    """


def teams_schema() -> str:
    """Real-world clubs."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        team_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        short_name TEXT NOT NULL
    );
    """


def players_schema() -> str:
    """Cumulative stats columns are derived from gameweek_scores."""
    return """
    CREATE TABLE IF NOT EXISTS players (
        player_id TEXT PRIMARY KEY,
        team_id TEXT,
        name TEXT NOT NULL,
        position TEXT NOT NULL CHECK (position IN ('GK', 'DEF', 'MID', 'FWD')),
        price REAL NOT NULL CHECK (price >= 0),
        total_points INTEGER NOT NULL DEFAULT 0,
        games_played INTEGER NOT NULL DEFAULT 0,
        goals_scored INTEGER NOT NULL DEFAULT 0,
        assists INTEGER NOT NULL DEFAULT 0,
        clean_sheets INTEGER NOT NULL DEFAULT 0,
        yellow_cards INTEGER NOT NULL DEFAULT 0,
        red_cards INTEGER NOT NULL DEFAULT 0,
        updated_at TEXT,
        FOREIGN KEY (team_id) REFERENCES teams(team_id)
    );
    CREATE INDEX IF NOT EXISTS idx_players_team ON players(team_id);
    CREATE INDEX IF NOT EXISTS idx_players_position ON players(position);
    """


def leagues_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        league_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """


def gameweeks_schema() -> str:
    """status: upcoming | active | locked | finalized."""
    return """
    CREATE TABLE IF NOT EXISTS gameweeks (
        gameweek_number INTEGER PRIMARY KEY,
        start_date TEXT,
        end_date TEXT,
        status TEXT NOT NULL DEFAULT 'upcoming'
            CHECK (status IN ('upcoming', 'active', 'locked', 'finalized'))
    );
    """


def real_matches_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS real_matches (
        match_id TEXT PRIMARY KEY,
        gameweek INTEGER NOT NULL,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        home_score INTEGER,
        away_score INTEGER,
        status TEXT NOT NULL DEFAULT 'scheduled',
        FOREIGN KEY (gameweek) REFERENCES gameweeks(gameweek_number),
        FOREIGN KEY (home_team_id) REFERENCES teams(team_id),
        FOREIGN KEY (away_team_id) REFERENCES teams(team_id)
    );
    CREATE INDEX IF NOT EXISTS idx_real_matches_gameweek ON real_matches(gameweek);
    """


def fantasy_teams_schema() -> str:
    """total_points, rank, gameweek_points are maintained externally."""
    return """
    CREATE TABLE IF NOT EXISTS fantasy_teams (
        fantasy_team_id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        league_id TEXT,
        team_name TEXT NOT NULL,
        total_points INTEGER NOT NULL DEFAULT 0,
        rank INTEGER,
        gameweek_points INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (user_id) REFERENCES users(user_id),
        FOREIGN KEY (league_id) REFERENCES leagues(league_id)
    );
    CREATE INDEX IF NOT EXISTS idx_fantasy_teams_league ON fantasy_teams(league_id);
    CREATE INDEX IF NOT EXISTS idx_fantasy_teams_user ON fantasy_teams(user_id);
    """


def rosters_schema() -> str:
    """A player appears at most once per fantasy team."""
    return """
    CREATE TABLE IF NOT EXISTS rosters (
        fantasy_team_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        is_starter INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (fantasy_team_id, player_id),
        FOREIGN KEY (fantasy_team_id) REFERENCES fantasy_teams(fantasy_team_id),
        FOREIGN KEY (player_id) REFERENCES players(player_id)
    );
    CREATE INDEX IF NOT EXISTS idx_rosters_fantasy_team ON rosters(fantasy_team_id);
    CREATE INDEX IF NOT EXISTS idx_rosters_player ON rosters(player_id);
    """


def gameweek_scores_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS gameweek_scores (
        score_id TEXT PRIMARY KEY,
        player_id TEXT NOT NULL,
        gameweek INTEGER NOT NULL,
        minutes_played INTEGER NOT NULL DEFAULT 0,
        goals INTEGER NOT NULL DEFAULT 0,
        assists INTEGER NOT NULL DEFAULT 0,
        clean_sheet INTEGER NOT NULL DEFAULT 0,
        yellow_cards INTEGER NOT NULL DEFAULT 0,
        red_cards INTEGER NOT NULL DEFAULT 0,
        saves INTEGER NOT NULL DEFAULT 0,
        bonus_points INTEGER NOT NULL DEFAULT 0,
        total_points INTEGER NOT NULL DEFAULT 0,
        UNIQUE (player_id, gameweek),
        FOREIGN KEY (player_id) REFERENCES players(player_id)
    );
    CREATE INDEX IF NOT EXISTS idx_gameweek_scores_gameweek ON gameweek_scores(gameweek);
    CREATE INDEX IF NOT EXISTS idx_gameweek_scores_player_gameweek ON gameweek_scores(player_id, gameweek);
    """


def transactions_schema() -> str:
    """Transfer log per fantasy team."""
    return """
    CREATE TABLE IF NOT EXISTS transactions (
        transaction_id TEXT PRIMARY KEY,
        fantasy_team_id TEXT NOT NULL,
        transaction_type TEXT NOT NULL,
        player_in_id TEXT,
        player_out_id TEXT,
        gameweek INTEGER,
        price_in REAL,
        price_out REAL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (fantasy_team_id) REFERENCES fantasy_teams(fantasy_team_id),
        FOREIGN KEY (player_in_id) REFERENCES players(player_id),
        FOREIGN KEY (player_out_id) REFERENCES players(player_id)
    );
    CREATE INDEX IF NOT EXISTS idx_transactions_fantasy_team ON transactions(fantasy_team_id);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Referenced tables come first."""
    return "\n".join([
        users_schema(),
        teams_schema(),
        players_schema(),
        leagues_schema(),
        gameweeks_schema(),
        real_matches_schema(),
        fantasy_teams_schema(),
        rosters_schema(),
        gameweek_scores_schema(),
        transactions_schema(),
    ])
