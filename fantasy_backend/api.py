"""
REST API for the fantasy football backend.
Thin wrappers around services, persistence and access control.
Every write runs inside one transaction: all-or-nothing.
"""
from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager, contextmanager
from decimal import Decimal
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from fantasy_backend.access import (
    AccessDeniedError,
    Principal,
    Role,
    assert_can_read_fantasy_team,
    assert_can_read_reference_data,
    assert_can_read_user,
    assert_can_run_batch_jobs,
    assert_can_write_fantasy_team,
    assert_can_write_reference_data,
)
from fantasy_backend.auth import SERVICE_SUBJECT, create_access_token, decode_token, hash_password, verify_password
from fantasy_backend.models import GameweekStats, GameweekStatus, Position, RealMatchStatus
from fantasy_backend.persistence import (
    get_connection,
    init_db,
    transaction,
    UserRepository,
    ClubRepository,
    PlayerRepository,
    LeagueRepository,
    GameweekRepository,
    RealMatchRepository,
    FantasyTeamRepository,
    RosterRepository,
    TransactionRepository,
)
from fantasy_backend.persistence.db import get_db_path
from fantasy_backend.services import (
    GameweekService,
    GameweekNotFoundError,
    GameweekTransitionError,
    PlayerStatsService,
    RosterService,
    RosterError,
    TransferNotAllowedError,
    StandingsService,
    LeagueNotFoundError,
    build_score_repository,
)

_MAX_PASSWORD_BYTES = 72


def _truncate_password(s: str) -> str:
    """Ensure password is at most 72 UTF-8 bytes."""
    b = s.encode("utf-8")
    if len(b) <= _MAX_PASSWORD_BYTES:
        return s
    return b[:_MAX_PASSWORD_BYTES].decode("utf-8", errors="replace")


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db(db_path=get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Fantasy Football API",
    description="Scoring and roster rules for fantasy football leagues",
    version="0.1.0",
    lifespan=lifespan,
)

security = HTTPBearer(auto_error=False)


# ---------- Request models ----------


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    username: str
    password: str


class CreateClubRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    short_name: str = Field(..., min_length=1, max_length=10)


class CreateLeagueRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class CreatePlayerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    position: Position
    price: Decimal = Field(..., ge=0)
    team_id: str | None = None


class GameweekScoreRequest(BaseModel):
    player_id: str
    gameweek: int = Field(..., ge=1)
    minutes_played: int = Field(0, ge=0)
    goals: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    clean_sheet: bool = False
    yellow_cards: int = Field(0, ge=0)
    red_cards: int = Field(0, ge=0)
    saves: int = Field(0, ge=0)
    bonus_points: int = Field(0, ge=0)
    total_points: int = 0


class CreateGameweekRequest(BaseModel):
    gameweek_number: int = Field(..., ge=1)
    status: GameweekStatus = GameweekStatus.UPCOMING


class CreateRealMatchRequest(BaseModel):
    gameweek: int = Field(..., ge=1)
    home_team_id: str
    away_team_id: str
    status: RealMatchStatus = RealMatchStatus.SCHEDULED


class RealMatchResultRequest(BaseModel):
    status: RealMatchStatus
    home_score: int | None = Field(None, ge=0)
    away_score: int | None = Field(None, ge=0)


class RosterSlot(BaseModel):
    player_id: str
    is_starter: bool = False


class CreateFantasyTeamRequest(BaseModel):
    team_name: str = Field(..., min_length=1, max_length=200)
    league_id: str | None = None
    roster: list[RosterSlot] = Field(default_factory=list)


class TransferRequest(BaseModel):
    player_out_id: str
    player_in_id: str


def _get_current_principal(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> Principal | None:
    """
    Return the principal for the JWT, or None if no/invalid token.
    User roles are read from the users table on every request, so a role
    change applies to tokens already issued. A deleted user has no principal.
    """
    if credentials is None:
        return None
    claims = decode_token(credentials.credentials)
    if claims is None:
        return None
    if claims["role"] == Role.SERVICE.value and claims["sub"] == SERVICE_SUBJECT:
        return Principal(user_id=SERVICE_SUBJECT, role=Role.SERVICE.value)
    with db_conn() as conn:
        user = UserRepository().get(conn, claims["sub"])
    if user is None:
        return None
    return Principal(user_id=user.id, role=user.role)


def _require_principal(principal: Principal | None = Depends(_get_current_principal)) -> Principal:
    if principal is None:
        raise HTTPException(status_code=401, detail="Login required")
    return principal


def _check(fn, *args) -> None:
    """Run an access assertion, mapping denial to 403."""
    try:
        fn(*args)
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))


def _load_team_for(conn: sqlite3.Connection, fantasy_team_id: str, principal: Principal, write: bool = False):
    team = FantasyTeamRepository().get(conn, fantasy_team_id)
    if team is None:
        raise HTTPException(status_code=404, detail="Fantasy team not found")
    _check(assert_can_write_fantasy_team if write else assert_can_read_fantasy_team, principal, team)
    return team


# ---------- Auth ----------


@app.post("/signup")
def signup(req: SignupRequest) -> dict[str, Any]:
    """Create account. Passwords hashed, never stored plain."""
    with db_conn() as conn:
        user_repo = UserRepository()
        if user_repo.get_by_username(conn, req.username):
            raise HTTPException(status_code=400, detail="Username already taken")
        with transaction(conn):
            user = user_repo.create(conn, req.username, hash_password(_truncate_password(req.password)))
        token = create_access_token(user.id, role=user.role)
        return {"user_id": user.id, "username": user.username, "role": user.role, "token": token}


@app.post("/login")
def login(req: LoginRequest) -> dict[str, Any]:
    """Login. Returns JWT token carrying the user's role."""
    with db_conn() as conn:
        user = UserRepository().get_by_username(conn, req.username)
        if user is None or not user.password_hash or not verify_password(_truncate_password(req.password), user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid username or password")
        token = create_access_token(user.id, role=user.role)
        return {"user_id": user.id, "username": user.username, "role": user.role, "token": token}


@app.get("/users/{user_id}")
def get_user(user_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """Own profile, or any profile for admins."""
    _check(assert_can_read_user, principal, user_id)
    with db_conn() as conn:
        user = UserRepository().get(conn, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user.to_dict()


# ---------- Clubs ----------


@app.post("/clubs")
def create_club(req: CreateClubRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_write_reference_data, principal)
    with db_conn() as conn:
        with transaction(conn):
            club = ClubRepository().create(conn, req.name, req.short_name)
        return club.to_dict()


# ---------- Players & scores ----------


@app.get("/players")
def list_players(
    position: Position | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    principal: Principal = Depends(_require_principal),
) -> dict[str, Any]:
    _check(assert_can_read_reference_data, principal)
    with db_conn() as conn:
        players = PlayerRepository().list_all(conn, position=position.value if position else None, limit=limit)
        return {"players": [p.to_dict() for p in players]}


@app.post("/players")
def create_player(req: CreatePlayerRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_write_reference_data, principal)
    with db_conn() as conn:
        try:
            with transaction(conn):
                player = PlayerRepository().create(conn, req.name, req.position.value, req.price, team_id=req.team_id)
        except sqlite3.IntegrityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return player.to_dict()


@app.get("/players/{player_id}")
def get_player(player_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_read_reference_data, principal)
    with db_conn() as conn:
        player = PlayerRepository().get(conn, player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return player.to_dict()


@app.get("/players/{player_id}/gameweeks/{gameweek}")
def get_player_gameweek_stats(
    player_id: str, gameweek: int, principal: Principal = Depends(_require_principal)
) -> dict[str, Any]:
    """Stats for one player in one gameweek; zeros when no record exists."""
    _check(assert_can_read_reference_data, principal)
    with db_conn() as conn:
        stats = PlayerStatsService().player_gameweek_stats(conn, player_id, gameweek)
        return {"player_id": player_id, "gameweek": gameweek, **stats.to_dict()}


@app.post("/gameweek-scores")
def write_gameweek_score(req: GameweekScoreRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """
    Insert or update a player's gameweek score. The player's cumulative
    totals are recomputed in the same transaction.
    """
    _check(assert_can_write_reference_data, principal)
    stats = GameweekStats(**req.model_dump(exclude={"player_id", "gameweek"}))
    with db_conn() as conn:
        if PlayerRepository().get(conn, req.player_id) is None:
            raise HTTPException(status_code=404, detail="Player not found")
        try:
            with transaction(conn):
                score = build_score_repository().upsert(conn, req.player_id, req.gameweek, stats)
        except sqlite3.IntegrityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        player = PlayerRepository().get(conn, req.player_id)
        return {"score": score.to_dict(), "player": player.to_dict() if player else None}


@app.post("/admin/refresh-stats")
def refresh_stats(principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """Full recomputation of every player's cumulative stats."""
    _check(assert_can_run_batch_jobs, principal)
    with db_conn() as conn:
        with transaction(conn):
            count = PlayerStatsService().refresh_all_player_stats(conn)
        return {"players_updated": count}


# ---------- Gameweeks & real matches ----------


@app.get("/gameweeks")
def list_gameweeks(principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_read_reference_data, principal)
    with db_conn() as conn:
        return {"gameweeks": [gw.to_dict() for gw in GameweekRepository().list_all(conn)]}


@app.post("/gameweeks")
def create_gameweek(req: CreateGameweekRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_write_reference_data, principal)
    with db_conn() as conn:
        try:
            with transaction(conn):
                gw = GameweekRepository().create(conn, req.gameweek_number, status=req.status.value)
        except sqlite3.IntegrityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return gw.to_dict()


@app.post("/gameweeks/advance")
def advance_gameweeks(principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """Reconcile gameweek statuses with real match completion."""
    _check(assert_can_run_batch_jobs, principal)
    with db_conn() as conn:
        with transaction(conn):
            changes = GameweekService().advance_gameweek_statuses(conn)
        return {
            "changes": [
                {"gameweek_number": n, "from": old, "to": new} for n, old, new in changes
            ],
        }


@app.post("/gameweeks/{gameweek_number}/finalize")
def finalize_gameweek(gameweek_number: int, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_run_batch_jobs, principal)
    with db_conn() as conn:
        try:
            with transaction(conn):
                GameweekService().finalize_gameweek(conn, gameweek_number)
        except GameweekNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except GameweekTransitionError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"gameweek_number": gameweek_number, "status": GameweekStatus.FINALIZED.value}


@app.get("/transfers/allowed")
def get_transfers_allowed(principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_read_reference_data, principal)
    with db_conn() as conn:
        return {"transfers_allowed": GameweekService().transfers_allowed(conn)}


@app.post("/real-matches")
def create_real_match(req: CreateRealMatchRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_write_reference_data, principal)
    with db_conn() as conn:
        try:
            with transaction(conn):
                m = RealMatchRepository().create(
                    conn, req.gameweek, req.home_team_id, req.away_team_id, status=req.status.value
                )
        except sqlite3.IntegrityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"id": m.id, "gameweek": m.gameweek, "status": m.status}


@app.put("/real-matches/{match_id}/result")
def update_real_match_result(
    match_id: str, req: RealMatchResultRequest, principal: Principal = Depends(_require_principal)
) -> dict[str, Any]:
    _check(assert_can_write_reference_data, principal)
    with db_conn() as conn:
        repo = RealMatchRepository()
        if repo.get(conn, match_id) is None:
            raise HTTPException(status_code=404, detail="Match not found")
        with transaction(conn):
            repo.update_result(conn, match_id, req.status.value, req.home_score, req.away_score)
        return {"id": match_id, "status": req.status.value}


# ---------- Fantasy teams ----------


@app.post("/fantasy-teams")
def create_fantasy_team(req: CreateFantasyTeamRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """Create a fantasy team for the caller with its roster. A duplicate player rejects the whole team."""
    with db_conn() as conn:
        team_repo = FantasyTeamRepository()
        roster_repo = RosterRepository()
        try:
            with transaction(conn):
                team = team_repo.create(conn, principal.user_id, req.team_name, league_id=req.league_id)
                for slot in req.roster:
                    roster_repo.add(conn, team.id, slot.player_id, is_starter=slot.is_starter)
        except sqlite3.IntegrityError as e:
            raise HTTPException(status_code=400, detail=f"Invalid fantasy team: {e}")
        roster = roster_repo.list_by_team(conn, team.id)
        return {**team.to_dict(), "roster": [r.to_dict() for r in roster]}


@app.get("/fantasy-teams")
def list_my_fantasy_teams(principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    with db_conn() as conn:
        teams = FantasyTeamRepository().list_by_user(conn, principal.user_id)
        return {"fantasy_teams": [t.to_dict() for t in teams]}


@app.get("/fantasy-teams/{fantasy_team_id}")
def get_fantasy_team(fantasy_team_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    with db_conn() as conn:
        team = _load_team_for(conn, fantasy_team_id, principal)
        roster = RosterRepository().list_by_team(conn, fantasy_team_id)
        return {**team.to_dict(), "roster": [r.to_dict() for r in roster]}


@app.get("/fantasy-teams/{fantasy_team_id}/value")
def get_team_value(fantasy_team_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    with db_conn() as conn:
        _load_team_for(conn, fantasy_team_id, principal)
        value = RosterService().team_value(conn, fantasy_team_id)
        return {"fantasy_team_id": fantasy_team_id, "team_value": str(value)}


@app.get("/fantasy-teams/{fantasy_team_id}/formation")
def get_team_formation(fantasy_team_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """Formation string and advisory validity."""
    with db_conn() as conn:
        _load_team_for(conn, fantasy_team_id, principal)
        svc = RosterService()
        return {
            "fantasy_team_id": fantasy_team_id,
            "formation": svc.team_formation(conn, fantasy_team_id),
            "valid": svc.validate_formation(conn, fantasy_team_id),
        }


@app.post("/fantasy-teams/{fantasy_team_id}/transfers")
def make_transfer(
    fantasy_team_id: str, req: TransferRequest, principal: Principal = Depends(_require_principal)
) -> dict[str, Any]:
    with db_conn() as conn:
        _load_team_for(conn, fantasy_team_id, principal, write=True)
        try:
            with transaction(conn):
                txn = RosterService().make_transfer(conn, fantasy_team_id, req.player_out_id, req.player_in_id)
        except TransferNotAllowedError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RosterError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except sqlite3.IntegrityError as e:
            raise HTTPException(status_code=400, detail=f"Transfer rejected: {e}")
        return txn.to_dict()


@app.get("/fantasy-teams/{fantasy_team_id}/transactions")
def list_transactions(fantasy_team_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    with db_conn() as conn:
        _load_team_for(conn, fantasy_team_id, principal)
        txns = TransactionRepository().list_by_team(conn, fantasy_team_id)
        return {"transactions": [t.to_dict() for t in txns]}


# ---------- Leagues ----------


@app.post("/leagues")
def create_league(req: CreateLeagueRequest, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    _check(assert_can_write_reference_data, principal)
    with db_conn() as conn:
        with transaction(conn):
            league = LeagueRepository().create(conn, req.name)
        return league.to_dict()


@app.get("/leagues/{league_id}/standings")
def get_league_standings(league_id: str, principal: Principal = Depends(_require_principal)) -> dict[str, Any]:
    """Teams ordered by externally maintained rank."""
    _check(assert_can_read_reference_data, principal)
    with db_conn() as conn:
        svc = StandingsService()
        try:
            svc.assert_league_exists(conn, league_id)
        except LeagueNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        rows = svc.league_standings(conn, league_id)
        return {"league_id": league_id, "standings": [r.to_dict() for r in rows]}


# ---------- Run with: uvicorn fantasy_backend.api:app --reload ----------
