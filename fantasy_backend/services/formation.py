"""
Formation rules for a starting lineup.

A valid lineup has exactly 11 starters: 1 GK, 3-5 DEF, 2-5 MID, 1-3 FWD.
The per-position ranges and the total are checked independently: the ranges
alone admit lineups of 7 to 14 players.
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable

from fantasy_backend.models import Position

STARTERS_REQUIRED = 11

# Inclusive (min, max) starters per position
POSITION_LIMITS: dict[str, tuple[int, int]] = {
    Position.GK.value: (1, 1),
    Position.DEF.value: (3, 5),
    Position.MID.value: (2, 5),
    Position.FWD.value: (1, 3),
}


def count_positions(positions: Iterable[str]) -> dict[str, int]:
    """Starter count per position; every position present, zero if absent."""
    counts = Counter(positions)
    return {pos: counts.get(pos, 0) for pos in POSITION_LIMITS}


def render_formation(counts: dict[str, int]) -> str:
    """DEF-MID-FWD, e.g. '4-4-2'. Goalkeepers are not rendered."""
    return "{}-{}-{}".format(
        counts.get(Position.DEF.value, 0),
        counts.get(Position.MID.value, 0),
        counts.get(Position.FWD.value, 0),
    )


def is_valid_formation(counts: dict[str, int], total_starters: int) -> bool:
    """Advisory check; never raises."""
    in_range = all(
        lo <= counts.get(pos, 0) <= hi for pos, (lo, hi) in POSITION_LIMITS.items()
    )
    return in_range and total_starters == STARTERS_REQUIRED
