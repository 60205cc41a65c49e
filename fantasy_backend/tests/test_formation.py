"""
Tests for pure formation rules: counting, rendering, validation.
"""
from __future__ import annotations

import pytest

from fantasy_backend.services.formation import (
    STARTERS_REQUIRED,
    count_positions,
    is_valid_formation,
    render_formation,
)


def _lineup(gk: int, df: int, md: int, fw: int) -> list[str]:
    return ["GK"] * gk + ["DEF"] * df + ["MID"] * md + ["FWD"] * fw


def test_count_positions_includes_absent_positions():
    counts = count_positions(["DEF", "DEF", "FWD"])
    assert counts == {"GK": 0, "DEF": 2, "MID": 0, "FWD": 1}


def test_render_formation_omits_goalkeeper():
    assert render_formation(count_positions(_lineup(1, 4, 4, 2))) == "4-4-2"
    assert render_formation(count_positions(_lineup(1, 3, 5, 2))) == "3-5-2"


def test_render_formation_empty():
    assert render_formation(count_positions([])) == "0-0-0"


@pytest.mark.parametrize(
    "gk,df,md,fw",
    [(1, 4, 4, 2), (1, 4, 3, 3), (1, 3, 5, 2), (1, 5, 4, 1), (1, 5, 2, 3)],
)
def test_valid_formations(gk, df, md, fw):
    lineup = _lineup(gk, df, md, fw)
    assert len(lineup) == STARTERS_REQUIRED
    assert is_valid_formation(count_positions(lineup), len(lineup)) is True


@pytest.mark.parametrize(
    "gk,df,md,fw",
    [
        (0, 5, 4, 2),  # no keeper
        (2, 4, 3, 2),  # two keepers
        (1, 2, 5, 3),  # too few defenders
        (1, 6, 2, 2),  # too many defenders
        (1, 5, 1, 3),  # too few midfielders
        (1, 4, 6, 0),  # no forwards
    ],
)
def test_range_violations_are_invalid(gk, df, md, fw):
    lineup = _lineup(gk, df, md, fw)
    assert is_valid_formation(count_positions(lineup), len(lineup)) is False


def test_ranges_satisfied_but_total_not_eleven():
    """1+3+2+1 = 7 passes every range check; the total alone rejects it."""
    lineup = _lineup(1, 3, 2, 1)
    counts = count_positions(lineup)
    assert len(lineup) == 7
    assert is_valid_formation(counts, len(lineup)) is False


def test_ranges_satisfied_but_total_above_eleven():
    lineup = _lineup(1, 5, 5, 3)
    assert is_valid_formation(count_positions(lineup), len(lineup)) is False
