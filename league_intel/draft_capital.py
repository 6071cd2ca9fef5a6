"""
Draft capital analysis.

Analyzes draft pick ownership and trading patterns:
- Pick value calculation (earlier rounds > later rounds)
- Team capital by season and over the near term
- Comparison to the league average
- Accumulating picks = rebuild signal, selling picks = contend signal
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np

from .config import DEFAULT_NUM_TEAMS, NEAR_TERM_YEARS, TRADING_HORIZON_YEARS

# === PICK VALUE CHART ===

FIRST_ROUND_TOP = 100
FIRST_ROUND_STEP = 4
FIRST_ROUND_FLOOR = 50
FIRST_ROUND_UNKNOWN = 75  # average first-round pick

SECOND_ROUND_TOP = 50
SECOND_ROUND_STEP = 2
SECOND_ROUND_FLOOR = 25
SECOND_ROUND_UNKNOWN = 37.5

LATE_ROUND_VALUES = {3: 15, 4: 8}
DEEP_ROUND_VALUE = 3

EARLY_ROUNDS = 2  # rounds counted as "early" when reading trade patterns


@dataclass(frozen=True)
class DraftCapitalSummary:
    team_id: str
    total_value: float
    by_season: dict[int, dict] = field(default_factory=dict)
    near_term_value: float = 0.0
    pattern: str = "balanced"
    strength: str = "weak"
    comparison: str | None = None
    near_term_delta: int = 0
    early_delta: int = 0
    total_delta: int = 0


def _slot_in_round(pick_number: int, num_teams: int) -> int:
    """Accept either the slot within the round or the overall pick number."""
    if num_teams > 0 and pick_number > num_teams:
        return (pick_number - 1) % num_teams + 1
    return pick_number


def calculate_pick_value(
    round_number: int,
    pick_number: int | None = None,
    num_teams: int = DEFAULT_NUM_TEAMS,
) -> float:
    """
    Value of a single draft pick on a simplified chart.

    1st round: 100 declining 4 per slot to a floor of 50 (75 if slot unknown)
    2nd round: 50 declining 2 per slot to a floor of 25 (37.5 if slot unknown)
    3rd round: 15, 4th round: 8, later: 3

    Args:
        round_number: Draft round (1-based)
        pick_number: Slot within the round, or overall pick number
        num_teams: League size, used to fold overall pick numbers into a slot
    """
    if round_number == 1:
        if pick_number:
            slot = _slot_in_round(pick_number, num_teams)
            return max(FIRST_ROUND_TOP - (slot - 1) * FIRST_ROUND_STEP, FIRST_ROUND_FLOOR)
        return FIRST_ROUND_UNKNOWN

    if round_number == 2:
        if pick_number:
            slot = _slot_in_round(pick_number, num_teams)
            return max(
                SECOND_ROUND_TOP - (slot - 1) * SECOND_ROUND_STEP, SECOND_ROUND_FLOOR
            )
        return SECOND_ROUND_UNKNOWN

    return LATE_ROUND_VALUES.get(round_number, DEEP_ROUND_VALUE)


def calculate_draft_capital(
    picks: Iterable[dict],
    current_year: int,
    num_teams: int = DEFAULT_NUM_TEAMS,
) -> dict:
    """
    Total draft capital for a set of picks.

    Args:
        picks: Records with season, round and optional pick_number
        current_year: Reference season for the near-term horizon

    Returns:
        {
            "total_value": float,
            "by_season": {season: {"count": int, "value": float}},  # sorted by season
            "near_term_value": float,  # seasons <= current_year + 3
        }
    """
    by_season = {}
    total_value = 0.0
    near_term_value = 0.0

    for pick in picks:
        value = calculate_pick_value(pick["round"], pick.get("pick_number"), num_teams)
        season = int(pick["season"])
        total_value += value

        if season <= current_year + NEAR_TERM_YEARS:
            near_term_value += value

        bucket = by_season.setdefault(season, {"count": 0, "value": 0.0})
        bucket["count"] += 1
        bucket["value"] += value

    return {
        "total_value": total_value,
        "by_season": dict(sorted(by_season.items())),
        "near_term_value": near_term_value,
    }


def compare_to_league_average(team_value: float, league_average: float) -> str:
    """
    Bucket a team's capital relative to the league average.

    Returns one of: abundant, above-average, average, below-average, depleted.
    """
    if league_average <= 0:
        return "average"

    ratio = team_value / league_average

    if ratio >= 1.5:
        return "abundant"
    if ratio >= 1.2:
        return "above-average"
    if ratio >= 0.8:
        return "average"
    if ratio >= 0.5:
        return "below-average"
    return "depleted"


def analyze_pick_trading(
    original_picks: list[dict],
    current_picks: list[dict],
    current_year: int,
) -> dict:
    """
    Determine whether a team is buying or selling its future.

    Near-term picks are seasons in (current_year, current_year + 2]; early picks
    are rounds 1-2. Deltas are current minus original (negative = picks lost).

    Returns:
        {
            "total_delta": int,
            "near_term_delta": int,
            "early_delta": int,
            "pattern": "accumulating" | "balanced" | "selling",
            "strength": "strong" | "moderate" | "weak",
        }
    """
    horizon = current_year + TRADING_HORIZON_YEARS

    def near_term(picks):
        return sum(1 for p in picks if current_year < int(p["season"]) <= horizon)

    def early(picks):
        return sum(1 for p in picks if p["round"] <= EARLY_ROUNDS)

    near_term_delta = near_term(current_picks) - near_term(original_picks)
    early_delta = early(current_picks) - early(original_picks)
    total_delta = len(current_picks) - len(original_picks)

    if near_term_delta >= 2 or early_delta >= 1:
        pattern = "accumulating"
    elif near_term_delta <= -2 or early_delta <= -1:
        pattern = "selling"
    else:
        pattern = "balanced"

    if pattern == "balanced":
        strength = "weak"
    else:
        strength = "strong" if abs(near_term_delta) >= 3 else "moderate"

    return {
        "total_delta": total_delta,
        "near_term_delta": near_term_delta,
        "early_delta": early_delta,
        "pattern": pattern,
        "strength": strength,
    }


def split_picks_by_team(team_id: str, picks: Iterable[dict]) -> tuple[list, list]:
    """
    Original and current pick sets for a team.

    A pick's original owner falls back to its current owner when unknown
    (i.e. the pick was never traded).

    Returns:
        (original_picks, current_picks)
    """
    original = []
    current = []

    for pick in picks:
        owner = pick.get("owner_id")
        original_owner = pick.get("original_owner_id") or owner
        if original_owner == team_id:
            original.append(pick)
        if owner == team_id:
            current.append(pick)

    return original, current


def league_average_draft_capital(
    team_pick_sets: Iterable[list[dict]],
    current_year: int,
    num_teams: int = DEFAULT_NUM_TEAMS,
) -> float:
    """Mean total capital across teams (0.0 for an empty league)."""
    totals = [
        calculate_draft_capital(picks, current_year, num_teams)["total_value"]
        for picks in team_pick_sets
    ]
    if not totals:
        return 0.0
    return float(np.mean(totals))


def summarize_draft_capital(
    team_id: str,
    picks: list[dict],
    current_year: int,
    league_average: float | None = None,
    num_teams: int = DEFAULT_NUM_TEAMS,
) -> DraftCapitalSummary:
    """
    Full draft-capital summary for one team from league-wide pick records.

    Args:
        team_id: Team to summarize
        picks: Every pick record in the league ({season, round, pick_number,
            owner_id, original_owner_id})
        current_year: Reference season
        league_average: League-average total capital, if known
    """
    original, current = split_picks_by_team(team_id, picks)
    capital = calculate_draft_capital(current, current_year, num_teams)
    trading = analyze_pick_trading(original, current, current_year)

    comparison = None
    if league_average is not None:
        comparison = compare_to_league_average(capital["total_value"], league_average)

    return DraftCapitalSummary(
        team_id=team_id,
        total_value=capital["total_value"],
        by_season=capital["by_season"],
        near_term_value=capital["near_term_value"],
        pattern=trading["pattern"],
        strength=trading["strength"],
        comparison=comparison,
        near_term_delta=trading["near_term_delta"],
        early_delta=trading["early_delta"],
        total_delta=trading["total_delta"],
    )


def describe_draft_capital(summary: DraftCapitalSummary) -> str:
    """One-line description of a team's draft position."""
    descriptions = {
        "abundant": "Loaded with draft capital – strong rebuild foundation",
        "above-average": "Above average draft picks – good flexibility",
        "average": "Standard draft capital",
        "below-average": "Below average picks – traded for win-now",
        "depleted": "Minimal draft capital – all-in on current roster",
    }
    desc = descriptions.get(summary.comparison or "average")

    if summary.strength == "strong":
        if summary.pattern == "accumulating":
            desc += ". Aggressively acquiring future picks."
        elif summary.pattern == "selling":
            desc += ". Aggressively trading picks for talent."

    return desc
