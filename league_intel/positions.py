"""
Positional needs and roster analysis.

Classifies each tracked position (QB, RB, WR, TE) as:
- DESPERATE: Urgent need, actively adding via waivers
- THIN: Below the league's recommended depth
- STABLE: Adequate depth for the roster
- HOARDING: Well above recommended depth, surplus

Uses roster counts + recent waiver activity, against thresholds derived from
the league format (see league_format.get_position_thresholds).
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .config import TRACKED_POSITIONS
from .league_format import LeagueFormat, PositionThresholds, get_position_thresholds

POSITION_STATES = ("DESPERATE", "THIN", "STABLE", "HOARDING")
NEED_STATES = ("DESPERATE", "THIN")


@dataclass(frozen=True)
class PositionalProfile:
    needs: dict[str, str] = field(default_factory=dict)
    roster_counts: dict[str, dict[str, int]] = field(default_factory=dict)

    def surplus(self) -> list[str]:
        return [pos for pos, state in self.needs.items() if state == "HOARDING"]

    def wants(self) -> list[str]:
        return [pos for pos, state in self.needs.items() if state in NEED_STATES]


# Rule inputs: (total rostered, adds in window, thresholds)
PositionRule = tuple[str, Callable[[int, int, PositionThresholds], bool]]

# Desperation is checked before depth: a thin position that is also being
# worked on the wire reads as an active need, not a static depth gap.
POSITION_RULES: list[PositionRule] = [
    ("DESPERATE", lambda total, adds, t: adds >= t.desperate_adds),
    ("DESPERATE", lambda total, adds, t: total < t.thin_count - 1 and adds >= 2),
    ("THIN", lambda total, adds, t: total < t.thin_count),
    ("HOARDING", lambda total, adds, t: total >= t.hoarding_count),
    ("STABLE", lambda total, adds, t: True),
]


def classify_position_state(
    starters: int,
    bench: int,
    adds_21d: int,
    thresholds: PositionThresholds,
) -> str:
    """
    Classify positional state for a single position.

    Args:
        starters: Rostered starters at the position
        bench: Rostered bench players at the position
        adds_21d: Waiver/FA adds at the position in the last 21 days
        thresholds: League-derived boundaries for this position

    Returns:
        One of POSITION_STATES
    """
    total = starters + bench

    for state, predicate in POSITION_RULES:
        if predicate(total, adds_21d, thresholds):
            return state

    raise AssertionError("Position rule chain has no fallback rule")


def count_roster_by_position(players: Iterable[dict]) -> dict[str, dict[str, int]]:
    """
    Count roster composition by position.

    Args:
        players: Roster records with `position` and `is_starter`

    Returns:
        {position: {"starters": n, "bench": n}}. Tracked positions are always
        present; other positions appear only when rostered.
    """
    counts = {pos: {"starters": 0, "bench": 0} for pos in TRACKED_POSITIONS}

    for player in players:
        pos = player.get("position") or "UNKNOWN"
        slot = "starters" if player.get("is_starter") else "bench"
        counts.setdefault(pos, {"starters": 0, "bench": 0})[slot] += 1

    return counts


def build_positional_profile(
    roster_counts: dict[str, dict[str, int]],
    adds_by_position: dict[str, int],
    league_format: LeagueFormat,
) -> PositionalProfile:
    """
    Build the complete positional profile for a team.

    Args:
        roster_counts: From count_roster_by_position(); missing positions count as empty
        adds_by_position: Adds per position in the last 21 days
        league_format: Resolved league format used to derive thresholds

    Returns:
        PositionalProfile covering every tracked position
    """
    needs = {}
    counts_used = {}

    for pos in TRACKED_POSITIONS:
        counts = roster_counts.get(pos, {"starters": 0, "bench": 0})
        starters = counts.get("starters", 0)
        bench = counts.get("bench", 0)

        needs[pos] = classify_position_state(
            starters,
            bench,
            adds_by_position.get(pos, 0),
            get_position_thresholds(pos, league_format),
        )
        counts_used[pos] = {"starters": starters, "bench": bench}

    return PositionalProfile(needs=needs, roster_counts=counts_used)


def describe_position_state(state: str, position: str) -> str:
    """Human-readable description of a positional state."""
    descriptions = {
        "DESPERATE": f"Urgently needs {position}s – actively adding via waivers",
        "THIN": f"Thin at {position} – could use depth",
        "STABLE": f"Solid {position} depth",
        "HOARDING": f"Surplus of {position}s – potential trade pieces",
    }
    assert state in descriptions, f"Unknown positional state: {state}"
    return descriptions[state]
