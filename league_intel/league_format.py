"""
League format resolution and position thresholds.

Parses Sleeper-style league settings to derive:
- Starting lineup requirements (including flex variants)
- Scoring format flags (PPR, superflex, TE premium)
- Per-position depth requirements and scarcity multipliers
- The numeric thresholds used by the positional-need classifier

Thresholds are always derived from a LeagueFormat value and passed around
explicitly, so several leagues can be evaluated side by side.
"""

import math
from dataclasses import dataclass, field

from .config import TRACKED_POSITIONS

# === SLOT TYPES ===

STARTER_SLOTS = (
    "QB",
    "RB",
    "WR",
    "TE",
    "FLEX",
    "SUPER_FLEX",
    "WRRB_FLEX",
    "REC_FLEX",
)
BENCH_SLOT = "BN"

# Positions each flex slot accepts
FLEX_ELIGIBILITY = {
    "FLEX": {"RB", "WR", "TE"},
    "SUPER_FLEX": {"QB", "RB", "WR", "TE"},
    "WRRB_FLEX": {"RB", "WR"},
    "REC_FLEX": {"WR", "TE"},
}

PPR_MIN_RECEPTION_POINTS = 0.5
DEFAULT_ROSTER_SIZE = 20

# Trade value adjustment by starting demand
HIGH_DEMAND_STARTERS = 3
HIGH_DEMAND_VALUE = 1.2
LOW_DEMAND_STARTERS = 1
LOW_DEMAND_VALUE = 0.8


# === DATA TYPES ===


@dataclass(frozen=True)
class LeagueFormat:
    """Normalized league configuration. Scoring flags are derived, not stored."""

    num_teams: int = 0
    roster_size: int = DEFAULT_ROSTER_SIZE
    taxi_slots: int = 0
    reserve_slots: int = 0
    starters: dict[str, int] = field(
        default_factory=lambda: {slot: 0 for slot in STARTER_SLOTS}
    )
    bench_slots: int = 0
    reception_points: float = 0.0
    te_reception_bonus: float = 0.0

    @property
    def is_ppr(self) -> bool:
        return self.reception_points >= PPR_MIN_RECEPTION_POINTS

    @property
    def is_superflex(self) -> bool:
        return self.starters.get("SUPER_FLEX", 0) > 0

    @property
    def is_te_premium(self) -> bool:
        return self.te_reception_bonus > 0


@dataclass(frozen=True)
class PositionRequirement:
    min_starters: int
    max_starters: int
    recommended_depth: int
    scarcity_multiplier: float


@dataclass(frozen=True)
class PositionThresholds:
    """Boundaries for one position's DESPERATE / THIN / HOARDING states."""

    desperate_adds: int
    thin_count: int
    hoarding_count: int


# === PARSING HELPERS ===


def _as_count(value) -> int:
    """Coerce a settings value to a non-negative int, defaulting to 0."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def _as_weight(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


# === LEAGUE FORMAT RESOLUTION ===


def resolve_league_format(settings: dict | None) -> LeagueFormat:
    """
    Turn a raw league-settings record into a LeagueFormat.

    Args:
        settings: {
            "roster_positions": list[str],      # e.g. ["QB", "RB", "FLEX", "BN", ...]
            "scoring_settings": dict[str, float],
            "num_teams": int,
            "roster_size": int | None,
            "taxi_slots": int,
            "reserve_slots": int,
        }

    Returns:
        LeagueFormat. Missing or malformed input never raises: counts default
        to 0 and every scoring flag to False.
    """
    settings = settings if isinstance(settings, dict) else {}

    positions = settings.get("roster_positions")
    if not isinstance(positions, (list, tuple)):
        positions = []
    positions = [p for p in positions if isinstance(p, str)]

    scoring = settings.get("scoring_settings")
    if not isinstance(scoring, dict):
        scoring = {}

    starters = {slot: positions.count(slot) for slot in STARTER_SLOTS}
    bench_slots = positions.count(BENCH_SLOT)

    roster_size = _as_count(settings.get("roster_size")) or len(positions)
    if roster_size == 0:
        roster_size = DEFAULT_ROSTER_SIZE

    return LeagueFormat(
        num_teams=_as_count(settings.get("num_teams")),
        roster_size=roster_size,
        taxi_slots=_as_count(settings.get("taxi_slots")),
        reserve_slots=_as_count(settings.get("reserve_slots")),
        starters=starters,
        bench_slots=bench_slots,
        reception_points=_as_weight(scoring.get("rec", 0)),
        te_reception_bonus=_as_weight(scoring.get("bonus_rec_te", 0)),
    )


def can_fill_flex(position: str, flex_slot: str) -> bool:
    """Check if a player at `position` can start in `flex_slot`."""
    return position in FLEX_ELIGIBILITY.get(flex_slot, set())


# === POSITION REQUIREMENTS ===


def _qb_requirement(fmt: LeagueFormat) -> PositionRequirement:
    min_starters = fmt.starters["QB"]
    max_starters = min_starters + (
        fmt.starters["SUPER_FLEX"] if fmt.is_superflex else 0
    )

    # Superflex leagues need a QB behind every possible starter
    recommended_depth = max_starters + 1 if fmt.is_superflex else min_starters + 1
    scarcity = 1.8 if fmt.is_superflex else 1.0

    return PositionRequirement(min_starters, max_starters, recommended_depth, scarcity)


def _rb_requirement(fmt: LeagueFormat) -> PositionRequirement:
    min_starters = fmt.starters["RB"]
    flex_count = (
        fmt.starters["FLEX"]
        + fmt.starters["WRRB_FLEX"]
        + (fmt.starters["SUPER_FLEX"] if fmt.is_superflex else 0)
    )

    # RBs fill ~60% of flex spots in standard, ~50% in PPR
    expected_flex = math.floor(flex_count * (0.5 if fmt.is_ppr else 0.6))
    max_starters = min_starters + expected_flex

    # ~2x starters because of injury volatility
    recommended_depth = max(max_starters * 2, min_starters + 4)

    if fmt.num_teams >= 14:
        scarcity = 1.3
    elif fmt.num_teams >= 12:
        scarcity = 1.1
    else:
        scarcity = 1.0

    return PositionRequirement(min_starters, max_starters, recommended_depth, scarcity)


def _wr_requirement(fmt: LeagueFormat) -> PositionRequirement:
    min_starters = fmt.starters["WR"]
    flex_count = (
        fmt.starters["FLEX"]
        + fmt.starters["WRRB_FLEX"]
        + fmt.starters["REC_FLEX"]
        + (fmt.starters["SUPER_FLEX"] if fmt.is_superflex else 0)
    )

    expected_flex = math.floor(flex_count * (0.7 if fmt.is_ppr else 0.4))
    max_starters = min_starters + expected_flex

    recommended_depth = max(math.floor(max_starters * 1.5), min_starters + 3)
    scarcity = 0.9 if fmt.is_ppr else 1.0

    return PositionRequirement(min_starters, max_starters, recommended_depth, scarcity)


def _te_requirement(fmt: LeagueFormat) -> PositionRequirement:
    min_starters = fmt.starters["TE"]
    flex_count = (
        fmt.starters["FLEX"]
        + fmt.starters["REC_FLEX"]
        + (fmt.starters["SUPER_FLEX"] if fmt.is_superflex else 0)
    )

    # TEs rarely start at flex unless the league pays them a premium
    expected_flex = math.floor(flex_count * 0.2) if fmt.is_te_premium else 0
    max_starters = min_starters + expected_flex

    recommended_depth = max_starters + 2 if fmt.is_te_premium else min_starters + 1
    scarcity = 1.4 if fmt.is_te_premium else 1.0

    return PositionRequirement(min_starters, max_starters, recommended_depth, scarcity)


_REQUIREMENT_BUILDERS = {
    "QB": _qb_requirement,
    "RB": _rb_requirement,
    "WR": _wr_requirement,
    "TE": _te_requirement,
}


def compute_position_requirement(position: str, fmt: LeagueFormat) -> PositionRequirement:
    """
    Starter range, recommended depth and scarcity for one position.

    Args:
        position: One of QB, RB, WR, TE
        fmt: Resolved league format
    """
    assert position in _REQUIREMENT_BUILDERS, f"Untracked position: {position}"
    return _REQUIREMENT_BUILDERS[position](fmt)


def get_position_thresholds(position: str, fmt: LeagueFormat) -> PositionThresholds:
    """
    Derive classifier thresholds for a position under this league's rules.

    desperate_adds = round(3 × scarcity)
    thin_count     = recommended depth
    hoarding_count = ceil(1.5 × recommended depth)
    """
    requirement = compute_position_requirement(position, fmt)

    return PositionThresholds(
        desperate_adds=int(round(3 * requirement.scarcity_multiplier)),
        thin_count=requirement.recommended_depth,
        hoarding_count=math.ceil(requirement.recommended_depth * 1.5),
    )


def build_league_thresholds(fmt: LeagueFormat) -> dict[str, PositionThresholds]:
    """Thresholds for every tracked position."""
    return {pos: get_position_thresholds(pos, fmt) for pos in TRACKED_POSITIONS}


def position_value_multiplier(position: str, fmt: LeagueFormat) -> float:
    """
    Relative trade value of a position in this league.

    Starts from the scarcity multiplier, then 1.2x when the position can fill
    3+ starting spots and 0.8x when it fills at most one.
    """
    requirement = compute_position_requirement(position, fmt)
    multiplier = requirement.scarcity_multiplier

    if requirement.max_starters >= HIGH_DEMAND_STARTERS:
        multiplier *= HIGH_DEMAND_VALUE
    elif requirement.max_starters <= LOW_DEMAND_STARTERS:
        multiplier *= LOW_DEMAND_VALUE

    return multiplier


# === DISPLAY ===


def describe_league_format(fmt: LeagueFormat) -> str:
    """Short human-readable format string, e.g. 'PPR • Superflex • 1QB/2RB/3WR/1TE/1FLEX'."""
    parts = []

    if fmt.is_ppr:
        parts.append("PPR" if fmt.reception_points >= 1 else "Half PPR")
    else:
        parts.append("Standard")

    if fmt.is_superflex:
        parts.append("Superflex")
    if fmt.is_te_premium:
        parts.append("TE Premium")

    lineup = "/".join(
        f"{fmt.starters[slot]}{slot}"
        for slot in ("QB", "RB", "WR", "TE", "FLEX")
        if fmt.starters[slot]
    )
    if lineup:
        parts.append(lineup)

    return " • ".join(parts)
