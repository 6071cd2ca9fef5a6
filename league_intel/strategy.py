"""
Team strategy classification.

Classifies teams as REBUILD, CONTEND, TINKER, or INACTIVE from windowed
behavioral signals:
- Transaction volume (activity level)
- Average age of players added vs dropped
- Days since last activity

The rules form a strict priority chain. STRATEGY_RULES is evaluated top to
bottom and the first matching rule wins, so INACTIVE always dominates any age
pattern, and a strong age pattern dominates the moderate ones.
"""

from collections.abc import Callable
from dataclasses import dataclass

from .signals import WindowedSignals

STRATEGY_LABELS = ("REBUILD", "CONTEND", "TINKER", "INACTIVE")

# === RULE CONSTANTS ===

INACTIVE_DAYS = 21
YOUNG_ADD_AGE = 24  # strong rebuild: adding at or below this age
VERY_YOUNG_ADD_AGE = 23  # moderate rebuild
VETERAN_AGE = 26  # strong contend: adding at or above; strong rebuild: dropping at or above
OLD_ADD_AGE = 27  # moderate contend
MIN_PATTERN_MOVES = 3
HIGH_ACTIVITY_MOVES = 8


@dataclass(frozen=True)
class StrategyProfile:
    label: str
    confidence: float
    reason: str
    rule: str = ""


# A rule is (name, predicate, builder). The builder only runs when the
# predicate matched, so it may rely on the predicate's guarantees
# (e.g. non-null ages after the unknown-age rule).
StrategyRule = tuple[
    str,
    Callable[[WindowedSignals], bool],
    Callable[[WindowedSignals], tuple[str, float, str]],
]


def _ages(s: WindowedSignals) -> tuple[float, float]:
    return s.avg_age_added, s.avg_age_dropped


# === RULES ===


def _long_inactive(s: WindowedSignals) -> tuple[str, float, str]:
    days = s.days_since_last_activity
    confidence = min(0.7 + (days - INACTIVE_DAYS) * 0.01, 0.99)
    return (
        "INACTIVE",
        confidence,
        f"No activity in {days} days – likely checked out or abandoned team.",
    )


def _no_recent_moves(s: WindowedSignals) -> tuple[str, float, str]:
    return "INACTIVE", 0.8, "Zero moves in the last 30 days – minimal engagement."


def _missing_ages(s: WindowedSignals) -> tuple[str, float, str]:
    return (
        "TINKER",
        0.5,
        f"{s.total_moves} moves in 30 days, but not enough data to determine clear strategy.",
    )


def _strong_rebuild(s: WindowedSignals) -> tuple[str, float, str]:
    added, dropped = _ages(s)
    confidence = min(0.7 + (dropped - added) * 0.05, 0.95)
    return (
        "REBUILD",
        confidence,
        f"Adding young players (avg age {added:.1f}) and dropping vets "
        f"(avg age {dropped:.1f}) – rebuilding for the future.",
    )


def _moderate_rebuild(s: WindowedSignals) -> tuple[str, float, str]:
    added, _ = _ages(s)
    return (
        "REBUILD",
        0.65,
        f"Targeting young players (avg age {added:.1f}) across {s.total_moves} moves "
        f"– likely rebuilding.",
    )


def _strong_contend(s: WindowedSignals) -> tuple[str, float, str]:
    added, dropped = _ages(s)
    confidence = min(0.7 + (added - dropped) * 0.05, 0.95)
    return (
        "CONTEND",
        confidence,
        f"Adding veterans (avg age {added:.1f}) and dropping youth "
        f"(avg age {dropped:.1f}) – pushing for a championship.",
    )


def _moderate_contend(s: WindowedSignals) -> tuple[str, float, str]:
    added, _ = _ages(s)
    return (
        "CONTEND",
        0.65,
        f"Targeting veteran players (avg age {added:.1f}) across {s.total_moves} moves "
        f"– likely competing now.",
    )


def _high_activity(s: WindowedSignals) -> tuple[str, float, str]:
    return (
        "TINKER",
        0.7,
        f"High activity ({s.total_moves} moves in 30 days) with mixed player ages "
        f"– actively tinkering without clear direction.",
    )


def _default_tinker(s: WindowedSignals) -> tuple[str, float, str]:
    added, dropped = _ages(s)
    avg_age = (added + dropped) / 2
    return (
        "TINKER",
        0.6,
        f"{s.total_moves} moves with balanced age profile (avg ~{avg_age:.1f}) "
        f"– making incremental adjustments.",
    )


STRATEGY_RULES: list[StrategyRule] = [
    (
        "long_inactive",
        lambda s: s.days_since_last_activity is not None
        and s.days_since_last_activity >= INACTIVE_DAYS,
        _long_inactive,
    ),
    ("no_recent_moves", lambda s: s.total_moves == 0, _no_recent_moves),
    (
        "missing_ages",
        lambda s: s.avg_age_added is None or s.avg_age_dropped is None,
        _missing_ages,
    ),
    (
        "strong_rebuild",
        lambda s: s.avg_age_added <= YOUNG_ADD_AGE and s.avg_age_dropped >= VETERAN_AGE,
        _strong_rebuild,
    ),
    (
        "moderate_rebuild",
        lambda s: s.avg_age_added <= VERY_YOUNG_ADD_AGE
        and s.total_moves >= MIN_PATTERN_MOVES,
        _moderate_rebuild,
    ),
    (
        "strong_contend",
        lambda s: s.avg_age_added >= VETERAN_AGE and s.avg_age_dropped <= YOUNG_ADD_AGE,
        _strong_contend,
    ),
    (
        "moderate_contend",
        lambda s: s.avg_age_added >= OLD_ADD_AGE and s.total_moves >= MIN_PATTERN_MOVES,
        _moderate_contend,
    ),
    ("high_activity", lambda s: s.total_moves >= HIGH_ACTIVITY_MOVES, _high_activity),
    ("default", lambda s: True, _default_tinker),
]


def classify_team_strategy(
    signals: WindowedSignals,
    rules: list[StrategyRule] = STRATEGY_RULES,
) -> StrategyProfile:
    """
    Classify team strategy from windowed signals.

    Args:
        signals: Aggregated team behavior. `days_since_last_activity` must be
            precomputed; nothing here reads the clock.
        rules: Ordered rule chain (first match wins)

    Returns:
        StrategyProfile with label, confidence in [0, 1], a reason that quotes
        the numbers behind the decision, and the name of the rule that fired.
    """
    for name, predicate, build in rules:
        if predicate(signals):
            label, confidence, reason = build(signals)
            assert label in STRATEGY_LABELS, f"Unknown strategy label: {label}"
            assert 0.0 <= confidence <= 1.0, f"Confidence out of range: {confidence}"
            return StrategyProfile(label, confidence, reason, rule=name)

    raise AssertionError("Strategy rule chain has no fallback rule")
