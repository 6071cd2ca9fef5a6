"""
Transaction aggregation into windowed behavioral signals.

Reduces a team's add/drop log into the counts, per-position breakdowns,
average ages and activity trend consumed by the classifiers. Every function
here is a pure reduction: the reference time `as_of` is always passed in, never
read from the wall clock mid-computation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

import numpy as np
import pandas as pd

from .config import POSITIONAL_WINDOW_DAYS, STRATEGY_WINDOW_DAYS

DIRECTIONS = ("ADD", "DROP")
TRANSACTION_COLUMNS = ["player_id", "position", "age", "direction", "timestamp"]

# Activity trend boundaries (total moves in the strategy window)
RISING_MIN_MOVES = 10
FALLING_MAX_MOVES = 2


@dataclass(frozen=True)
class WindowedSignals:
    team_id: str
    adds: int = 0
    drops: int = 0
    adds_by_position: dict[str, int] = field(default_factory=dict)
    drops_by_position: dict[str, int] = field(default_factory=dict)
    avg_age_added: float | None = None
    avg_age_dropped: float | None = None
    days_since_last_activity: int | None = None
    activity_trend: str = "INACTIVE"

    @property
    def total_moves(self) -> int:
        return self.adds + self.drops


# === TIME HANDLING ===


def to_utc_timestamp(value) -> pd.Timestamp | None:
    """
    Normalize a timestamp to a tz-aware UTC pd.Timestamp.

    Accepts datetime, ISO-8601 strings, pd.Timestamp, or epoch milliseconds
    (Sleeper's `created` field). Naive values are treated as UTC.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None

    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(
        value, bool
    ):
        ts = pd.Timestamp(int(value), unit="ms")
    else:
        ts = pd.Timestamp(value)

    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def days_since(moment, as_of) -> int | None:
    """
    Whole days elapsed between `moment` and `as_of`.

    Returns None if `moment` is None (team never active).
    """
    moment = to_utc_timestamp(moment)
    if moment is None:
        return None

    delta = to_utc_timestamp(as_of) - moment
    return int(delta.total_seconds() // 86400)


def utc_now() -> datetime:
    """Reference time for callers that don't supply one."""
    return datetime.now(timezone.utc)


# === NORMALIZATION ===


def transactions_to_frame(transactions: list[dict] | pd.DataFrame) -> pd.DataFrame:
    """
    Convert transaction records into a normalized DataFrame.

    Args:
        transactions: Records with keys
            player_id, position, age (or None), direction ("ADD"/"DROP"), timestamp

    Returns:
        DataFrame with columns TRANSACTION_COLUMNS, `timestamp` as UTC datetimes,
        `age` as float (NaN when unknown). Order of input rows is preserved.
    """
    if isinstance(transactions, pd.DataFrame):
        df = transactions.copy()
    else:
        df = pd.DataFrame(list(transactions), columns=TRANSACTION_COLUMNS)

    for col in TRANSACTION_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df = df[TRANSACTION_COLUMNS].copy()
    df["direction"] = df["direction"].fillna("").astype(str).str.upper()

    unknown = set(df["direction"]) - set(DIRECTIONS)
    assert not unknown, f"Unknown transaction direction(s): {sorted(unknown)}"

    df["position"] = df["position"].fillna("UNKNOWN").astype(str)
    df["age"] = pd.to_numeric(df["age"], errors="coerce").astype(float)
    df["timestamp"] = pd.Series(
        [to_utc_timestamp(t) for t in df["timestamp"]], index=df.index, dtype=object
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)

    return df


def filter_window(df: pd.DataFrame, as_of, window_days: int) -> pd.DataFrame:
    """Rows with as_of - window_days <= timestamp <= as_of."""
    assert window_days > 0, "window_days must be positive"

    end = to_utc_timestamp(as_of)
    start = end - pd.Timedelta(days=window_days)
    mask = (df["timestamp"] >= start) & (df["timestamp"] <= end)
    return df[mask]


# === AGGREGATION ===


def _count_by_position(df: pd.DataFrame) -> dict[str, int]:
    counts = df.groupby("position").size()
    return {pos: int(counts[pos]) for pos in sorted(counts.index)}


def _average_known_age(df: pd.DataFrame) -> float | None:
    """Mean over known ages only; None if no row has an age."""
    ages = df["age"].dropna().to_numpy(dtype=float)
    if len(ages) == 0:
        return None
    return float(np.mean(ages))


def classify_activity_trend(total_moves: int) -> str:
    if total_moves == 0:
        return "INACTIVE"
    if total_moves >= RISING_MIN_MOVES:
        return "RISING"
    if total_moves <= FALLING_MAX_MOVES:
        return "FALLING"
    return "STABLE"


def aggregate_signals(
    team_id: str,
    transactions: list[dict] | pd.DataFrame,
    as_of,
    window_days: int = STRATEGY_WINDOW_DAYS,
    last_activity_at=None,
) -> WindowedSignals:
    """
    Reduce a team's transaction log into WindowedSignals.

    Args:
        team_id: Team identifier
        transactions: Full add/drop log for the team (any time range)
        as_of: Reference time for the trailing window
        window_days: Window length (30 by default)
        last_activity_at: Last roster transaction time, if known. Falls back to
            the newest transaction at or before as_of.

    Returns:
        WindowedSignals, recomputed wholesale from the inputs. Re-running on the
        same inputs gives an identical result.
    """
    df = transactions_to_frame(transactions)
    window = filter_window(df, as_of, window_days)

    adds = window[window["direction"] == "ADD"]
    drops = window[window["direction"] == "DROP"]
    total_moves = len(adds) + len(drops)

    if last_activity_at is None:
        past = df.loc[df["timestamp"] <= to_utc_timestamp(as_of), "timestamp"]
        if len(past) > 0:
            last_activity_at = past.max()

    return WindowedSignals(
        team_id=team_id,
        adds=len(adds),
        drops=len(drops),
        adds_by_position=_count_by_position(adds),
        drops_by_position=_count_by_position(drops),
        avg_age_added=_average_known_age(adds),
        avg_age_dropped=_average_known_age(drops),
        days_since_last_activity=days_since(last_activity_at, as_of),
        activity_trend=classify_activity_trend(total_moves),
    )


def count_adds_by_position(
    transactions: list[dict] | pd.DataFrame,
    as_of,
    window_days: int = POSITIONAL_WINDOW_DAYS,
) -> dict[str, int]:
    """Adds per position in the short (21-day) positional window."""
    df = transactions_to_frame(transactions)
    window = filter_window(df, as_of, window_days)
    return _count_by_position(window[window["direction"] == "ADD"])
