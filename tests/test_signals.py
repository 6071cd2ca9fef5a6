"""Tests for transaction aggregation into windowed signals."""

import pandas as pd
import pytest

from league_intel.signals import (
    WindowedSignals,
    aggregate_signals,
    classify_activity_trend,
    count_adds_by_position,
    days_since,
    filter_window,
    to_utc_timestamp,
    transactions_to_frame,
)

AS_OF = pd.Timestamp("2024-10-15T12:00:00Z")


def days_ago(n: float) -> pd.Timestamp:
    return AS_OF - pd.Timedelta(days=n)


def txn(direction, position, age, days, player_id="p"):
    return {
        "player_id": player_id,
        "position": position,
        "age": age,
        "direction": direction,
        "timestamp": days_ago(days),
    }


# =============================================================================
# TIME HANDLING
# =============================================================================


class TestToUtcTimestamp:
    """Tests for to_utc_timestamp function."""

    def test_epoch_milliseconds(self):
        assert to_utc_timestamp(1700000000000) == pd.Timestamp("2023-11-14T22:13:20Z")

    def test_naive_string_is_utc(self):
        ts = to_utc_timestamp("2024-10-15 12:00:00")
        assert ts == AS_OF
        assert str(ts.tzinfo) == "UTC"

    def test_offset_converted_to_utc(self):
        assert to_utc_timestamp("2024-10-15T08:00:00-04:00") == AS_OF

    def test_missing_values(self):
        assert to_utc_timestamp(None) is None
        assert to_utc_timestamp(float("nan")) is None
        assert to_utc_timestamp(pd.NaT) is None


def test_days_since_floors_to_whole_days():
    assert days_since(AS_OF - pd.Timedelta(hours=36), AS_OF) == 1
    assert days_since(days_ago(21), AS_OF) == 21
    assert days_since(None, AS_OF) is None


# =============================================================================
# NORMALIZATION
# =============================================================================


def test_transactions_to_frame_normalizes_columns():
    df = transactions_to_frame(
        [
            {"player_id": "1", "position": None, "direction": "add", "timestamp": 1700000000000},
        ]
    )

    assert list(df.columns) == ["player_id", "position", "age", "direction", "timestamp"]
    assert df.loc[0, "direction"] == "ADD"
    assert df.loc[0, "position"] == "UNKNOWN"
    assert pd.isna(df.loc[0, "age"])
    assert df.loc[0, "timestamp"] == pd.Timestamp("2023-11-14T22:13:20Z")


def test_transactions_to_frame_rejects_unknown_direction():
    with pytest.raises(AssertionError):
        transactions_to_frame([txn("TRADE", "RB", 25, 1)])


def test_filter_window_is_inclusive():
    df = transactions_to_frame(
        [
            txn("ADD", "RB", 25, 30, "edge"),
            txn("ADD", "RB", 25, 30.5, "old"),
            txn("ADD", "RB", 25, -1, "future"),
            txn("ADD", "RB", 25, 0, "now"),
        ]
    )
    window = filter_window(df, AS_OF, 30)
    assert set(window["player_id"]) == {"edge", "now"}


# =============================================================================
# AGGREGATION
# =============================================================================


class TestAggregateSignals:
    """Tests for aggregate_signals function."""

    def test_counts_and_ages(self):
        signals = aggregate_signals(
            "t1",
            [
                txn("ADD", "RB", 22, 5, "a"),
                txn("ADD", "WR", 23, 5, "b"),
                txn("DROP", "RB", 29, 10, "c"),
                txn("ADD", "QB", 35, 40, "outside"),
            ],
            AS_OF,
        )

        assert signals.team_id == "t1"
        assert signals.adds == 2
        assert signals.drops == 1
        assert signals.total_moves == 3
        assert signals.adds_by_position == {"RB": 1, "WR": 1}
        assert signals.drops_by_position == {"RB": 1}
        assert signals.avg_age_added == pytest.approx(22.5)
        assert signals.avg_age_dropped == pytest.approx(29.0)
        assert signals.days_since_last_activity == 5
        assert signals.activity_trend == "STABLE"

    def test_unknown_ages_ignored(self):
        signals = aggregate_signals(
            "t1",
            [
                txn("ADD", "RB", None, 2),
                txn("ADD", "RB", 24, 2),
                txn("DROP", "WR", None, 2),
            ],
            AS_OF,
        )
        assert signals.avg_age_added == pytest.approx(24.0)
        assert signals.avg_age_dropped is None

    def test_no_transactions(self):
        signals = aggregate_signals("t1", [], AS_OF)

        assert signals == WindowedSignals(team_id="t1")
        assert signals.days_since_last_activity is None
        assert signals.activity_trend == "INACTIVE"

    def test_last_activity_override(self):
        """An explicit last-activity time wins over the log."""
        signals = aggregate_signals(
            "t1", [txn("ADD", "RB", 25, 40)], AS_OF, last_activity_at=days_ago(3)
        )
        assert signals.days_since_last_activity == 3
        assert signals.adds == 0

    def test_last_activity_from_old_log(self):
        signals = aggregate_signals("t1", [txn("ADD", "RB", 25, 40)], AS_OF)
        assert signals.days_since_last_activity == 40

    def test_last_activity_ignores_future_transactions(self):
        signals = aggregate_signals(
            "t1", [txn("ADD", "RB", 25, 40, "old"), txn("ADD", "WR", 24, -5, "late")], AS_OF
        )
        assert signals.days_since_last_activity == 40
        assert signals.adds == 0

    def test_only_future_transactions(self):
        signals = aggregate_signals("t1", [txn("ADD", "WR", 24, -5)], AS_OF)
        assert signals.days_since_last_activity is None
        assert signals.activity_trend == "INACTIVE"

    def test_deterministic(self):
        log = [txn("ADD", "RB", 22, 1), txn("DROP", "TE", 31, 2)]
        assert aggregate_signals("t1", log, AS_OF) == aggregate_signals("t1", log, AS_OF)

    def test_accepts_dataframe(self):
        log = [txn("ADD", "RB", 22, 1), txn("DROP", "TE", 31, 2)]
        assert aggregate_signals("t1", pd.DataFrame(log), AS_OF) == aggregate_signals(
            "t1", log, AS_OF
        )


def test_classify_activity_trend():
    assert classify_activity_trend(0) == "INACTIVE"
    assert classify_activity_trend(2) == "FALLING"
    assert classify_activity_trend(5) == "STABLE"
    assert classify_activity_trend(10) == "RISING"


def test_count_adds_by_position_uses_short_window():
    adds = count_adds_by_position(
        [
            txn("ADD", "RB", 24, 3),
            txn("ADD", "RB", 24, 20),
            txn("ADD", "RB", 24, 25),
            txn("DROP", "WR", 24, 3),
            txn("ADD", "TE", 24, 1),
        ],
        AS_OF,
    )
    assert adds == {"RB": 2, "TE": 1}
