"""
Tests for Sleeper API conversion and fetching.

No network access: fetch tests run against a mocked requests session.
"""

import json
from unittest.mock import MagicMock

import pandas as pd
import pytest
import requests

from league_intel.pipeline import analyze_league
from league_intel.sleeper_api import (
    USER_AGENT,
    build_team_records,
    calculate_player_age,
    create_session,
    draft_pick_records,
    fetch_league,
    fetch_league_snapshot,
    league_settings_record,
    roster_records,
    snapshot_to_json,
    transaction_records,
)

AS_OF = "2024-10-15T12:00:00Z"
CREATED_MS = 1728900000000  # 2024-10-14 10:00 UTC

PLAYERS = {
    "p1": {"position": "RB", "birth_date": "2000-01-01"},
    "p2": {"position": "WR", "age": 30},
    "p3": {"position": "TE"},
    "p4": {"position": "QB", "birth_date": "1995-06-01"},
}


# =============================================================================
# PLAYER HELPERS
# =============================================================================


def test_calculate_player_age():
    assert calculate_player_age("1998-10-16", AS_OF) == 25
    assert calculate_player_age("1998-10-15", AS_OF) == 26
    assert calculate_player_age(None, AS_OF) is None
    assert calculate_player_age("", AS_OF) is None
    assert calculate_player_age("not-a-date", AS_OF) is None


# =============================================================================
# CONVERSION
# =============================================================================


def test_league_settings_record():
    record = league_settings_record(
        {
            "settings": {"num_teams": 12, "taxi_slots": 3, "reserve_slots": 2},
            "roster_positions": ["QB", "RB", "BN"],
            "scoring_settings": {"rec": 1.0},
        }
    )
    assert record == {
        "roster_positions": ["QB", "RB", "BN"],
        "scoring_settings": {"rec": 1.0},
        "num_teams": 12,
        "roster_size": 3,
        "taxi_slots": 3,
        "reserve_slots": 2,
    }


def test_build_team_records():
    users = [
        {"user_id": "u1", "display_name": "alice", "metadata": {"team_name": "Dawgs"}},
        {"user_id": "u3", "username": "carol", "metadata": None},
    ]
    rosters = [
        {"roster_id": 3, "owner_id": "u3"},
        {"roster_id": 2, "owner_id": None},
        {"roster_id": 1, "owner_id": "u1"},
    ]

    teams = build_team_records(users, rosters)

    assert [t["team_id"] for t in teams] == ["1", "2", "3"]
    assert teams[0]["display_name"] == "alice"
    assert teams[0]["team_name"] == "Dawgs"
    assert teams[1]["display_name"] == "Roster 2"
    assert teams[2]["display_name"] == "carol"
    assert teams[2]["team_name"] is None


def test_roster_records():
    records = roster_records(
        {"players": ["p1", "p2", "p9", None], "starters": ["p1", "0"]}, PLAYERS
    )
    assert records == [
        {"player_id": "p1", "position": "RB", "is_starter": True},
        {"player_id": "p2", "position": "WR", "is_starter": False},
        {"player_id": "p9", "position": "UNKNOWN", "is_starter": False},
    ]


class TestTransactionRecords:
    """Tests for transaction_records function."""

    def setup_method(self):
        self.transactions = [
            {
                "type": "waiver",
                "status": "complete",
                "created": CREATED_MS,
                "adds": {"p1": 1},
                "drops": {"p2": 1},
            },
            {
                "type": "trade",
                "status": "complete",
                "created": CREATED_MS,
                "adds": {"p4": 2},
                "drops": {"p4": 1},
            },
            {
                "type": "waiver",
                "status": "failed",
                "created": CREATED_MS,
                "adds": {"p4": 1},
                "drops": None,
            },
            {
                "type": "free_agent",
                "status": "complete",
                "created": CREATED_MS + 1000,
                "adds": {"p3": 2},
                "drops": None,
            },
        ]

    def test_splits_adds_and_drops_by_team(self):
        by_team = transaction_records(self.transactions, PLAYERS, AS_OF)

        assert set(by_team) == {"1", "2"}
        assert [(r["player_id"], r["direction"]) for r in by_team["1"]] == [
            ("p1", "ADD"),
            ("p2", "DROP"),
        ]
        assert by_team["2"][0]["player_id"] == "p3"

    def test_enriches_position_and_age(self):
        by_team = transaction_records(self.transactions, PLAYERS, AS_OF)

        added, dropped = by_team["1"]
        assert added["position"] == "RB"
        assert added["age"] == 24
        assert dropped["age"] == 30  # falls back to Sleeper's age field
        assert by_team["2"][0]["age"] is None
        assert added["timestamp"] == pd.Timestamp("2024-10-14T10:00:00Z")

    def test_trades_and_failed_claims_ignored(self):
        by_team = transaction_records(self.transactions, PLAYERS, AS_OF)
        all_ids = [r["player_id"] for records in by_team.values() for r in records]
        assert "p4" not in all_ids

    def test_undated_transactions_skipped(self):
        self.transactions.append(
            {"type": "free_agent", "status": "complete", "adds": {"p2": 3}, "drops": None}
        )
        self.transactions.append(
            {"type": "waiver", "status": "complete", "created": None, "adds": {"p2": 3}}
        )

        by_team = transaction_records(self.transactions, PLAYERS, AS_OF)

        assert "3" not in by_team
        assert len(by_team["1"]) == 2


def test_draft_pick_records_apply_trades():
    rosters = [{"roster_id": 1}, {"roster_id": 2}]
    traded = [{"season": "2025", "round": 1, "roster_id": 2, "owner_id": 1, "previous_owner_id": 2}]

    picks = draft_pick_records(rosters, traded, 2025, num_rounds=2, num_seasons=1)

    assert [(p["round"], p["original_owner_id"], p["owner_id"]) for p in picks] == [
        (1, "1", "1"),
        (1, "2", "1"),
        (2, "1", "1"),
        (2, "2", "2"),
    ]
    assert all(p["season"] == 2025 and p["pick_number"] is None for p in picks)


def test_draft_pick_records_ignore_out_of_range_trades():
    picks = draft_pick_records(
        [{"roster_id": 1}],
        [{"season": "2031", "round": 1, "roster_id": 1, "owner_id": 5}],
        2025,
    )
    assert len(picks) == 12
    assert {p["owner_id"] for p in picks} == {"1"}


# =============================================================================
# FETCHING (mocked session)
# =============================================================================


def make_response(payload, status_error=None):
    response = MagicMock()
    response.json.return_value = payload
    if status_error:
        response.raise_for_status.side_effect = status_error
    return response


def make_session(routes: dict):
    """Session whose GETs are answered from `routes`, keyed by URL path suffix."""
    session = MagicMock()

    def get(url, timeout=None):
        for suffix, payload in routes.items():
            if url.endswith(suffix):
                return make_response(payload)
        return make_response([])

    session.get.side_effect = get
    return session


def test_create_session_sets_user_agent():
    session = create_session()
    assert session.headers["User-Agent"] == USER_AGENT


def test_http_errors_propagate():
    session = MagicMock()
    session.get.return_value = make_response(None, requests.HTTPError("404 Not Found"))

    with pytest.raises(requests.HTTPError):
        fetch_league(session, "missing")
    assert session.get.call_count == 1


def test_fetch_league_snapshot():
    session = make_session(
        {
            "league/L1": {
                "name": "Mock League",
                "season": "2024",
                "settings": {"num_teams": 2, "draft_rounds": 2},
                "roster_positions": ["QB", "RB", "WR", "TE", "FLEX", "BN"],
                "scoring_settings": {"rec": 1.0},
            },
            "league/L1/users": [
                {"user_id": "u1", "display_name": "alice", "metadata": {}},
                {"user_id": "u2", "display_name": "bob", "metadata": {"team_name": "Bobcats"}},
            ],
            "league/L1/rosters": [
                {"roster_id": 1, "owner_id": "u1", "players": ["p1", "p2"], "starters": ["p1"]},
                {"roster_id": 2, "owner_id": "u2", "players": ["p3", "p4"], "starters": ["p4"]},
            ],
            "league/L1/traded_picks": [
                {"season": "2025", "round": 1, "roster_id": 2, "owner_id": 1, "previous_owner_id": 2}
            ],
            "league/L1/transactions/1": [
                {
                    "type": "free_agent",
                    "status": "complete",
                    "created": CREATED_MS,
                    "adds": {"p1": 1},
                    "drops": None,
                }
            ],
            "players/nfl": PLAYERS,
        }
    )

    snapshot = fetch_league_snapshot("L1", session=session, as_of=AS_OF)

    assert snapshot["league_id"] == "L1"
    assert snapshot["name"] == "Mock League"
    assert snapshot["season"] == 2024
    assert snapshot["settings"]["num_teams"] == 2

    alice, bob = snapshot["teams"]
    assert alice["roster"][0] == {"player_id": "p1", "position": "RB", "is_starter": True}
    assert len(alice["transactions"]) == 1
    assert alice["last_activity_at"] == pd.Timestamp("2024-10-14T10:00:00Z")
    assert bob["team_name"] == "Bobcats"
    assert bob["transactions"] == []
    assert bob["last_activity_at"] is None

    # 2 rosters x 3 seasons x 2 rounds, starting the season after the current one
    assert len(snapshot["draft_picks"]) == 12
    assert min(p["season"] for p in snapshot["draft_picks"]) == 2025

    analyses = analyze_league(snapshot, AS_OF)
    assert analyses["1"].signals.adds == 1
    assert analyses["1"].draft_capital.pattern == "accumulating"


def test_snapshot_to_json_renders_timestamps():
    snapshot = {
        "league_id": "L1",
        "teams": [
            {
                "team_id": "1",
                "last_activity_at": pd.Timestamp("2024-10-14T10:00:00Z"),
                "transactions": [
                    {"player_id": "p1", "timestamp": pd.Timestamp("2024-10-14T10:00:00Z")}
                ],
            }
        ],
    }

    rendered = snapshot_to_json(snapshot)

    assert json.loads(json.dumps(rendered))["teams"][0]["last_activity_at"] == (
        "2024-10-14T10:00:00+00:00"
    )
    assert isinstance(snapshot["teams"][0]["last_activity_at"], pd.Timestamp)


def test_last_activity_ignores_transactions_after_as_of():
    late_ms = CREATED_MS + 3 * 86_400_000  # 2024-10-17, after AS_OF
    session = make_session(
        {
            "league/L1": {"name": "Mock League", "season": "2024", "settings": {}},
            "league/L1/users": [{"user_id": "u1", "display_name": "alice"}],
            "league/L1/rosters": [{"roster_id": 1, "owner_id": "u1", "players": ["p1"]}],
            "league/L1/transactions/1": [
                {
                    "type": "free_agent",
                    "status": "complete",
                    "created": CREATED_MS,
                    "adds": {"p1": 1},
                },
                {
                    "type": "free_agent",
                    "status": "complete",
                    "created": late_ms,
                    "adds": {"p2": 1},
                },
            ],
            "players/nfl": PLAYERS,
        }
    )

    snapshot = fetch_league_snapshot("L1", session=session, as_of=AS_OF)

    (alice,) = snapshot["teams"]
    assert len(alice["transactions"]) == 2
    assert alice["last_activity_at"] == pd.Timestamp("2024-10-14T10:00:00Z")


def test_future_only_transactions_leave_no_last_activity():
    session = make_session(
        {
            "league/L1": {"name": "Mock League", "season": "2024", "settings": {}},
            "league/L1/users": [{"user_id": "u1", "display_name": "alice"}],
            "league/L1/rosters": [{"roster_id": 1, "owner_id": "u1", "players": []}],
            "league/L1/transactions/1": [
                {
                    "type": "waiver",
                    "status": "complete",
                    "created": CREATED_MS + 5 * 86_400_000,
                    "adds": {"p1": 1},
                }
            ],
            "players/nfl": PLAYERS,
        }
    )

    snapshot = fetch_league_snapshot("L1", session=session, as_of=AS_OF)

    assert snapshot["teams"][0]["last_activity_at"] is None
