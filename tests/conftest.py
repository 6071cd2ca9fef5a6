"""Shared league fixtures."""

import pandas as pd
import pytest

AS_OF = pd.Timestamp("2024-10-15T12:00:00Z")

PPR_SETTINGS = {
    "roster_positions": ["QB", "RB", "RB", "WR", "WR", "WR", "TE", "FLEX", "FLEX"]
    + ["BN"] * 10,
    "scoring_settings": {"rec": 1.0},
    "num_teams": 4,
    "roster_size": 19,
    "taxi_slots": 0,
    "reserve_slots": 0,
}


def days_ago(n: float) -> str:
    return (AS_OF - pd.Timedelta(days=n)).isoformat()


def move(player_id, direction, position, age, days):
    return {
        "player_id": player_id,
        "position": position,
        "age": age,
        "direction": direction,
        "timestamp": days_ago(days),
    }


def roster(**counts):
    """roster(QB=(1, 1)) -> one starting and one bench QB."""
    players = []
    for position, (starters, bench) in counts.items():
        for i in range(starters + bench):
            players.append(
                {
                    "player_id": f"{position.lower()}{len(players)}",
                    "position": position,
                    "is_starter": i < starters,
                }
            )
    return players


def build_league() -> dict:
    """
    Four-team PPR league:
    - "1" is rebuilding, deep at WR, thin at RB
    - "2" is contending, deep at RB, thin at WR, sold its first-rounders to "1"
    - "3" has never made a move
    - "4" went quiet 40 days ago
    """
    picks = []
    for team_id in ("1", "2", "3", "4"):
        for season in (2025, 2026):
            for round_number in (1, 2):
                owner = "1" if team_id == "2" and round_number == 1 else team_id
                picks.append(
                    {
                        "season": season,
                        "round": round_number,
                        "pick_number": None,
                        "owner_id": owner,
                        "original_owner_id": team_id,
                    }
                )

    return {
        "league_id": "L1",
        "name": "Test Dynasty",
        "season": 2024,
        "settings": dict(PPR_SETTINGS),
        "teams": [
            {
                "team_id": "1",
                "display_name": "alice",
                "team_name": "Youth Movement",
                "roster": roster(QB=(1, 1), RB=(2, 1), WR=(3, 6), TE=(1, 0)),
                "transactions": [
                    move("p101", "ADD", "RB", 22, 3),
                    move("p102", "ADD", "WR", 22, 4),
                    move("p103", "DROP", "RB", 29, 3),
                    move("p104", "DROP", "WR", 30, 4),
                ],
                "last_activity_at": None,
            },
            {
                "team_id": "2",
                "display_name": "bob",
                "team_name": None,
                "roster": roster(QB=(1, 1), RB=(2, 8), WR=(3, 1), TE=(1, 1)),
                "transactions": [
                    move("p201", "ADD", "RB", 29, 2),
                    move("p202", "ADD", "QB", 31, 2),
                    move("p203", "ADD", "TE", 28, 5),
                    move("p204", "DROP", "WR", 22, 2),
                    move("p205", "DROP", "WR", 23, 5),
                ],
                "last_activity_at": None,
            },
            {
                "team_id": "3",
                "display_name": "carol",
                "team_name": None,
                "roster": [],
                "transactions": [],
                "last_activity_at": None,
            },
            {
                "team_id": "4",
                "display_name": "dave",
                "team_name": None,
                "roster": [],
                "transactions": [move("p401", "ADD", "RB", 25, 40)],
                "last_activity_at": None,
            },
        ],
        "draft_picks": picks,
    }


@pytest.fixture
def league() -> dict:
    return build_league()


@pytest.fixture
def as_of() -> pd.Timestamp:
    return AS_OF
