"""
Sleeper API integration for league, roster, transaction and draft-pick data.

Public API documentation: https://docs.sleeper.com/

Fetch functions return raw Sleeper payloads. The convert functions turn those
payloads into the plain records the analysis engine consumes, and never touch
the network. No retries happen here: a failed request raises
requests.HTTPError and the caller decides whether to run the sync again.
"""

from datetime import date

import pandas as pd
import requests
from tqdm.auto import tqdm

from .config import (
    SLEEPER_API_BASE,
    SLEEPER_FIRST_WEEK,
    SLEEPER_LAST_WEEK,
    SLEEPER_TIMEOUT,
    SLEEPER_TRANSACTION_TYPES,
)
from .signals import to_utc_timestamp, utc_now

USER_AGENT = "League-Intel/1.0"
DEFAULT_DRAFT_ROUNDS = 4
FUTURE_PICK_SEASONS = 3


# =============================================================================
# SESSION
# =============================================================================


def create_session() -> requests.Session:
    """
    Create a Sleeper API session.

    Returns: requests.Session with the User-Agent header set.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def _get(session: requests.Session, path: str):
    response = session.get(f"{SLEEPER_API_BASE}/{path}", timeout=SLEEPER_TIMEOUT)
    response.raise_for_status()
    return response.json()


# =============================================================================
# DATA FETCHING
# =============================================================================


def fetch_league(session: requests.Session, league_id: str) -> dict:
    return _get(session, f"league/{league_id}")


def fetch_league_users(session: requests.Session, league_id: str) -> list[dict]:
    return _get(session, f"league/{league_id}/users") or []


def fetch_league_rosters(session: requests.Session, league_id: str) -> list[dict]:
    return _get(session, f"league/{league_id}/rosters") or []


def fetch_traded_picks(session: requests.Session, league_id: str) -> list[dict]:
    return _get(session, f"league/{league_id}/traded_picks") or []


def fetch_all_players(session: requests.Session) -> dict[str, dict]:
    """
    Fetch every NFL player keyed by player_id.

    This is a large payload (~5MB+); fetch once per sync.
    """
    print("Fetching Sleeper player database...")
    players = _get(session, "players/nfl") or {}
    print(f"  Fetched {len(players)} players")
    return players


def fetch_transactions(
    session: requests.Session,
    league_id: str,
    first_week: int = SLEEPER_FIRST_WEEK,
    last_week: int = SLEEPER_LAST_WEEK,
) -> list[dict]:
    """Fetch transactions for every week in [first_week, last_week]."""
    assert first_week <= last_week, f"Empty week range: {first_week}-{last_week}"

    transactions = []
    for week in tqdm(range(first_week, last_week + 1), desc="Fetching transactions"):
        transactions.extend(_get(session, f"league/{league_id}/transactions/{week}") or [])
    return transactions


# =============================================================================
# PLAYER HELPERS
# =============================================================================


def calculate_player_age(birth_date: str | None, as_of) -> int | None:
    """
    Age in whole years on `as_of` from a "YYYY-MM-DD" birth date.

    Returns None when the birth date is missing or unparseable.
    """
    if not birth_date:
        return None
    try:
        born = date.fromisoformat(birth_date)
    except ValueError:
        return None

    today = to_utc_timestamp(as_of).date()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def player_position(players: dict[str, dict], player_id: str) -> str:
    return (players.get(player_id) or {}).get("position") or "UNKNOWN"


def player_age(players: dict[str, dict], player_id: str, as_of) -> int | None:
    """Age from birth_date, falling back to Sleeper's own `age` field."""
    player = players.get(player_id) or {}
    age = calculate_player_age(player.get("birth_date"), as_of)
    if age is None and player.get("age") is not None:
        age = int(player["age"])
    return age


# =============================================================================
# CONVERSION TO ENGINE RECORDS
# =============================================================================


def league_settings_record(league: dict) -> dict:
    """League settings record consumed by resolve_league_format()."""
    settings = league.get("settings") or {}
    positions = league.get("roster_positions") or []

    return {
        "roster_positions": positions,
        "scoring_settings": league.get("scoring_settings") or {},
        "num_teams": settings.get("num_teams", 0),
        "roster_size": len(positions),
        "taxi_slots": settings.get("taxi_slots", 0),
        "reserve_slots": settings.get("reserve_slots", 0),
    }


def build_team_records(users: list[dict], rosters: list[dict]) -> list[dict]:
    """
    One team record per roster, named after its owner.

    Team ids are the Sleeper roster ids as strings.
    """
    users_by_id = {u["user_id"]: u for u in users}
    teams = []

    for roster in sorted(rosters, key=lambda r: r["roster_id"]):
        owner = users_by_id.get(roster.get("owner_id")) or {}
        metadata = owner.get("metadata") or {}
        teams.append(
            {
                "team_id": str(roster["roster_id"]),
                "owner_id": roster.get("owner_id"),
                "display_name": owner.get("display_name")
                or owner.get("username")
                or f"Roster {roster['roster_id']}",
                "team_name": metadata.get("team_name"),
                "roster": [],
                "transactions": [],
                "last_activity_at": None,
            }
        )

    return teams


def roster_records(roster: dict, players: dict[str, dict]) -> list[dict]:
    """Roster records ({player_id, position, is_starter}) for one Sleeper roster."""
    starters = set(roster.get("starters") or [])
    records = []

    for player_id in roster.get("players") or []:
        if not player_id:
            continue
        records.append(
            {
                "player_id": player_id,
                "position": player_position(players, player_id),
                "is_starter": player_id in starters,
            }
        )

    return records


def transaction_records(
    transactions: list[dict],
    players: dict[str, dict],
    as_of,
) -> dict[str, list[dict]]:
    """
    Split completed waiver/free-agent transactions into per-team add/drop records.

    Args:
        transactions: Raw Sleeper transactions
        players: Sleeper player database
        as_of: Reference time for player ages

    Returns:
        {team_id: [{player_id, position, age, direction, timestamp}, ...]},
        each list ordered by timestamp

    Transactions without a `created` time are skipped.
    """
    by_team = {}

    for txn in transactions:
        if txn.get("type") not in SLEEPER_TRANSACTION_TYPES:
            continue
        if txn.get("status", "complete") != "complete":
            continue

        timestamp = to_utc_timestamp(txn.get("created"))
        if timestamp is None:
            continue

        for direction, moves in (("ADD", txn.get("adds")), ("DROP", txn.get("drops"))):
            for player_id, roster_id in (moves or {}).items():
                by_team.setdefault(str(roster_id), []).append(
                    {
                        "player_id": player_id,
                        "position": player_position(players, player_id),
                        "age": player_age(players, player_id, as_of),
                        "direction": direction,
                        "timestamp": timestamp,
                    }
                )

    for records in by_team.values():
        records.sort(key=lambda r: (r["timestamp"], r["direction"], r["player_id"]))

    return by_team


def draft_pick_records(
    rosters: list[dict],
    traded_picks: list[dict],
    first_season: int,
    num_rounds: int = DEFAULT_DRAFT_ROUNDS,
    num_seasons: int = FUTURE_PICK_SEASONS,
) -> list[dict]:
    """
    Every pick in the next `num_seasons` drafts, with trades applied.

    Sleeper only reports traded picks, so the untraded baseline (each roster
    owns its own pick in every round) is built first and then overridden.

    Returns:
        [{season, round, pick_number, owner_id, original_owner_id}, ...]
    """
    picks = {}
    for roster in rosters:
        roster_id = str(roster["roster_id"])
        for season in range(first_season, first_season + num_seasons):
            for round_number in range(1, num_rounds + 1):
                picks[(season, round_number, roster_id)] = {
                    "season": season,
                    "round": round_number,
                    "pick_number": None,
                    "owner_id": roster_id,
                    "original_owner_id": roster_id,
                }

    for traded in traded_picks:
        key = (int(traded["season"]), int(traded["round"]), str(traded["roster_id"]))
        if key in picks:
            picks[key]["owner_id"] = str(traded["owner_id"])

    return [picks[key] for key in sorted(picks)]


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def fetch_league_snapshot(
    league_id: str,
    session: requests.Session | None = None,
    as_of=None,
) -> dict:
    """
    Fetch everything the analysis needs for one league.

    Returns:
        {
            "league_id": str,
            "name": str,
            "season": int,
            "settings": dict,      # league settings record
            "teams": list[dict],   # team records with roster + transactions
            "draft_picks": list[dict],
        }

    This is the main entry point for Sleeper data.
    """
    session = session or create_session()
    as_of = as_of or utc_now()

    league = fetch_league(session, league_id)
    users = fetch_league_users(session, league_id)
    rosters = fetch_league_rosters(session, league_id)
    traded = fetch_traded_picks(session, league_id)
    raw_transactions = fetch_transactions(session, league_id)
    players = fetch_all_players(session)

    teams = build_team_records(users, rosters)
    rosters_by_id = {str(r["roster_id"]): r for r in rosters}
    txns_by_team = transaction_records(raw_transactions, players, as_of)
    cutoff = to_utc_timestamp(as_of)

    for team in teams:
        team["roster"] = roster_records(rosters_by_id[team["team_id"]], players)
        team["transactions"] = txns_by_team.get(team["team_id"], [])
        past = [t["timestamp"] for t in team["transactions"] if t["timestamp"] <= cutoff]
        if past:
            team["last_activity_at"] = max(past)

    season = int(league.get("season") or to_utc_timestamp(as_of).year)
    draft_rounds = (league.get("settings") or {}).get("draft_rounds") or DEFAULT_DRAFT_ROUNDS
    picks = draft_pick_records(rosters, traded, season + 1, draft_rounds)

    n_txns = sum(len(t["transactions"]) for t in teams)
    print("\n=== Sleeper Data Summary ===")
    print(f"League: {league.get('name')} ({season})")
    print(f"Teams: {len(teams)}")
    print(f"Add/drop records: {n_txns}")
    print(f"Draft picks tracked: {len(picks)}")

    return {
        "league_id": league_id,
        "name": league.get("name", ""),
        "season": season,
        "settings": league_settings_record(league),
        "teams": teams,
        "draft_picks": picks,
    }


def snapshot_to_json(snapshot: dict) -> dict:
    """Copy of a snapshot with timestamps rendered as ISO strings."""

    def render(value):
        if isinstance(value, pd.Timestamp):
            return value.isoformat()
        return value

    teams = []
    for team in snapshot["teams"]:
        team = dict(team)
        team["last_activity_at"] = render(team.get("last_activity_at"))
        team["transactions"] = [
            {**t, "timestamp": render(t["timestamp"])} for t in team["transactions"]
        ]
        teams.append(team)

    return {**snapshot, "teams": teams}
