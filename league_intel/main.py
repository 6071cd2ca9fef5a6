"""CLI entry point for league analysis."""

import argparse
import json
from pathlib import Path

from .config import DB_PATH
from .database import initialize_database, save_league_analysis
from .pipeline import analyze_league, find_team, print_league_report, suggest_trades
from .signals import to_utc_timestamp, utc_now
from .sleeper_api import fetch_league_snapshot, snapshot_to_json
from .trade_ideas import print_trade_report


def load_snapshot(path: Path) -> dict:
    """
    Load a league snapshot JSON file.

    Raises:
        AssertionError: If the file is missing or lacks teams
    """
    path = Path(path)
    assert path.exists(), f"Snapshot file not found: {path}"

    with open(path) as f:
        snapshot = json.load(f)

    assert "teams" in snapshot, f"Snapshot has no 'teams' list: {path}"
    for team in snapshot["teams"]:
        assert "team_id" in team, f"Snapshot team without team_id: {team}"
        team["team_id"] = str(team["team_id"])

    for pick in snapshot.get("draft_picks") or []:
        for key in ("owner_id", "original_owner_id"):
            if pick.get(key) is not None:
                pick[key] = str(pick[key])

    return snapshot


def save_snapshot(snapshot: dict, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(snapshot_to_json(snapshot), f, indent=2)
    print(f"  Wrote snapshot to {path}")


def main(argv: list[str] | None = None):
    """
    Classify every team in a dynasty league and suggest trades.

    Usage:
        league-intel --league-id 1048xxxxxxxx
        league-intel --snapshot data/league.json --team 3
        league-intel --league-id 1048xxxxxxxx --save-snapshot data/league.json --no-db
    """
    parser = argparse.ArgumentParser(
        description="Dynasty league intelligence: team strategies, needs and trade ideas"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--league-id", help="Sleeper league id to fetch")
    source.add_argument(
        "--snapshot",
        type=Path,
        help="Read a league snapshot JSON file instead of calling Sleeper",
    )
    parser.add_argument(
        "--team",
        help="Team id to generate trade ideas for",
    )
    parser.add_argument(
        "--as-of",
        help="Reference time (ISO date/time, default: now, UTC)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=Path(DB_PATH),
        help=f"Path to SQLite database (default: {DB_PATH})",
    )
    parser.add_argument(
        "--no-db",
        action="store_true",
        help="Skip saving analyses to the database",
    )
    parser.add_argument(
        "--save-snapshot",
        type=Path,
        help="Write the fetched league snapshot to this JSON path",
    )
    args = parser.parse_args(argv)

    as_of = to_utc_timestamp(args.as_of) if args.as_of else utc_now()

    print("=== League Intel ===\n")

    # Step 1: Load league data
    if args.snapshot:
        print(f"Step 1: Loading snapshot {args.snapshot}...")
        league = load_snapshot(args.snapshot)
    else:
        print(f"Step 1: Fetching league {args.league_id} from Sleeper...")
        league = fetch_league_snapshot(args.league_id, as_of=as_of)
    print(f"  {len(league['teams'])} teams, as of {as_of.isoformat()}")

    if args.save_snapshot:
        save_snapshot(league, args.save_snapshot)

    # Fail before any work if the requested team is unknown
    if args.team:
        find_team(league, args.team)

    # Step 2: Analyze every team
    print("\nStep 2: Analyzing teams...")
    analyses = analyze_league(league, as_of)

    # Step 3: Persist
    print("\nStep 3: Saving analyses...")
    if args.no_db:
        print("  Skipping (--no-db)")
    else:
        initialize_database(str(args.db))
        save_league_analysis(
            str(league.get("league_id", args.league_id or "")),
            analyses,
            as_of,
            str(args.db),
        )

    # Step 4: Report
    print_league_report(league, analyses)

    if args.team:
        ideas = suggest_trades(args.team, league, analyses)
        print_trade_report(analyses[args.team].team_name, ideas)

    print("\n=== Done ===")


if __name__ == "__main__":
    main()
