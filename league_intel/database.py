"""
SQLite database schema, sync functions, and queries.

Stores the latest analysis per (league, team). Each sync overwrites the
previous row for a team, so re-running an analysis is idempotent. Dict-valued
fields (per-position counts, needs, by-season capital) are stored as JSON text.
"""

import json
import sqlite3
from pathlib import Path

import pandas as pd
from tqdm.auto import tqdm

from .config import DB_PATH
from .pipeline import TeamAnalysis
from .signals import to_utc_timestamp

# =============================================================================
# SCHEMA
# =============================================================================

TEAM_SIGNALS_SCHEMA = """
CREATE TABLE IF NOT EXISTS team_signals (
    league_id TEXT NOT NULL,
    team_id TEXT NOT NULL,
    team_name TEXT NOT NULL,

    adds INTEGER NOT NULL,              -- ADD transactions in the strategy window
    drops INTEGER NOT NULL,
    adds_by_position TEXT NOT NULL,     -- JSON {position: count}
    drops_by_position TEXT NOT NULL,    -- JSON {position: count}
    avg_age_added REAL,                 -- NULL when no added player has a known age
    avg_age_dropped REAL,
    days_since_last_activity INTEGER,   -- NULL when the team has never moved
    activity_trend TEXT NOT NULL,       -- RISING, STABLE, FALLING, INACTIVE

    as_of TIMESTAMP NOT NULL,
    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (league_id, team_id)
)
"""

TEAM_STRATEGY_SCHEMA = """
CREATE TABLE IF NOT EXISTS team_strategy (
    league_id TEXT NOT NULL,
    team_id TEXT NOT NULL,
    team_name TEXT NOT NULL,

    label TEXT NOT NULL,                -- REBUILD, CONTEND, TINKER, INACTIVE
    confidence REAL NOT NULL,           -- [0, 1]
    reason TEXT NOT NULL,
    rule TEXT,                          -- Name of the rule that fired

    as_of TIMESTAMP NOT NULL,
    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (league_id, team_id)
)
"""

POSITIONAL_PROFILES_SCHEMA = """
CREATE TABLE IF NOT EXISTS positional_profiles (
    league_id TEXT NOT NULL,
    team_id TEXT NOT NULL,
    team_name TEXT NOT NULL,

    needs TEXT NOT NULL,                -- JSON {position: state}
    roster_counts TEXT NOT NULL,        -- JSON {position: {starters, bench}}

    as_of TIMESTAMP NOT NULL,
    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (league_id, team_id)
)
"""

DRAFT_CAPITAL_SCHEMA = """
CREATE TABLE IF NOT EXISTS draft_capital (
    league_id TEXT NOT NULL,
    team_id TEXT NOT NULL,
    team_name TEXT NOT NULL,

    total_value REAL NOT NULL,
    near_term_value REAL NOT NULL,
    by_season TEXT NOT NULL,            -- JSON {season: {count, value}}
    pattern TEXT NOT NULL,              -- 'accumulating', 'balanced', 'selling'
    strength TEXT NOT NULL,             -- 'strong', 'moderate', 'weak'
    comparison TEXT,                    -- vs league average, NULL if unknown
    near_term_delta INTEGER NOT NULL,
    early_delta INTEGER NOT NULL,
    total_delta INTEGER NOT NULL,

    as_of TIMESTAMP NOT NULL,
    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (league_id, team_id)
)
"""

STRATEGY_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_team_strategy_label ON team_strategy(league_id, label);
"""


# =============================================================================
# INITIALIZATION
# =============================================================================


def initialize_database(db_path: str = DB_PATH) -> None:
    """
    Create database and tables if they don't exist.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.executescript(TEAM_SIGNALS_SCHEMA)
    cursor.executescript(TEAM_STRATEGY_SCHEMA)
    cursor.executescript(POSITIONAL_PROFILES_SCHEMA)
    cursor.executescript(DRAFT_CAPITAL_SCHEMA)
    cursor.executescript(STRATEGY_INDEXES)

    conn.commit()
    conn.close()

    print(f"Initialized database at {db_path}")


# =============================================================================
# SYNC FUNCTIONS
# =============================================================================


def _upsert_signals(cursor, league_id: str, analysis: TeamAnalysis, as_of: str) -> None:
    s = analysis.signals
    cursor.execute(
        """
        INSERT INTO team_signals
        (league_id, team_id, team_name, adds, drops,
         adds_by_position, drops_by_position, avg_age_added, avg_age_dropped,
         days_since_last_activity, activity_trend, as_of, last_updated)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(league_id, team_id) DO UPDATE SET
            team_name = excluded.team_name,
            adds = excluded.adds,
            drops = excluded.drops,
            adds_by_position = excluded.adds_by_position,
            drops_by_position = excluded.drops_by_position,
            avg_age_added = excluded.avg_age_added,
            avg_age_dropped = excluded.avg_age_dropped,
            days_since_last_activity = excluded.days_since_last_activity,
            activity_trend = excluded.activity_trend,
            as_of = excluded.as_of,
            last_updated = CURRENT_TIMESTAMP
    """,
        (
            league_id,
            analysis.team_id,
            analysis.team_name,
            s.adds,
            s.drops,
            json.dumps(s.adds_by_position),
            json.dumps(s.drops_by_position),
            s.avg_age_added,
            s.avg_age_dropped,
            s.days_since_last_activity,
            s.activity_trend,
            as_of,
        ),
    )


def _upsert_strategy(cursor, league_id: str, analysis: TeamAnalysis, as_of: str) -> None:
    strategy = analysis.strategy
    cursor.execute(
        """
        INSERT INTO team_strategy
        (league_id, team_id, team_name, label, confidence, reason, rule,
         as_of, last_updated)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(league_id, team_id) DO UPDATE SET
            team_name = excluded.team_name,
            label = excluded.label,
            confidence = excluded.confidence,
            reason = excluded.reason,
            rule = excluded.rule,
            as_of = excluded.as_of,
            last_updated = CURRENT_TIMESTAMP
    """,
        (
            league_id,
            analysis.team_id,
            analysis.team_name,
            strategy.label,
            strategy.confidence,
            strategy.reason,
            strategy.rule,
            as_of,
        ),
    )


def _upsert_positional(cursor, league_id: str, analysis: TeamAnalysis, as_of: str) -> None:
    cursor.execute(
        """
        INSERT INTO positional_profiles
        (league_id, team_id, team_name, needs, roster_counts, as_of, last_updated)
        VALUES (?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(league_id, team_id) DO UPDATE SET
            team_name = excluded.team_name,
            needs = excluded.needs,
            roster_counts = excluded.roster_counts,
            as_of = excluded.as_of,
            last_updated = CURRENT_TIMESTAMP
    """,
        (
            league_id,
            analysis.team_id,
            analysis.team_name,
            json.dumps(analysis.positional.needs),
            json.dumps(analysis.positional.roster_counts),
            as_of,
        ),
    )


def _upsert_draft_capital(
    cursor, league_id: str, analysis: TeamAnalysis, as_of: str
) -> None:
    capital = analysis.draft_capital
    cursor.execute(
        """
        INSERT INTO draft_capital
        (league_id, team_id, team_name, total_value, near_term_value, by_season,
         pattern, strength, comparison, near_term_delta, early_delta, total_delta,
         as_of, last_updated)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(league_id, team_id) DO UPDATE SET
            team_name = excluded.team_name,
            total_value = excluded.total_value,
            near_term_value = excluded.near_term_value,
            by_season = excluded.by_season,
            pattern = excluded.pattern,
            strength = excluded.strength,
            comparison = excluded.comparison,
            near_term_delta = excluded.near_term_delta,
            early_delta = excluded.early_delta,
            total_delta = excluded.total_delta,
            as_of = excluded.as_of,
            last_updated = CURRENT_TIMESTAMP
    """,
        (
            league_id,
            analysis.team_id,
            analysis.team_name,
            capital.total_value,
            capital.near_term_value,
            json.dumps({str(season): v for season, v in capital.by_season.items()}),
            capital.pattern,
            capital.strength,
            capital.comparison,
            capital.near_term_delta,
            capital.early_delta,
            capital.total_delta,
            as_of,
        ),
    )


def save_league_analysis(
    league_id: str,
    analyses: dict[str, TeamAnalysis],
    as_of,
    db_path: str = DB_PATH,
) -> int:
    """
    Persist every team's analysis, replacing any earlier row for that team.

    Args:
        league_id: League the analyses belong to
        analyses: From pipeline.analyze_league()
        as_of: Reference time the analyses were computed for
        db_path: Path to SQLite database

    Returns:
        Number of teams synced
    """
    as_of_text = to_utc_timestamp(as_of).isoformat()

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    synced = 0
    for analysis in tqdm(analyses.values(), desc="Saving team analyses"):
        _upsert_signals(cursor, league_id, analysis, as_of_text)
        _upsert_strategy(cursor, league_id, analysis, as_of_text)
        _upsert_positional(cursor, league_id, analysis, as_of_text)
        if analysis.draft_capital is not None:
            _upsert_draft_capital(cursor, league_id, analysis, as_of_text)
        synced += 1

    conn.commit()
    conn.close()

    print(f"Saved analyses for {synced} teams to database")
    return synced


# =============================================================================
# QUERY FUNCTIONS
# =============================================================================


def _read_league_table(
    table: str,
    league_id: str,
    db_path: str,
    json_columns: tuple[str, ...] = (),
) -> pd.DataFrame:
    conn = sqlite3.connect(db_path)
    df = pd.read_sql(
        f"SELECT * FROM {table} WHERE league_id = ? ORDER BY team_id",
        conn,
        params=(league_id,),
    )
    conn.close()

    for column in json_columns:
        df[column] = df[column].map(json.loads)

    return df


def get_team_signals(league_id: str, db_path: str = DB_PATH) -> pd.DataFrame:
    """Stored windowed signals; per-position columns decoded to dicts."""
    return _read_league_table(
        "team_signals",
        league_id,
        db_path,
        json_columns=("adds_by_position", "drops_by_position"),
    )


def get_team_strategies(
    league_id: str,
    db_path: str = DB_PATH,
    label: str | None = None,
) -> pd.DataFrame:
    """
    Stored strategy profiles.

    Args:
        label: Filter to one strategy label (e.g. "REBUILD")

    Returns:
        DataFrame sorted by confidence descending
    """
    conn = sqlite3.connect(db_path)

    query = "SELECT * FROM team_strategy WHERE league_id = ?"
    params = [league_id]

    if label:
        query += " AND label = ?"
        params.append(label)

    query += " ORDER BY confidence DESC, team_id"

    df = pd.read_sql(query, conn, params=params)
    conn.close()

    return df


def get_positional_profiles(league_id: str, db_path: str = DB_PATH) -> pd.DataFrame:
    """Stored positional profiles; needs and roster_counts decoded to dicts."""
    return _read_league_table(
        "positional_profiles",
        league_id,
        db_path,
        json_columns=("needs", "roster_counts"),
    )


def get_draft_capital(league_id: str, db_path: str = DB_PATH) -> pd.DataFrame:
    """Stored draft capital summaries, richest first."""
    df = _read_league_table(
        "draft_capital", league_id, db_path, json_columns=("by_season",)
    )
    return df.sort_values("total_value", ascending=False, kind="stable").reset_index(
        drop=True
    )


def get_teams_by_need(
    league_id: str,
    position: str,
    db_path: str = DB_PATH,
) -> dict[str, list[str]]:
    """
    Team ids grouped by their state at one position.

    Returns:
        {"DESPERATE": [...], "THIN": [...], "STABLE": [...], "HOARDING": [...]}
        Only states held by at least one team appear.
    """
    profiles = get_positional_profiles(league_id, db_path)

    grouped = {}
    for _, row in profiles.iterrows():
        state = row["needs"].get(position)
        if state is not None:
            grouped.setdefault(state, []).append(row["team_id"])

    return grouped
