"""
Complete analysis pipeline.

Sequences the per-team passes and the league-wide trade matcher:

    league settings ─> resolve_league_format
    per team:  aggregate_signals ─> build_positional_profile ─> classify_team_strategy
    per league: draft capital for every team (when pick records exist)
    on demand: generate_trade_ideas across every team's profile

Each team's pass is independent of every other team's, so they can run in any
order; the matcher only needs every team's profile to exist first.
"""

from dataclasses import dataclass, replace

from tqdm.auto import tqdm

from .config import POSITIONAL_WINDOW_DAYS, STRATEGY_WINDOW_DAYS
from .draft_capital import (
    DraftCapitalSummary,
    describe_draft_capital,
    league_average_draft_capital,
    split_picks_by_team,
    summarize_draft_capital,
)
from .league_format import LeagueFormat, describe_league_format, resolve_league_format
from .positions import PositionalProfile, build_positional_profile, count_roster_by_position
from .signals import (
    WindowedSignals,
    aggregate_signals,
    count_adds_by_position,
    to_utc_timestamp,
)
from .strategy import StrategyProfile, classify_team_strategy
from .trade_ideas import TeamSnapshot, TradeIdea, generate_trade_ideas


@dataclass(frozen=True)
class TeamAnalysis:
    team_id: str
    team_name: str
    signals: WindowedSignals
    positional: PositionalProfile
    strategy: StrategyProfile
    draft_capital: DraftCapitalSummary | None = None


def team_display_name(team: dict) -> str:
    return team.get("team_name") or team.get("display_name") or str(team["team_id"])


def find_team(league: dict, team_id: str) -> dict:
    """
    Look up a team record in a league snapshot.

    Raises:
        KeyError: If the team is not in the league
    """
    for team in league.get("teams", []):
        if team["team_id"] == team_id:
            return team
    raise KeyError(f"Team not found: {team_id}")


# === PER-TEAM PASS ===


def analyze_team(
    team: dict,
    league_format: LeagueFormat,
    as_of,
) -> TeamAnalysis:
    """
    Run aggregation -> positional -> strategy for one team.

    Args:
        team: {team_id, display_name, team_name, roster, transactions, last_activity_at}
        league_format: Resolved league format
        as_of: Reference time for every window

    Returns:
        TeamAnalysis (draft capital is filled in at league level)
    """
    transactions = team.get("transactions") or []
    roster = team.get("roster") or []

    signals = aggregate_signals(
        team["team_id"],
        transactions,
        as_of,
        window_days=STRATEGY_WINDOW_DAYS,
        last_activity_at=team.get("last_activity_at"),
    )

    positional = build_positional_profile(
        count_roster_by_position(roster),
        count_adds_by_position(transactions, as_of, window_days=POSITIONAL_WINDOW_DAYS),
        league_format,
    )

    strategy = classify_team_strategy(signals)

    return TeamAnalysis(
        team_id=team["team_id"],
        team_name=team_display_name(team),
        signals=signals,
        positional=positional,
        strategy=strategy,
    )


# === LEAGUE PASS ===


def analyze_league(league: dict, as_of) -> dict[str, TeamAnalysis]:
    """
    Analyze every team in a league snapshot.

    Args:
        league: {league_id, name, season, settings, teams, draft_picks}
        as_of: Reference time (pass the same value to get identical results)

    Returns:
        Dict mapping team_id to TeamAnalysis, in league order
    """
    league_format = resolve_league_format(league.get("settings"))
    teams = league.get("teams", [])

    analyses = {}
    for team in tqdm(teams, desc="Analyzing teams"):
        analyses[team["team_id"]] = analyze_team(team, league_format, as_of)

    picks = league.get("draft_picks") or []
    if picks:
        current_year = to_utc_timestamp(as_of).year
        num_teams = league_format.num_teams or len(teams)
        average = league_average_draft_capital(
            [split_picks_by_team(t["team_id"], picks)[1] for t in teams],
            current_year,
            num_teams,
        )
        for team_id, analysis in analyses.items():
            capital = summarize_draft_capital(
                team_id, picks, current_year, average, num_teams
            )
            analyses[team_id] = replace(analysis, draft_capital=capital)

    return analyses


def build_team_snapshots(
    league: dict,
    analyses: dict[str, TeamAnalysis],
) -> list[TeamSnapshot]:
    """Read-only matcher inputs; teams without an analysis get no profile."""
    snapshots = []
    for team in league.get("teams", []):
        analysis = analyses.get(team["team_id"])
        snapshots.append(
            TeamSnapshot(
                team_id=team["team_id"],
                display_name=team.get("display_name") or str(team["team_id"]),
                team_name=team.get("team_name"),
                strategy_label=analysis.strategy.label if analysis else None,
                needs=dict(analysis.positional.needs) if analysis else None,
            )
        )
    return snapshots


def suggest_trades(
    team_id: str,
    league: dict,
    analyses: dict[str, TeamAnalysis],
) -> list[TradeIdea]:
    """
    Trade ideas for one team across the whole league.

    Raises:
        KeyError: If team_id is not in the league
    """
    find_team(league, team_id)
    league_format = resolve_league_format(league.get("settings"))
    snapshots = build_team_snapshots(league, analyses)
    return generate_trade_ideas(team_id, snapshots, league_format)


# === OUTPUT ===


def print_league_report(league: dict, analyses: dict[str, TeamAnalysis]) -> None:
    """Print the strategy, needs and draft capital of every team."""
    league_format = resolve_league_format(league.get("settings"))

    print("\n" + "=" * 70)
    print(f"LEAGUE INTEL: {league.get('name', league.get('league_id', ''))}")
    print(f"Format: {describe_league_format(league_format)}")
    print("=" * 70)

    print(f"\n{'Team':<24} {'Strategy':<10} {'Conf':>5}  {'Moves':>5}  Needs")
    print("-" * 70)

    for analysis in analyses.values():
        needs = " ".join(
            f"{pos}:{state[:4]}" for pos, state in analysis.positional.needs.items()
        )
        print(
            f"{analysis.team_name[:24]:<24} {analysis.strategy.label:<10} "
            f"{analysis.strategy.confidence:>5.2f}  "
            f"{analysis.signals.total_moves:>5}  {needs}"
        )

    print("\nWHY:")
    for analysis in analyses.values():
        print(f"  {analysis.team_name}: {analysis.strategy.reason}")

    with_capital = [a for a in analyses.values() if a.draft_capital is not None]
    if with_capital:
        print("\nDRAFT CAPITAL:")
        for analysis in with_capital:
            capital = analysis.draft_capital
            print(
                f"  {analysis.team_name}: {capital.total_value:.1f} pts "
                f"({capital.pattern}, {capital.strength}) – {describe_draft_capital(capital)}"
            )
