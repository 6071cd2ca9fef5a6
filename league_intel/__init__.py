# Dynasty League Intel
#
# This package classifies every team in a dynasty fantasy football league and
# suggests trades between teams with complementary needs:
# - league_format: League rules -> per-position thresholds
# - signals: Windowed add/drop activity per team
# - strategy: REBUILD / CONTEND / TINKER / INACTIVE classification
# - positions: DESPERATE / THIN / STABLE / HOARDING per position
# - draft_capital: Pick valuation and pick-trading patterns
# - trade_ideas: Complementary-need trade matching
# - pipeline: Per-team and league-wide analysis passes
# - sleeper_api, database, main: Sleeper fetcher, SQLite store, CLI

from .draft_capital import (
    DraftCapitalSummary,
    analyze_pick_trading,
    calculate_draft_capital,
    calculate_pick_value,
    compare_to_league_average,
    summarize_draft_capital,
)
from .league_format import (
    LeagueFormat,
    PositionRequirement,
    PositionThresholds,
    build_league_thresholds,
    compute_position_requirement,
    get_position_thresholds,
    position_value_multiplier,
    resolve_league_format,
)
from .pipeline import TeamAnalysis, analyze_league, analyze_team, suggest_trades
from .positions import (
    PositionalProfile,
    build_positional_profile,
    classify_position_state,
    count_roster_by_position,
)
from .signals import WindowedSignals, aggregate_signals, count_adds_by_position
from .strategy import StrategyProfile, classify_team_strategy
from .trade_ideas import TeamSnapshot, TradeIdea, generate_trade_ideas
