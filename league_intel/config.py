"""
Configuration loading and validation.

Loads all configuration from config.json and exposes constants as module-level variables.
League-specific thresholds are NOT configuration: they are derived per league in
league_format.py.
"""

import json
from pathlib import Path

_CONFIG_PATH = Path(__file__).parent.parent / "config.json"


def load_config(config_path: Path | str | None = None) -> dict:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to config.json file (defaults to project root)

    Returns:
        Dict containing all configuration values

    Raises:
        AssertionError: If config file is missing or invalid
    """
    if config_path is None:
        config_path = _CONFIG_PATH
    else:
        config_path = Path(config_path)

    assert config_path.exists(), f"Config file not found: {config_path}"

    with open(config_path) as f:
        config = json.load(f)

    # Validate required sections
    assert "analysis" in config, "Config must have 'analysis' section"
    assert "draft" in config, "Config must have 'draft' section"
    assert "sleeper" in config, "Config must have 'sleeper' section"
    assert "database" in config, "Config must have 'database' section"

    analysis = config["analysis"]
    assert analysis["strategy_window_days"] > 0, "strategy_window_days must be positive"
    assert analysis["positional_window_days"] > 0, (
        "positional_window_days must be positive"
    )
    assert 0 < analysis["trade_confidence_ceiling"] <= 1, (
        "trade_confidence_ceiling must be in (0, 1]"
    )

    return config


# Load config at module level
_CONFIG = load_config()

# Expose config sections
ANALYSIS_CONFIG = _CONFIG["analysis"]
DRAFT_CONFIG = _CONFIG["draft"]
SLEEPER_CONFIG = _CONFIG["sleeper"]
DATABASE_CONFIG = _CONFIG["database"]

# Analysis windows and limits
STRATEGY_WINDOW_DAYS = ANALYSIS_CONFIG["strategy_window_days"]
POSITIONAL_WINDOW_DAYS = ANALYSIS_CONFIG["positional_window_days"]
TRACKED_POSITIONS = tuple(ANALYSIS_CONFIG["tracked_positions"])
MAX_TRADE_IDEAS = ANALYSIS_CONFIG["max_trade_ideas"]
TRADE_CONFIDENCE_CEILING = ANALYSIS_CONFIG["trade_confidence_ceiling"]

# Draft capital
DEFAULT_NUM_TEAMS = DRAFT_CONFIG["default_num_teams"]
NEAR_TERM_YEARS = DRAFT_CONFIG["near_term_years"]
TRADING_HORIZON_YEARS = DRAFT_CONFIG["trading_horizon_years"]

# Sleeper API
SLEEPER_API_BASE = SLEEPER_CONFIG["api_base"]
SLEEPER_FIRST_WEEK = SLEEPER_CONFIG["first_week"]
SLEEPER_LAST_WEEK = SLEEPER_CONFIG["last_week"]
SLEEPER_TIMEOUT = SLEEPER_CONFIG["request_timeout_seconds"]
SLEEPER_TRANSACTION_TYPES = set(SLEEPER_CONFIG["transaction_types"])

# Database
DB_PATH = DATABASE_CONFIG["path"]

# Validation assertions
assert set(TRACKED_POSITIONS) == {"QB", "RB", "WR", "TE"}, (
    "tracked_positions must be QB, RB, WR, TE"
)
assert MAX_TRADE_IDEAS > 0, "max_trade_ideas must be positive"
assert SLEEPER_FIRST_WEEK <= SLEEPER_LAST_WEEK, "Sleeper week range is empty"
