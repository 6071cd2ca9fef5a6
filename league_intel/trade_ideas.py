"""
Trade idea generation from complementary positional needs.

This module answers the question: "Which teams in my league need what I have
too much of, and have what I need?"

Generates suggestions from:
- Positional profiles (HOARDING = surplus, DESPERATE/THIN = need)
- Team strategies (rebuild vs contend framing in the rationale)
- League format (superflex, TE premium, PPR commentary in the rationale, and a
  small confidence nudge when one side of the swap is worth more in this league)

Only complementary need is matched. Player value and trade fairness are not
modeled.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .config import MAX_TRADE_IDEAS, TRACKED_POSITIONS, TRADE_CONFIDENCE_CEILING
from .league_format import LeagueFormat, position_value_multiplier
from .positions import NEED_STATES

# === TRADE MATCHER CONFIGURATION ===

MUTUAL_BASE_CONFIDENCE = 0.85  # both sides give from surplus
ONE_SIDED_BASE_CONFIDENCE = 0.7  # partner is desperate, no reciprocal surplus
DESPERATE_BOOST = 0.1

# Position-value adjustment (league format only)
VALUE_GAP_RATIO = 1.2  # one side must be worth 20% more to count
GIVING_MORE_FACTOR = 0.95
GETTING_MORE_FACTOR = 1.05


@dataclass(frozen=True)
class TeamSnapshot:
    """Read-only view of a team for matching. `needs` is None without a profile."""

    team_id: str
    display_name: str
    team_name: str | None = None
    strategy_label: str | None = None
    needs: dict[str, str] | None = None

    @property
    def name(self) -> str:
        return self.team_name or self.display_name


@dataclass(frozen=True)
class TradeIdea:
    target_team_id: str
    target_team_name: str
    give_position: str
    get_position: str
    rationale: str
    confidence: float


# === RATIONALE CONTEXT ===


def strategy_trade_context(my_strategy: str | None, their_strategy: str | None) -> str | None:
    """Strategy-compatibility sentence for a rationale, if any applies."""
    if not my_strategy or not their_strategy:
        return None

    if my_strategy == "CONTEND" and their_strategy == "REBUILD":
        return "They're rebuilding, so consider offering future picks or young players."
    if my_strategy == "REBUILD" and their_strategy == "CONTEND":
        return "They're contending, so ask for picks or young assets in return."
    if my_strategy == "CONTEND" and their_strategy == "CONTEND":
        return "Both teams competing – focus on win-now pieces."
    if my_strategy == "REBUILD" and their_strategy == "REBUILD":
        return "Both rebuilding – could swap young players or picks."
    if their_strategy == "INACTIVE":
        return "Warning: Team appears inactive, may not respond to offers."

    return None


def league_trade_context(give: str, get: str, fmt: LeagueFormat) -> str | None:
    """League-format sentence for a rationale, if any applies."""
    if fmt.is_superflex and "QB" in (give, get):
        if give == "QB":
            return "QB value is premium in superflex – ensure fair return."
        return "QB highly valuable in superflex format."

    if fmt.is_te_premium and "TE" in (give, get):
        if give == "TE":
            return "TE premium scoring – TEs worth more in this league."
        return "TE premium league – target top-tier TEs."

    if fmt.is_ppr and give == "WR" and get == "RB":
        return "WRs generally more valuable in PPR."
    if fmt.is_ppr and give == "RB" and get == "WR":
        return "PPR format favors WRs – may need additional value."

    return None


def value_adjustment(give: str, get: str, fmt: LeagueFormat) -> float:
    """Confidence factor for swapping `give` for `get` in this league."""
    give_value = position_value_multiplier(give, fmt)
    get_value = position_value_multiplier(get, fmt) if get in TRACKED_POSITIONS else 1.0

    if give_value > get_value * VALUE_GAP_RATIO:
        return GIVING_MORE_FACTOR
    if get_value > give_value * VALUE_GAP_RATIO:
        return GETTING_MORE_FACTOR
    return 1.0


def build_trade_idea(
    me: TeamSnapshot,
    partner: TeamSnapshot,
    give: str,
    get: str,
    mutual: bool,
    league_format: LeagueFormat | None = None,
) -> TradeIdea:
    """
    Build one trade idea with rationale and confidence.

    Args:
        me: Requesting team
        partner: Counterpart team
        give: Position I would send (my surplus, their need)
        get: Position I would receive (my need)
        mutual: True if the partner is HOARDING at `get`
        league_format: Adds format commentary to the rationale and adjusts
            confidence by relative position value when given
    """
    their_state = partner.needs[give]
    my_state = me.needs[get]

    rationale = f"{partner.name} is {their_state.lower()} at {give}"
    if mutual:
        rationale += (
            f" and has surplus {get}s. You're {my_state.lower()} at {get}"
            f" and have surplus {give}s."
        )
    else:
        rationale += f". You have surplus {give}s and need {get}s."

    if league_format is not None:
        context = league_trade_context(give, get, league_format)
        if context:
            rationale += f" {context}"

    context = strategy_trade_context(me.strategy_label, partner.strategy_label)
    if context:
        rationale += f" {context}"

    confidence = MUTUAL_BASE_CONFIDENCE if mutual else ONE_SIDED_BASE_CONFIDENCE
    if their_state == "DESPERATE":
        confidence += DESPERATE_BOOST
    if league_format is not None and give in TRACKED_POSITIONS:
        confidence *= value_adjustment(give, get, league_format)
    confidence = min(confidence, TRADE_CONFIDENCE_CEILING)

    return TradeIdea(
        target_team_id=partner.team_id,
        target_team_name=partner.name,
        give_position=give,
        get_position=get,
        rationale=rationale,
        confidence=confidence,
    )


# === MATCHING ===


def generate_trade_ideas(
    team_id: str,
    teams: Iterable[TeamSnapshot],
    league_format: LeagueFormat | None = None,
    max_ideas: int = MAX_TRADE_IDEAS,
) -> list[TradeIdea]:
    """
    Generate ranked trade ideas for one team.

    Logic:
        1. My surplus = HOARDING positions; my needs = DESPERATE or THIN
        2. For each other team with a profile, for each of my surplus
           positions they need:
           a. one mutual idea per position they HOARD that I need
           b. if they are DESPERATE there, one one-sided idea per position I
              need, whether or not they have surplus at it
        3. Stable sort by confidence (highest first), keep the top `max_ideas`

    Step 2b deliberately overgenerates: it can suggest asking a desperate team
    for a position where it has nothing spare.

    Args:
        team_id: Requesting team
        teams: Every team in the league (requester included)
        league_format: Optional league format for rationale commentary and
            the position-value confidence adjustment
        max_ideas: Maximum ideas returned

    Returns:
        Trade ideas, non-increasing in confidence. Empty if the requester has
        no positional profile.

    Raises:
        KeyError: If team_id is not among `teams`
    """
    teams = list(teams)
    by_id = {team.team_id: team for team in teams}
    if team_id not in by_id:
        raise KeyError(f"Team not found: {team_id}")

    me = by_id[team_id]
    if me.needs is None:
        return []

    my_surplus = [pos for pos, state in me.needs.items() if state == "HOARDING"]
    my_needs = [pos for pos, state in me.needs.items() if state in NEED_STATES]

    ideas = []

    for partner in teams:
        if partner.team_id == team_id or partner.needs is None:
            continue

        for give in my_surplus:
            their_need = partner.needs.get(give)
            if their_need not in NEED_STATES:
                continue

            for their_pos, their_state in partner.needs.items():
                if their_state == "HOARDING" and their_pos in my_needs:
                    ideas.append(
                        build_trade_idea(
                            me, partner, give, their_pos, True, league_format
                        )
                    )

            if their_need == "DESPERATE":
                for get in my_needs:
                    if get != give:
                        ideas.append(
                            build_trade_idea(me, partner, give, get, False, league_format)
                        )

    # sorted() is stable: ties keep discovery order
    ideas = sorted(ideas, key=lambda idea: idea.confidence, reverse=True)
    ideas = ideas[:max_ideas]

    for idea in ideas:
        assert 0.0 <= idea.confidence <= TRADE_CONFIDENCE_CEILING, (
            f"Trade confidence out of range: {idea.confidence}"
        )

    return ideas


# === OUTPUT ===


def print_trade_report(team_name: str, ideas: list[TradeIdea]) -> None:
    """Print ranked trade ideas for one team."""
    print("\n" + "=" * 70)
    print(f"TRADE IDEAS FOR {team_name.upper()}")
    print("=" * 70)

    if not ideas:
        print("\nNo complementary trade partners found.")
        print("Consider:")
        print("  - Re-running after the next roster sync")
        print("  - Checking that every team has a positional profile")
        return

    for i, idea in enumerate(ideas, 1):
        print(f"\n#{i} with {idea.target_team_name} (confidence {idea.confidence:.0%})")
        print(f"    Give: {idea.give_position}")
        print(f"    Get:  {idea.get_position}")
        print(f"    Why:  {idea.rationale}")
