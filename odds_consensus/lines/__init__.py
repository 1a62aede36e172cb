"""Lines - consolidates sportsbook odds, player props and scores.

This package provides:
- Pydantic models for raw feed data (GameOdds, BookmakerOdds, Market, Outcome, ScoreEntry)
- Odds format conversion (decimal_to_american, decimal_to_implied_probability, ...)
- Normalizers for game markets, player props and scores
- Best-price and consensus-line resolution shared by all normalizers
"""

from odds_consensus.lines.converter import (
    american_to_decimal,
    decimal_to_american,
    decimal_to_implied_probability,
)
from odds_consensus.lines.markets import normalize_game_odds
from odds_consensus.lines.models import (
    BookmakerOdds,
    GameOdds,
    Market,
    Outcome,
    ScoreEntry,
    TeamScore,
)
from odds_consensus.lines.normalized import (
    UNKNOWN_TEAM,
    BookQuote,
    GameScore,
    GameState,
    NormalizedGameOdds,
    OverUnderProp,
    ScorerProp,
)
from odds_consensus.lines.props import (
    normalize_event_props,
    normalize_goal_scorer_props,
    normalize_over_under_props,
    normalize_scorer_props,
)
from odds_consensus.lines.quota import quota_tracker
from odds_consensus.lines.resolver import best_price, consensus_line
from odds_consensus.lines.scores import normalize_score

__all__ = [
    # Feed models
    "Outcome",
    "Market",
    "BookmakerOdds",
    "GameOdds",
    "ScoreEntry",
    "TeamScore",
    # Normalized models
    "UNKNOWN_TEAM",
    "BookQuote",
    "NormalizedGameOdds",
    "ScorerProp",
    "OverUnderProp",
    "GameScore",
    "GameState",
    # Conversion
    "decimal_to_american",
    "american_to_decimal",
    "decimal_to_implied_probability",
    # Resolution
    "best_price",
    "consensus_line",
    # Normalizers
    "normalize_game_odds",
    "normalize_scorer_props",
    "normalize_goal_scorer_props",
    "normalize_over_under_props",
    "normalize_event_props",
    "normalize_score",
    # Quota
    "quota_tracker",
]
