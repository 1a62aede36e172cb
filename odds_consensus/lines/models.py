"""Pydantic models for raw odds feed data (The Odds API v4 shapes).

All prices are decimal odds: total payout per unit staked
(e.g., 2.0 = $2 back on a $1 bet, stake included).

Validation errors raised here surface at the ingestion boundary only;
normalizers receive already-validated models. An outcome that fails
validation is dropped from its market rather than failing the event.
"""

import math
import warnings
from datetime import datetime

from pydantic import BaseModel, ValidationError, field_validator

from odds_consensus.monitoring import get_logger

log = get_logger()


class Outcome(BaseModel):
    """One bookmaker's price for one outcome of a market.

    Attributes:
        name: Outcome identifier (team name, "Over", "Under", "Yes", "No")
        price: Decimal odds (always > 1.0)
        point: Posted line for spreads/totals/over-under props, None otherwise
        description: Free text; player props carry the player name here
    """

    name: str
    price: float
    point: float | None = None
    description: str | None = None

    @field_validator("price")
    @classmethod
    def validate_decimal_odds(cls, v: float) -> float:
        """Validate that decimal odds are usable.

        Raises:
            ValueError: If odds are not finite or not above 1.0 (a 1.0 price
                returns only the stake and has no American equivalent)
        """
        if not math.isfinite(v) or v <= 1.0:
            raise ValueError(
                f"Decimal odds must be > 1.0 (got {v}). "
                "Decimal odds represent total payout including the stake."
            )
        if v > 100.0:
            warnings.warn(
                f"Suspiciously high decimal odds: {v}. "
                "Verify this isn't American odds that need conversion.",
                UserWarning,
            )
        return v


class Market(BaseModel):
    """Betting market with one bookmaker's outcomes.

    Attributes:
        key: Market identifier, e.g. "h2h", "spreads", "totals",
            "player_points", "player_goal_scorer_anytime"
        last_update: When the bookmaker last updated this market
        outcomes: Possible outcomes for this market
    """

    key: str
    last_update: datetime | None = None
    outcomes: list[Outcome] = []

    @field_validator("outcomes", mode="wrap")
    @classmethod
    def drop_invalid_outcomes(cls, v, handler):
        """Drop outcomes that fail validation instead of rejecting the market.

        A single bad quote (e.g. a 1.0 price) must not take the rest of the
        event, or the rest of the feed response, down with it.
        """
        if not isinstance(v, list):
            return handler(v)
        kept = []
        for raw in v:
            try:
                kept.append(Outcome.model_validate(raw))
            except ValidationError as e:
                log.warning(
                    "invalid_outcome_dropped",
                    outcome=raw.get("name") if isinstance(raw, dict) else None,
                    error=e.errors()[0]["msg"],
                )
        return handler(kept)


class BookmakerOdds(BaseModel):
    """Odds from a single sportsbook for an event.

    Attributes:
        key: Sportsbook identifier (e.g., "draftkings", "fanduel")
        title: Display name (e.g., "DraftKings", "FanDuel")
        last_update: When this book last updated any market
        markets: Markets posted by this book
    """

    key: str
    title: str
    last_update: datetime | None = None
    markets: list[Market] = []


class GameOdds(BaseModel):
    """All bookmakers' odds for one event.

    Used both for the bulk odds endpoint and for the per-event endpoint that
    returns player props; the wire shape is the same.

    Attributes:
        id: Event identifier from the feed
        sport_key: Sport identifier (e.g., "basketball_nba")
        sport_title: Display name of the sport
        commence_time: Scheduled start time
        home_team: Home team name
        away_team: Away team name
        bookmakers: Sportsbooks with odds for this event
    """

    id: str
    sport_key: str
    sport_title: str | None = None
    commence_time: datetime
    home_team: str
    away_team: str
    bookmakers: list[BookmakerOdds] = []


class TeamScore(BaseModel):
    """Score line for one team as reported by the scores feed."""

    name: str
    score: str | None = None

    @field_validator("score", mode="before")
    @classmethod
    def stringify_score(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ScoreEntry(BaseModel):
    """Scores feed entry for one event.

    Attributes:
        completed: True once the feed marks the event final
        scores: Per-team scores, None before the event starts
        last_update: When the scores were last updated, None if never
    """

    id: str
    sport_key: str
    sport_title: str | None = None
    commence_time: datetime
    completed: bool = False
    home_team: str
    away_team: str
    scores: list[TeamScore] | None = None
    last_update: datetime | None = None


class Sport(BaseModel):
    """Entry from the sports listing endpoint."""

    key: str
    group: str
    title: str
    description: str = ""
    active: bool = True
    has_outrights: bool = False
