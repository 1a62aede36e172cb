"""Pydantic models for normalized, consolidated odds.

Every model here is rebuilt from scratch on each normalization call;
nothing is updated incrementally across calls.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from odds_consensus.lines.converter import (
    decimal_to_american,
    decimal_to_implied_probability,
)
from odds_consensus.lines.models import BookmakerOdds, Outcome

# Team attribution for player props the feed does not supply.
# Recorded as-is, never inferred from rosters.
UNKNOWN_TEAM = "Unknown"


class BookQuote(BaseModel):
    """One bookmaker's derived quote for one side of a market.

    Attributes:
        bookmaker: Sportsbook key (e.g., "fanduel")
        bookmaker_title: Sportsbook display name
        price: Decimal odds as posted
        american_odds: Price converted to American odds
        implied_probability: 1 / price
        last_update: Market update time reported by the book, if any
        point: Posted line for spreads/totals, None for moneyline and props
    """

    bookmaker: str
    bookmaker_title: str
    price: float
    american_odds: int
    implied_probability: float
    last_update: datetime | None = None
    point: float | None = None

    @classmethod
    def from_outcome(
        cls,
        bookmaker: BookmakerOdds,
        outcome: Outcome,
        last_update: datetime | None = None,
        with_point: bool = False,
    ) -> "BookQuote":
        return cls(
            bookmaker=bookmaker.key,
            bookmaker_title=bookmaker.title,
            price=outcome.price,
            american_odds=decimal_to_american(outcome.price),
            implied_probability=decimal_to_implied_probability(outcome.price),
            last_update=last_update or bookmaker.last_update,
            point=outcome.point if with_point else None,
        )


class MoneylineOdds(BaseModel):
    home: list[BookQuote] = []
    away: list[BookQuote] = []
    best_home: BookQuote | None = None
    best_away: BookQuote | None = None


class SpreadOdds(BaseModel):
    """Spread quotes per side.

    consensus_line is the modal home-side point (the conventional way a
    spread is quoted); away_consensus_line is the modal away-side point.
    """

    home: list[BookQuote] = []
    away: list[BookQuote] = []
    best_home: BookQuote | None = None
    best_away: BookQuote | None = None
    consensus_line: float | None = None
    away_consensus_line: float | None = None


class TotalOdds(BaseModel):
    over: list[BookQuote] = []
    under: list[BookQuote] = []
    best_over: BookQuote | None = None
    best_under: BookQuote | None = None
    consensus_line: float | None = None


class NormalizedGameOdds(BaseModel):
    """Consolidated moneyline, spread and total odds for one event."""

    game_id: str
    sport_key: str
    home_team: str
    away_team: str
    commence_time: datetime
    moneyline: MoneylineOdds
    spread: SpreadOdds
    total: TotalOdds


class ScorerProp(BaseModel):
    """Merged yes/no player prop (e.g., anytime goal scorer) for one player.

    Attributes:
        player_name: Player display name from the outcome description
        team: Always UNKNOWN_TEAM; the feed does not attribute teams
        market: Market key the quotes came from
        odds: Every bookmaker's quote, in feed order
        best_odds: Highest-priced quote (first seen wins ties)
        average_implied_probability: Unweighted mean over all quotes
    """

    player_name: str
    team: str = UNKNOWN_TEAM
    market: str
    odds: list[BookQuote] = []
    best_odds: BookQuote | None = None
    average_implied_probability: float = 0.0


class OverUnderProp(BaseModel):
    """Merged over/under stat prop for one (player, line) pair.

    Two lines for the same player are two separate records. consensus_line
    is the record's own line.
    """

    player_name: str
    team: str = UNKNOWN_TEAM
    market: str
    line: float | None = None
    over_odds: list[BookQuote] = []
    under_odds: list[BookQuote] = []
    best_over: BookQuote | None = None
    best_under: BookQuote | None = None
    consensus_line: float | None = None


class GameScorerProps(BaseModel):
    """First and anytime goal scorer props for one event."""

    game_id: str
    home_team: str
    away_team: str
    commence_time: datetime
    first_scorers: list[ScorerProp] = []
    anytime_scorers: list[ScorerProp] = []


class GameState(str, Enum):
    """Event lifecycle; only ever moves forward."""

    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATE_ORDER.index(self)


_STATE_ORDER = [GameState.SCHEDULED, GameState.LIVE, GameState.COMPLETED]


class GameScore(BaseModel):
    """Normalized score with derived lifecycle state.

    A None score means the feed reported nothing usable, not zero.
    """

    game_id: str
    home_team: str
    away_team: str
    home_score: int | None = None
    away_score: int | None = None
    state: GameState = GameState.SCHEDULED
    commence_time: datetime
    last_update: datetime | None = None

    @property
    def is_live(self) -> bool:
        return self.state is GameState.LIVE

    @property
    def is_completed(self) -> bool:
        return self.state is GameState.COMPLETED
