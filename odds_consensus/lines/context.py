"""Read-only market summary handed to the analysis prompt builder.

The prompt builder uses implied probabilities from the best available
prices as the market baseline. It gets a frozen summary rather than the
normalized odds themselves, so nothing downstream can alter them.
"""

from pydantic import BaseModel, ConfigDict

from odds_consensus.lines.converter import calculate_vig
from odds_consensus.lines.normalized import BookQuote, NormalizedGameOdds


class PriceSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    bookmaker: str
    price: float
    american_odds: int
    implied_probability: float

    @classmethod
    def from_quote(cls, quote: BookQuote | None) -> "PriceSummary | None":
        if quote is None:
            return None
        return cls(
            bookmaker=quote.bookmaker_title,
            price=quote.price,
            american_odds=quote.american_odds,
            implied_probability=quote.implied_probability,
        )


class MarketContext(BaseModel):
    """Best prices and consensus lines for one event.

    Attributes:
        book_count: Distinct bookmakers contributing any quote
        moneyline_overround: Vig of the best home/away prices combined,
            None unless both sides are priced
    """

    model_config = ConfigDict(frozen=True)

    game_id: str
    home_team: str
    away_team: str
    book_count: int
    moneyline_home: PriceSummary | None = None
    moneyline_away: PriceSummary | None = None
    moneyline_overround: float | None = None
    spread_line: float | None = None
    spread_home: PriceSummary | None = None
    spread_away: PriceSummary | None = None
    total_line: float | None = None
    total_over: PriceSummary | None = None
    total_under: PriceSummary | None = None


def _book_count(odds: NormalizedGameOdds) -> int:
    quotes = [
        *odds.moneyline.home, *odds.moneyline.away,
        *odds.spread.home, *odds.spread.away,
        *odds.total.over, *odds.total.under,
    ]
    return len({q.bookmaker for q in quotes})


def build_market_context(odds: NormalizedGameOdds) -> MarketContext:
    moneyline = odds.moneyline
    overround = None
    if moneyline.best_home is not None and moneyline.best_away is not None:
        overround = calculate_vig(moneyline.best_home.price, moneyline.best_away.price)

    return MarketContext(
        game_id=odds.game_id,
        home_team=odds.home_team,
        away_team=odds.away_team,
        book_count=_book_count(odds),
        moneyline_home=PriceSummary.from_quote(moneyline.best_home),
        moneyline_away=PriceSummary.from_quote(moneyline.best_away),
        moneyline_overround=overround,
        spread_line=odds.spread.consensus_line,
        spread_home=PriceSummary.from_quote(odds.spread.best_home),
        spread_away=PriceSummary.from_quote(odds.spread.best_away),
        total_line=odds.total.consensus_line,
        total_over=PriceSummary.from_quote(odds.total.best_over),
        total_under=PriceSummary.from_quote(odds.total.best_under),
    )
