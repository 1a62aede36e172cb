"""Per-market normalization for moneyline, spread and total markets.

Turns one event's bag of per-bookmaker quotes into per-side collections,
each with a best-price pointer, plus a consensus line for spreads and
totals. Absent markets yield empty collections and None derived fields.

Outcome names are resolved to a Side once per event through SideResolver
instead of comparing raw team strings per outcome. Outcomes that match
no side are dropped and logged rather than guessed.
"""

from collections import defaultdict
from enum import Enum

from odds_consensus.lines.models import GameOdds
from odds_consensus.lines.normalized import (
    BookQuote,
    MoneylineOdds,
    NormalizedGameOdds,
    SpreadOdds,
    TotalOdds,
)
from odds_consensus.lines.resolver import best_price, consensus_line
from odds_consensus.monitoring import get_logger

log = get_logger()

MONEYLINE = "h2h"
SPREADS = "spreads"
TOTALS = "totals"


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"
    OVER = "over"
    UNDER = "under"


def _name_key(name: str) -> str:
    return " ".join(name.split()).casefold()


class SideResolver:
    """Maps outcome names to sides for a single event.

    Team names are keyed once (whitespace collapsed, case folded), so a
    difference in spacing or capitalization between the odds feed and
    the schedule does not misroute a quote.
    """

    def __init__(self, home_team: str, away_team: str) -> None:
        self._teams = {
            _name_key(home_team): Side.HOME,
            _name_key(away_team): Side.AWAY,
        }

    def team_side(self, name: str) -> Side | None:
        return self._teams.get(_name_key(name))

    @staticmethod
    def total_side(name: str) -> Side | None:
        key = _name_key(name)
        if key == "over":
            return Side.OVER
        if key == "under":
            return Side.UNDER
        return None

    def side(self, market_key: str, name: str) -> Side | None:
        if market_key == TOTALS:
            return self.total_side(name)
        return self.team_side(name)


def collect_sides(
    game: GameOdds,
    market_key: str,
    resolver: SideResolver | None = None,
) -> dict[Side, list[BookQuote]]:
    """Gather every bookmaker's quotes for one market, grouped by side.

    Args:
        game: Raw event odds
        market_key: "h2h", "spreads" or "totals"
        resolver: Side resolver for this event (built from the game if omitted)

    Returns:
        Quotes per side in feed order; sides with no quotes are absent
    """
    resolver = resolver or SideResolver(game.home_team, game.away_team)
    with_point = market_key != MONEYLINE
    sides: dict[Side, list[BookQuote]] = defaultdict(list)

    for bookmaker in game.bookmakers:
        for market in bookmaker.markets:
            if market.key != market_key:
                continue
            for outcome in market.outcomes:
                side = resolver.side(market_key, outcome.name)
                if side is None:
                    log.debug(
                        "unroutable_outcome",
                        game_id=game.id,
                        market=market_key,
                        bookmaker=bookmaker.key,
                        outcome=outcome.name,
                    )
                    continue
                sides[side].append(
                    BookQuote.from_outcome(
                        bookmaker, outcome, market.last_update, with_point=with_point
                    )
                )

    return sides


def _points(quotes: list[BookQuote]) -> list[float | None]:
    return [q.point for q in quotes]


def normalize_moneyline(game: GameOdds, resolver: SideResolver | None = None) -> MoneylineOdds:
    sides = collect_sides(game, MONEYLINE, resolver)
    home, away = sides.get(Side.HOME, []), sides.get(Side.AWAY, [])
    return MoneylineOdds(
        home=home,
        away=away,
        best_home=best_price(home),
        best_away=best_price(away),
    )


def normalize_spread(game: GameOdds, resolver: SideResolver | None = None) -> SpreadOdds:
    sides = collect_sides(game, SPREADS, resolver)
    home, away = sides.get(Side.HOME, []), sides.get(Side.AWAY, [])
    return SpreadOdds(
        home=home,
        away=away,
        best_home=best_price(home),
        best_away=best_price(away),
        consensus_line=consensus_line(_points(home)),
        away_consensus_line=consensus_line(_points(away)),
    )


def normalize_total(game: GameOdds, resolver: SideResolver | None = None) -> TotalOdds:
    sides = collect_sides(game, TOTALS, resolver)
    over, under = sides.get(Side.OVER, []), sides.get(Side.UNDER, [])
    return TotalOdds(
        over=over,
        under=under,
        best_over=best_price(over),
        best_under=best_price(under),
        consensus_line=consensus_line(_points(over)),
    )


def normalize_game_odds(game: GameOdds) -> NormalizedGameOdds:
    """Build the consolidated moneyline/spread/total view of one event.

    Pure and idempotent: the same input always yields an equal result.

    Example:
        Celtics (home) h2h at 1.55 (book A) and 1.48 (book B)
        -> moneyline.best_home.price == 1.55, american_odds == -182
    """
    resolver = SideResolver(game.home_team, game.away_team)
    return NormalizedGameOdds(
        game_id=game.id,
        sport_key=game.sport_key,
        home_team=game.home_team,
        away_team=game.away_team,
        commence_time=game.commence_time,
        moneyline=normalize_moneyline(game, resolver),
        spread=normalize_spread(game, resolver),
        total=normalize_total(game, resolver),
    )
