"""Player prop normalization.

Two shapes of player prop come from the per-event odds endpoint:

- Yes/no scorer props (first/anytime goal scorer, anytime TD): the outcome
  name is "Yes"/"No" and the player is in the description. Quotes merge
  into one ScorerProp per player.
- Over/under stat props (points, rebounds, passing yards): quotes merge
  into one OverUnderProp per (player, line), with both directions on the
  same record. Different lines for one player never merge.

Team attribution is not in the feed and is recorded as UNKNOWN_TEAM.
"""

from typing import NamedTuple

from odds_consensus.lines.models import GameOdds, Outcome
from odds_consensus.lines.normalized import (
    BookQuote,
    GameScorerProps,
    OverUnderProp,
    ScorerProp,
)
from odds_consensus.lines.resolver import is_better_price
from odds_consensus.monitoring import get_logger

log = get_logger()

FIRST_GOAL_SCORER = "player_goal_scorer_first"
ANYTIME_GOAL_SCORER = "player_goal_scorer_anytime"

SCORER_MARKETS = frozenset({
    FIRST_GOAL_SCORER,
    ANYTIME_GOAL_SCORER,
    "player_goal_scorer_last",
    "player_first_td",
    "player_anytime_td",
    "player_last_td",
})

_YES_NO = {"yes", "no"}


class PropKey(NamedTuple):
    """Identity of an over/under prop record."""

    player_name: str
    line: float | None


def player_name(outcome: Outcome) -> str | None:
    """Player identity for a prop outcome.

    The description holds the player; the outcome name is only used when
    the description is missing and the name is not a bare Yes/No token.
    """
    if outcome.description and outcome.description.strip():
        return outcome.description.strip()
    name = outcome.name.strip()
    if name and name.casefold() not in _YES_NO:
        return name
    return None


def normalize_scorer_props(event: GameOdds, market_key: str) -> list[ScorerProp]:
    """Merge every bookmaker's yes/no quotes for one scorer market.

    "No" outcomes price the opposite proposition and are skipped.

    Returns:
        One ScorerProp per player, most likely scorer first (descending
        average implied probability; ties keep first-seen order)
    """
    props: dict[str, ScorerProp] = {}

    for bookmaker in event.bookmakers:
        for market in bookmaker.markets:
            if market.key != market_key:
                continue
            for outcome in market.outcomes:
                if outcome.name.strip().casefold() == "no":
                    continue
                name = player_name(outcome)
                if name is None:
                    log.debug(
                        "prop_outcome_without_player",
                        game_id=event.id,
                        market=market_key,
                        bookmaker=bookmaker.key,
                    )
                    continue

                quote = BookQuote.from_outcome(bookmaker, outcome, market.last_update)
                prop = props.get(name)
                if prop is None:
                    prop = props[name] = ScorerProp(player_name=name, market=market_key)
                prop.odds.append(quote)
                if is_better_price(quote, prop.best_odds):
                    prop.best_odds = quote

    for prop in props.values():
        prop.average_implied_probability = sum(
            q.implied_probability for q in prop.odds
        ) / len(prop.odds)

    return sorted(
        props.values(),
        key=lambda p: p.average_implied_probability,
        reverse=True,
    )


def normalize_goal_scorer_props(event: GameOdds) -> GameScorerProps:
    """First and anytime goal scorer props for one event."""
    return GameScorerProps(
        game_id=event.id,
        home_team=event.home_team,
        away_team=event.away_team,
        commence_time=event.commence_time,
        first_scorers=normalize_scorer_props(event, FIRST_GOAL_SCORER),
        anytime_scorers=normalize_scorer_props(event, ANYTIME_GOAL_SCORER),
    )


def _line_sort_key(prop: OverUnderProp) -> tuple[bool, float]:
    # Descending by line, missing lines last
    return (prop.line is None, -(prop.line or 0.0))


def normalize_over_under_props(event: GameOdds, market_key: str) -> list[OverUnderProp]:
    """Merge every bookmaker's over/under quotes for one stat market.

    Quotes are keyed by (player, line). A quote with no posted point keeps
    line None rather than being read as 0. Outcomes that are neither Over
    nor Under are skipped.

    Returns:
        Props sorted by line, highest first. This is a display convenience
        (high lines tend to belong to featured players), not a ranking.
    """
    props: dict[PropKey, OverUnderProp] = {}

    for bookmaker in event.bookmakers:
        for market in bookmaker.markets:
            if market.key != market_key:
                continue
            for outcome in market.outcomes:
                direction = outcome.name.strip().casefold()
                if direction not in ("over", "under"):
                    log.debug(
                        "prop_outcome_unknown_direction",
                        game_id=event.id,
                        market=market_key,
                        outcome=outcome.name,
                    )
                    continue
                name = player_name(outcome)
                if name is None:
                    continue

                key = PropKey(name, outcome.point)
                prop = props.get(key)
                if prop is None:
                    prop = props[key] = OverUnderProp(
                        player_name=name,
                        market=market_key,
                        line=outcome.point,
                        consensus_line=outcome.point,
                    )

                quote = BookQuote.from_outcome(bookmaker, outcome, market.last_update)
                if direction == "over":
                    prop.over_odds.append(quote)
                    if is_better_price(quote, prop.best_over):
                        prop.best_over = quote
                else:
                    prop.under_odds.append(quote)
                    if is_better_price(quote, prop.best_under):
                        prop.best_under = quote

    return sorted(props.values(), key=_line_sort_key)


def normalize_event_props(
    event: GameOdds, markets: list[str]
) -> dict[str, list[ScorerProp] | list[OverUnderProp]]:
    """Normalize several prop markets of one event.

    Each market key is routed to the scorer or the over/under normalizer.
    Markets nobody posted map to an empty list.
    """
    result: dict[str, list[ScorerProp] | list[OverUnderProp]] = {}
    for market_key in markets:
        if market_key in SCORER_MARKETS:
            result[market_key] = normalize_scorer_props(event, market_key)
        else:
            result[market_key] = normalize_over_under_props(event, market_key)
    return result
