"""Ingestion orchestration: fetch from the feed, then normalize.

- collect_odds: Fetch game odds for a sport and normalize every event
- collect_player_props: Fetch props for several events concurrently
- collect_scores: Fetch scores and derive lifecycle states

collect_odds and collect_player_props never raise on feed failures; they
report them in the result's errors list. A circuit breaker on the odds
fetch keeps a failing feed from being hammered.
"""

import asyncio
from collections.abc import Sequence

import httpx
from circuitbreaker import CircuitBreaker, CircuitBreakerError
from pydantic import ValidationError
from tenacity import RetryError

from odds_consensus.errors import OddsFeedError
from odds_consensus.lines.api.odds_api import OddsAPIClient
from odds_consensus.lines.markets import normalize_game_odds
from odds_consensus.lines.models import GameOdds
from odds_consensus.lines.normalized import GameScore
from odds_consensus.lines.props import normalize_event_props
from odds_consensus.lines.quota import quota_tracker
from odds_consensus.lines.scores import normalize_score
from odds_consensus.monitoring import get_logger

log = get_logger()

SOURCE = "odds_api"

FEED_ERRORS = (OddsFeedError, RetryError, httpx.HTTPError, ValidationError)


_breakers: dict[str, CircuitBreaker] = {}


def odds_breaker(sport: str) -> CircuitBreaker:
    """Circuit breaker for one sport's odds feed.

    Opens after 3 failures, recovers after 5 minutes. Each sport has its
    own breaker, so an NHL outage leaves NBA and NFL fetches alone.
    """
    breaker = _breakers.get(sport)
    if breaker is None:
        breaker = _breakers[sport] = CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=300,
            name=f"odds_feed_{sport}",
        )
    return breaker


async def fetch_odds(client: OddsAPIClient, sport: str) -> list[GameOdds]:
    """Fetch odds with circuit breaker protection.

    Raises:
        CircuitBreakerError: If the sport's circuit is open due to repeated failures
    """
    return await odds_breaker(sport)(client.get_odds)(sport)


def _matches_teams(game: GameOdds, teams: Sequence[str]) -> bool:
    game_teams = (game.home_team.lower(), game.away_team.lower())
    return any(t.lower() in team_name for t in teams for team_name in game_teams)


async def collect_odds(
    sport: str,
    teams: Sequence[str] | None = None,
    client: OddsAPIClient | None = None,
) -> dict:
    """Collect and normalize odds for a sport with graceful degradation.

    Args:
        sport: Sport key (e.g., "basketball_nba")
        teams: Substrings of team names to keep (empty or None = all events)
        client: Feed client (built from settings if omitted)

    Returns:
        Dict with keys:
        - games: Normalized odds per event (JSON-ready dicts)
        - errors: Error/warning messages
        - sources_succeeded / sources_failed: Source names
        - quota: Latest feed quota snapshot
    """
    result = {
        "games": [],
        "errors": [],
        "sources_succeeded": [],
        "sources_failed": [],
        "quota": None,
    }

    try:
        client = client or OddsAPIClient()
        games = await fetch_odds(client, sport)
        result["sources_succeeded"].append(SOURCE)

        for game in games:
            if teams and not _matches_teams(game, teams):
                continue
            result["games"].append(normalize_game_odds(game).model_dump(mode="json"))

        settings = client.settings
        if quota_tracker.is_low(settings.low_quota_threshold):
            remaining = quota_tracker.snapshot().requests_remaining
            result["errors"].append(f"Warning: Only {remaining} API credits remaining")

    except CircuitBreakerError:
        result["errors"].append("Odds feed: circuit breaker open, API temporarily unavailable")
        result["sources_failed"].append(SOURCE)

    except FEED_ERRORS as e:
        log.error("collect_odds_failed", sport=sport, error=str(e))
        result["errors"].append(f"Odds feed: {type(e).__name__}: {e}")
        result["sources_failed"].append(SOURCE)

    result["quota"] = quota_tracker.snapshot().to_dict()
    log.info(
        "odds_collected",
        sport=sport,
        game_count=len(result["games"]),
        error_count=len(result["errors"]),
    )
    return result


async def collect_player_props(
    client: OddsAPIClient,
    sport: str,
    event_ids: Sequence[str],
    markets: Sequence[str],
    max_concurrency: int | None = None,
) -> dict:
    """Fetch and normalize player props for several events concurrently.

    Events share no state, so they are fetched in parallel, at most
    max_concurrency at a time. One event failing does not affect the
    others.

    Returns:
        Dict with keys:
        - props: {event_id: {market_key: [normalized props as JSON-ready
          dicts]}}; an event the feed has no props for yet maps to an empty dict
        - errors: One message per failed event
    """
    limit = max_concurrency or client.settings.props_concurrency
    semaphore = asyncio.Semaphore(limit)

    async def fetch_one(event_id: str) -> GameOdds | None:
        async with semaphore:
            return await client.get_event_odds(sport, event_id, markets)

    responses = await asyncio.gather(
        *(fetch_one(event_id) for event_id in event_ids),
        return_exceptions=True,
    )

    result: dict = {"props": {}, "errors": []}
    for event_id, response in zip(event_ids, responses):
        if isinstance(response, BaseException):
            if not isinstance(response, FEED_ERRORS):
                raise response
            log.error("player_props_fetch_failed", event_id=event_id, error=str(response))
            result["errors"].append(f"Props {event_id}: {type(response).__name__}: {response}")
            continue
        if response is None:
            result["props"][event_id] = {}
            continue
        result["props"][event_id] = {
            market_key: [prop.model_dump(mode="json") for prop in props]
            for market_key, props in normalize_event_props(response, list(markets)).items()
        }

    return result


async def collect_scores(
    sport: str,
    client: OddsAPIClient | None = None,
    days_from: int | None = None,
) -> list[GameScore]:
    """Fetch scores for a sport and normalize them.

    Raises:
        OddsFeedError, RetryError: Feed failures propagate; scores have no
            partial result worth returning
    """
    client = client or OddsAPIClient()
    entries = await client.get_scores(sport, days_from=days_from)
    return [normalize_score(entry) for entry in entries]
