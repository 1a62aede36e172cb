"""The Odds API client for fetching sportsbook odds, props and scores.

This module provides an async client for The Odds API (https://the-odds-api.com)
with retry logic for transient errors, quota tracking and sportsbook coverage
metrics. It is the only place in the package that performs network I/O.
"""

import time
from collections.abc import Sequence

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from odds_consensus.config import Settings, get_settings
from odds_consensus.errors import MissingAPIKeyError, OddsAPIError
from odds_consensus.lines.models import GameOdds, ScoreEntry, Sport
from odds_consensus.lines.quota import quota_tracker
from odds_consensus.monitoring import get_logger
from odds_consensus.monitoring.metrics import (
    SportsbookMetrics,
    missing_sportsbooks,
    summarize_coverage,
)

log = get_logger()

NBA = "basketball_nba"
NHL = "icehockey_nhl"
NFL = "americanfootball_nfl"

GAME_MARKETS = ("h2h", "spreads", "totals")
NHL_PROP_MARKETS = ("player_goal_scorer_first", "player_goal_scorer_anytime")
NBA_PROP_MARKETS = ("player_points", "player_rebounds", "player_assists")
NFL_PROP_MARKETS = (
    "player_pass_tds",
    "player_pass_yds",
    "player_rush_yds",
    "player_reception_yds",
    "player_receptions",
    "player_anytime_td",
)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def _is_retryable(exc: BaseException) -> bool:
    """Transport failures and throttling/server statuses are worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


def _validate_events(items: list) -> list[GameOdds]:
    """Validate a bulk odds response, skipping events that fail validation."""
    games = []
    for item in items:
        try:
            games.append(GameOdds.model_validate(item))
        except ValidationError as e:
            log.warning(
                "invalid_event_dropped",
                event_id=item.get("id") if isinstance(item, dict) else None,
                error_count=e.error_count(),
            )
    return games


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "request failed"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or "request failed"


class OddsAPIClient:
    """Async client for The Odds API.

    Retries transient errors (timeouts, connection errors, 429, 5xx) with
    exponential backoff; other non-success statuses raise OddsAPIError
    immediately. Every successful response updates the process-wide
    quota tracker.

    Attributes:
        sportsbook_metrics: Coverage per bookmaker from the last odds fetch
    """

    def __init__(self, api_key: str | None = None, settings: Settings | None = None) -> None:
        """Initialize the Odds API client.

        Args:
            api_key: API key for The Odds API. If not provided, read from
                     settings (ODDS_API_KEY or THE_ODDS_API_KEY).
            settings: Settings to use instead of the cached global settings

        Raises:
            MissingAPIKeyError: If no API key is provided or configured.
        """
        self.settings = settings or get_settings()
        self.api_key = api_key or self.settings.odds_api_key
        if not self.api_key:
            raise MissingAPIKeyError(
                "ODDS_API_KEY not found in environment. "
                "Set it in .env or pass api_key parameter."
            )
        self.base_url = self.settings.odds_api_base_url.rstrip("/")
        self.sportsbook_metrics: dict[str, SportsbookMetrics] = {}

    @property
    def remaining_credits(self) -> int | None:
        return quota_tracker.snapshot().requests_remaining

    @property
    def used_credits(self) -> int | None:
        return quota_tracker.snapshot().requests_used

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_is_retryable),
    )
    async def _get(
        self, path: str, params: dict[str, str], allow_missing: bool = False
    ) -> httpx.Response | None:
        """GET a feed endpoint.

        Returns:
            The response, or None when allow_missing is set and the feed
            answered 404

        Raises:
            OddsAPIError: Non-success status that is not retryable
            httpx.HTTPError: Retryable failure (wrapped in RetryError once
                attempts are exhausted)
        """
        start_time = time.perf_counter()
        log.info("odds_api_request_started", path=path)

        async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
            response = await client.get(
                f"{self.base_url}{path}",
                params={"apiKey": self.api_key, **params},
            )

        if response.status_code == 404 and allow_missing:
            log.info("odds_api_resource_missing", path=path)
            return None
        if response.status_code in RETRYABLE_STATUS:
            response.raise_for_status()
        if response.is_error:
            raise OddsAPIError(response.status_code, _error_message(response))

        quota = quota_tracker.update_from_headers(response.headers)
        if quota_tracker.is_low(self.settings.low_quota_threshold):
            log.warning(
                "low_api_credits",
                remaining=quota.requests_remaining,
                message="Consider reducing request frequency",
            )

        log.info(
            "odds_api_request_completed",
            path=path,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
            credits_remaining=quota.requests_remaining,
            credits_used=quota.requests_used,
        )
        return response

    async def get_sports(self) -> list[Sport]:
        response = await self._get("/sports", {})
        return [Sport.model_validate(item) for item in response.json()]

    async def get_odds(
        self,
        sport: str,
        markets: Sequence[str] = GAME_MARKETS,
        regions: Sequence[str] | None = None,
        odds_format: str = "decimal",
        event_ids: Sequence[str] | None = None,
    ) -> list[GameOdds]:
        """Fetch current odds for every upcoming event of a sport.

        Args:
            sport: Sport key (e.g., "basketball_nba")
            markets: Market keys to fetch (h2h, spreads, totals)
            regions: Bookmaker regions (defaults to the configured region)
            odds_format: Keep "decimal"; normalizers expect decimal prices
            event_ids: Restrict to these events

        Returns:
            One GameOdds per event; events that fail validation are logged
            and skipped
        """
        params = {
            "regions": ",".join(regions or [self.settings.odds_region]),
            "markets": ",".join(markets),
            "oddsFormat": odds_format,
        }
        if event_ids:
            params["eventIds"] = ",".join(event_ids)

        response = await self._get(f"/sports/{sport}/odds", params)
        games = _validate_events(response.json())
        self._update_sportsbook_metrics(games)
        return games

    async def get_nba_odds(self, markets: Sequence[str] = GAME_MARKETS) -> list[GameOdds]:
        return await self.get_odds(NBA, markets)

    async def get_nhl_odds(self, markets: Sequence[str] = GAME_MARKETS) -> list[GameOdds]:
        return await self.get_odds(NHL, markets)

    async def get_nfl_odds(self, markets: Sequence[str] = GAME_MARKETS) -> list[GameOdds]:
        return await self.get_odds(NFL, markets)

    async def get_game_odds(
        self, sport: str, event_id: str, markets: Sequence[str] = GAME_MARKETS
    ) -> GameOdds | None:
        games = await self.get_odds(sport, markets, event_ids=[event_id])
        return games[0] if games else None

    async def get_event_odds(
        self, sport: str, event_id: str, markets: Sequence[str]
    ) -> GameOdds | None:
        """Fetch per-event markets (player props need the event endpoint).

        Returns:
            The event's odds, or None if the feed has nothing for it yet (404)
        """
        params = {
            "regions": self.settings.odds_region,
            "markets": ",".join(markets),
            "oddsFormat": "decimal",
        }
        response = await self._get(
            f"/sports/{sport}/events/{event_id}/odds", params, allow_missing=True
        )
        if response is None:
            return None
        return GameOdds.model_validate(response.json())

    async def get_nhl_player_props(
        self, event_id: str, markets: Sequence[str] = NHL_PROP_MARKETS
    ) -> GameOdds | None:
        return await self.get_event_odds(NHL, event_id, markets)

    async def get_nba_player_props(
        self, event_id: str, markets: Sequence[str] = NBA_PROP_MARKETS
    ) -> GameOdds | None:
        return await self.get_event_odds(NBA, event_id, markets)

    async def get_nfl_player_props(
        self, event_id: str, markets: Sequence[str] = NFL_PROP_MARKETS
    ) -> GameOdds | None:
        return await self.get_event_odds(NFL, event_id, markets)

    async def get_scores(self, sport: str, days_from: int | None = None) -> list[ScoreEntry]:
        """Fetch live and upcoming scores.

        Args:
            sport: Sport key
            days_from: Also include events completed in the last 1-3 days

        Raises:
            ValueError: If days_from is outside 1-3
        """
        params: dict[str, str] = {}
        if days_from is not None:
            if days_from not in (1, 2, 3):
                raise ValueError(f"days_from must be 1, 2 or 3 (got {days_from})")
            params["daysFrom"] = str(days_from)

        response = await self._get(f"/sports/{sport}/scores", params)
        return [ScoreEntry.model_validate(item) for item in response.json()]

    def _update_sportsbook_metrics(self, games: list[GameOdds]) -> None:
        if not games:
            return
        self.sportsbook_metrics = summarize_coverage(games)
        missing = missing_sportsbooks(self.sportsbook_metrics)
        if missing:
            log.warning(
                "sportsbooks_unavailable",
                missing=missing,
                available=sorted(self.sportsbook_metrics),
            )

    def get_sportsbook_metrics(self) -> dict:
        return {name: metrics.to_dict() for name, metrics in self.sportsbook_metrics.items()}
