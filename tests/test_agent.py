"""Tests for ingestion orchestration.

Tests verify:
1. collect_odds normalizes fetched events and filters by team
2. Feed failures and an open circuit degrade into the errors list
3. collect_player_props fetches events concurrently and isolates failures
4. collect_scores derives states for every entry
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from circuitbreaker import CircuitBreakerError

from odds_consensus.errors import OddsAPIError
from odds_consensus.lines.agent import (
    _breakers,
    collect_odds,
    collect_player_props,
    collect_scores,
    fetch_odds,
)
from odds_consensus.lines.api import OddsAPIClient
from odds_consensus.lines.models import ScoreEntry
from odds_consensus.lines.normalized import GameState
from odds_consensus.lines.quota import quota_tracker

from factories import book, make_game, market


@pytest.fixture(autouse=True)
def reset_breakers():
    """Circuit breakers are module-level; start every test closed."""
    _breakers.clear()
    yield
    _breakers.clear()


@pytest.fixture
def mock_client(test_settings):
    client = MagicMock()
    client.settings = test_settings
    return client


@pytest.fixture
def knicks_game():
    return make_game(
        [book("draftkings", [market("h2h",
                                    {"name": "New York Knicks", "price": 1.91},
                                    {"name": "Miami Heat", "price": 1.95})])],
        home_team="New York Knicks",
        away_team="Miami Heat",
        game_id="def456",
    )


def points_event(event_id: str):
    return make_game(
        [book("fanduel", [market("player_points",
                                 {"name": "Over", "description": "Jane Doe", "price": 1.9, "point": 20.5},
                                 {"name": "Under", "description": "Jane Doe", "price": 1.9, "point": 20.5})])],
        game_id=event_id,
    )


# ============================================================================
# Test: collect_odds
# ============================================================================


@pytest.mark.asyncio
async def test_collect_odds_success(full_market_game, mock_client):
    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = [full_market_game]
        result = await collect_odds("basketball_nba", client=mock_client)

    assert result["sources_succeeded"] == ["odds_api"]
    assert result["sources_failed"] == []
    assert result["errors"] == []

    game = result["games"][0]
    assert game["game_id"] == "abc123"
    assert game["moneyline"]["best_home"]["bookmaker"] == "draftkings"
    assert game["spread"]["consensus_line"] == -1.5
    assert game["total"]["consensus_line"] == 220.5


@pytest.mark.asyncio
async def test_collect_odds_filters_by_team(full_market_game, knicks_game, mock_client):
    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = [full_market_game, knicks_game]
        result = await collect_odds("basketball_nba", teams=["knicks"], client=mock_client)

    assert [g["game_id"] for g in result["games"]] == ["def456"]


@pytest.mark.asyncio
async def test_collect_odds_no_filter_keeps_all(full_market_game, knicks_game, mock_client):
    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = [full_market_game, knicks_game]
        result = await collect_odds("basketball_nba", teams=[], client=mock_client)

    assert len(result["games"]) == 2


@pytest.mark.asyncio
async def test_collect_odds_reports_feed_error(mock_client):
    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.side_effect = OddsAPIError(401, "API key is not valid")
        result = await collect_odds("basketball_nba", client=mock_client)

    assert result["games"] == []
    assert result["sources_failed"] == ["odds_api"]
    assert "OddsAPIError" in result["errors"][0]
    assert "401" in result["errors"][0]


@pytest.mark.asyncio
async def test_collect_odds_reports_transport_error(mock_client):
    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.side_effect = httpx.ConnectError("refused")
        result = await collect_odds("basketball_nba", client=mock_client)

    assert result["sources_failed"] == ["odds_api"]
    assert len(result["errors"]) == 1


@pytest.mark.asyncio
async def test_collect_odds_handles_circuit_breaker(mock_client):
    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.side_effect = CircuitBreakerError(fetch_odds, "circuit breaker open")
        result = await collect_odds("basketball_nba", client=mock_client)

    assert "circuit breaker" in result["errors"][0].lower()
    assert result["sources_failed"] == ["odds_api"]


@pytest.mark.asyncio
async def test_collect_odds_low_credit_warning(full_market_game, mock_client):
    quota_tracker.update_from_headers({"x-requests-remaining": "12", "x-requests-used": "488"})

    with patch("odds_consensus.lines.agent.fetch_odds", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = [full_market_game]
        result = await collect_odds("basketball_nba", client=mock_client)

    assert result["errors"] == ["Warning: Only 12 API credits remaining"]
    assert result["quota"]["requests_remaining"] == 12
    assert result["sources_succeeded"] == ["odds_api"]


# ============================================================================
# Test: collect_player_props
# ============================================================================


@pytest.mark.asyncio
async def test_collect_player_props_normalizes_each_event(mock_client):
    mock_client.get_event_odds = AsyncMock(side_effect=lambda sport, event_id, markets: points_event(event_id))

    result = await collect_player_props(mock_client, "basketball_nba", ["e1", "e2"], ["player_points"])

    assert set(result["props"]) == {"e1", "e2"}
    prop = result["props"]["e1"]["player_points"][0]
    assert prop["player_name"] == "Jane Doe"
    assert prop["line"] == 20.5
    assert prop["best_over"]["bookmaker"] == "fanduel"
    assert result["errors"] == []


@pytest.mark.asyncio
async def test_collect_player_props_isolates_failures(mock_client):
    async def fake_fetch(sport, event_id, markets):
        if event_id == "bad":
            raise OddsAPIError(422, "Invalid market")
        if event_id == "none":
            return None
        return points_event(event_id)

    mock_client.get_event_odds = AsyncMock(side_effect=fake_fetch)

    result = await collect_player_props(
        mock_client, "basketball_nba", ["good", "bad", "none"], ["player_points"]
    )

    assert len(result["props"]["good"]["player_points"]) == 1
    assert "bad" not in result["props"]
    assert result["props"]["none"] == {}
    assert len(result["errors"]) == 1
    assert result["errors"][0].startswith("Props bad:")


@pytest.mark.asyncio
async def test_collect_player_props_bounds_concurrency(mock_client):
    in_flight = 0
    peak = 0

    async def fake_fetch(sport, event_id, markets):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return points_event(event_id)

    mock_client.get_event_odds = AsyncMock(side_effect=fake_fetch)

    event_ids = [f"e{i}" for i in range(6)]
    result = await collect_player_props(
        mock_client, "basketball_nba", event_ids, ["player_points"], max_concurrency=2
    )

    assert peak == 2
    assert len(result["props"]) == 6


@pytest.mark.asyncio
async def test_collect_player_props_reraises_programming_errors(mock_client):
    mock_client.get_event_odds = AsyncMock(side_effect=KeyError("boom"))

    with pytest.raises(KeyError):
        await collect_player_props(mock_client, "basketball_nba", ["e1"], ["player_points"])


# ============================================================================
# Test: collect_scores
# ============================================================================


@pytest.mark.asyncio
async def test_collect_scores(mock_client):
    entry = ScoreEntry.model_validate({
        "id": "abc123",
        "sport_key": "basketball_nba",
        "commence_time": "2026-01-24T00:00:00Z",
        "completed": True,
        "home_team": "Boston Celtics",
        "away_team": "Los Angeles Lakers",
        "scores": [
            {"name": "Boston Celtics", "score": "112"},
            {"name": "Los Angeles Lakers", "score": "104"},
        ],
        "last_update": "2026-01-24T02:30:00Z",
    })
    mock_client.get_scores = AsyncMock(return_value=[entry])

    scores = await collect_scores("basketball_nba", client=mock_client, days_from=1)

    mock_client.get_scores.assert_awaited_once_with("basketball_nba", days_from=1)
    assert scores[0].state is GameState.COMPLETED
    assert scores[0].home_score == 112
    assert scores[0].away_score == 104


# ============================================================================
# Test: end-to-end degradation and circuit breakers
# ============================================================================


def h2h_event(event_id: str, home_price: float) -> dict:
    return {
        "id": event_id,
        "sport_key": "basketball_nba",
        "commence_time": "2026-01-24T00:00:00Z",
        "home_team": "Boston Celtics",
        "away_team": "Los Angeles Lakers",
        "bookmakers": [
            book("draftkings", [market("h2h",
                                       {"name": "Boston Celtics", "price": home_price},
                                       {"name": "Los Angeles Lakers", "price": 2.30})]),
        ],
    }


@pytest.mark.asyncio
async def test_collect_odds_bad_price_keeps_good_event(httpx_mock, test_settings):
    httpx_mock.add_response(
        json=[h2h_event("good", 1.8), h2h_event("bad", 1.0)],
        headers={"x-requests-remaining": "400", "x-requests-used": "100"},
    )

    result = await collect_odds("basketball_nba", client=OddsAPIClient(settings=test_settings))

    assert result["errors"] == []
    assert result["sources_succeeded"] == ["odds_api"]
    games = {g["game_id"]: g for g in result["games"]}
    assert games["good"]["moneyline"]["best_home"]["price"] == 1.8
    assert games["bad"]["moneyline"]["best_home"] is None
    assert games["bad"]["moneyline"]["best_away"]["price"] == 2.3


class FlakyClient:
    """Client whose odds feed is down for one sport only."""

    def __init__(self, down_sport: str) -> None:
        self.down_sport = down_sport
        self.calls: list[str] = []

    async def get_odds(self, sport):
        self.calls.append(sport)
        if sport == self.down_sport:
            raise OddsAPIError(503, "Service unavailable")
        return []


@pytest.mark.asyncio
async def test_breaker_is_per_sport():
    client = FlakyClient(down_sport="icehockey_nhl")

    for _ in range(3):
        with pytest.raises(OddsAPIError):
            await fetch_odds(client, "icehockey_nhl")

    with pytest.raises(CircuitBreakerError):
        await fetch_odds(client, "icehockey_nhl")
    assert client.calls.count("icehockey_nhl") == 3

    assert await fetch_odds(client, "basketball_nba") == []
