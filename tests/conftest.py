"""Shared pytest fixtures for odds consensus tests."""

import pytest

from odds_consensus.config import Settings
from odds_consensus.lines.models import GameOdds
from odds_consensus.lines.quota import quota_tracker
from odds_consensus.monitoring import configure_logging

from factories import book, make_game, market


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Configure structlog for test output."""
    configure_logging("development")


@pytest.fixture(autouse=True)
def reset_quota():
    """Quota tracker is process-wide; start every test from unknown."""
    quota_tracker.reset()
    yield
    quota_tracker.reset()


@pytest.fixture
def test_settings():
    """Settings that ignore the environment and any .env file."""
    return Settings(odds_api_key="test_key", _env_file=None)


@pytest.fixture
def full_market_game() -> GameOdds:
    """Celtics vs Lakers with three books posting all three game markets.

    Moneyline home: 1.55 (draftkings), 1.48 (fanduel), 1.52 (betmgm)
    Spread home points: -1.5, -1.5, -2.0 -> consensus -1.5
    Total over points: 220.5, 221.5, 220.5 -> consensus 220.5
    """
    return make_game([
        book("draftkings", [
            market("h2h",
                   {"name": "Boston Celtics", "price": 1.55},
                   {"name": "Los Angeles Lakers", "price": 2.50}),
            market("spreads",
                   {"name": "Boston Celtics", "price": 1.91, "point": -1.5},
                   {"name": "Los Angeles Lakers", "price": 1.91, "point": 1.5}),
            market("totals",
                   {"name": "Over", "price": 1.91, "point": 220.5},
                   {"name": "Under", "price": 1.91, "point": 220.5}),
        ], title="DraftKings"),
        book("fanduel", [
            market("h2h",
                   {"name": "Boston Celtics", "price": 1.48},
                   {"name": "Los Angeles Lakers", "price": 2.70}),
            market("spreads",
                   {"name": "Boston Celtics", "price": 2.05, "point": -1.5},
                   {"name": "Los Angeles Lakers", "price": 1.80, "point": 1.5}),
            market("totals",
                   {"name": "Over", "price": 1.87, "point": 221.5},
                   {"name": "Under", "price": 1.95, "point": 221.5}),
        ], title="FanDuel"),
        book("betmgm", [
            market("h2h",
                   {"name": "Boston Celtics", "price": 1.52},
                   {"name": "Los Angeles Lakers", "price": 2.60}),
            market("spreads",
                   {"name": "Boston Celtics", "price": 1.87, "point": -2.0},
                   {"name": "Los Angeles Lakers", "price": 1.95, "point": 2.0}),
            market("totals",
                   {"name": "Over", "price": 1.95, "point": 220.5},
                   {"name": "Under", "price": 1.87, "point": 220.5}),
        ], title="BetMGM"),
    ])
