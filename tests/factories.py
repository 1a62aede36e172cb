"""Builders for feed-format test data."""

from odds_consensus.lines.models import GameOdds


def book(key: str, markets: list[dict], title: str | None = None) -> dict:
    """Bookmaker entry in feed format."""
    return {
        "key": key,
        "title": title or key.title(),
        "last_update": "2026-01-23T20:00:00Z",
        "markets": markets,
    }


def market(key: str, *outcomes: dict) -> dict:
    return {"key": key, "last_update": "2026-01-23T20:00:00Z", "outcomes": list(outcomes)}


def make_game(
    bookmakers: list[dict],
    home_team: str = "Boston Celtics",
    away_team: str = "Los Angeles Lakers",
    game_id: str = "abc123",
    sport_key: str = "basketball_nba",
) -> GameOdds:
    return GameOdds.model_validate(
        {
            "id": game_id,
            "sport_key": sport_key,
            "commence_time": "2026-01-24T00:00:00Z",
            "home_team": home_team,
            "away_team": away_team,
            "bookmakers": bookmakers,
        }
    )


