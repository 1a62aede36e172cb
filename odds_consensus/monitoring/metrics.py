"""Sportsbook coverage metrics.

Tracks which books posted odds for how many events and which markets
they offered, so gaps in coverage show up in the logs.
"""

from dataclasses import dataclass, field
from datetime import datetime

from odds_consensus.lines.models import GameOdds

# Books whose absence from a fetch is worth a warning
REQUIRED_SPORTSBOOKS = frozenset({"draftkings", "fanduel", "betmgm"})


@dataclass
class SportsbookMetrics:
    """Coverage for a single sportsbook across one fetch.

    Attributes:
        name: Sportsbook identifier (e.g., "draftkings", "fanduel")
        games_with_odds: Number of events with odds from this book
        markets_available: Market keys provided (e.g., ["h2h", "spreads"])
        last_seen: Most recent update timestamp reported by this book
        availability_pct: Percentage of events with odds from this book
    """

    name: str
    games_with_odds: int = 0
    markets_available: list[str] = field(default_factory=list)
    last_seen: datetime | None = None
    availability_pct: float = 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "games_with_odds": self.games_with_odds,
            "markets_available": self.markets_available,
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
            "availability_pct": self.availability_pct,
        }


def summarize_coverage(games: list[GameOdds]) -> dict[str, SportsbookMetrics]:
    """Aggregate per-book coverage over a list of events.

    Args:
        games: Events returned by one odds fetch

    Returns:
        Mapping of bookmaker key to its coverage metrics (empty for no events)
    """
    if not games:
        return {}

    game_counts: dict[str, int] = {}
    markets: dict[str, set[str]] = {}
    last_seen: dict[str, datetime] = {}

    for game in games:
        for bookmaker in game.bookmakers:
            game_counts[bookmaker.key] = game_counts.get(bookmaker.key, 0) + 1
            markets.setdefault(bookmaker.key, set()).update(m.key for m in bookmaker.markets)
            seen = bookmaker.last_update
            if seen is not None and (
                bookmaker.key not in last_seen or seen > last_seen[bookmaker.key]
            ):
                last_seen[bookmaker.key] = seen

    return {
        key: SportsbookMetrics(
            name=key,
            games_with_odds=count,
            markets_available=sorted(markets[key]),
            last_seen=last_seen.get(key),
            availability_pct=round(count / len(games) * 100, 1),
        )
        for key, count in game_counts.items()
    }


def missing_sportsbooks(coverage: dict[str, SportsbookMetrics]) -> list[str]:
    """Required books that posted nothing in this fetch."""
    return sorted(REQUIRED_SPORTSBOOKS - coverage.keys())
