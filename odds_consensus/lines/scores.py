"""Score normalization with a derived lifecycle state.

States move SCHEDULED -> LIVE -> COMPLETED and never back. LIVE is
inferred: the start time has passed and the feed has not marked the
event completed. COMPLETED comes only from the feed's completed flag.
"""

from datetime import datetime, timezone

from odds_consensus.lines.markets import Side, SideResolver
from odds_consensus.lines.models import ScoreEntry
from odds_consensus.lines.normalized import GameScore, GameState


def parse_score(raw: str | None) -> int | None:
    """Parse a feed score string.

    Returns None for anything that is not a whole number; a missing score
    must not read as 0.

    Examples:
        >>> parse_score("7")
        7
        >>> parse_score("3.0")
        3
        >>> parse_score("abc") is None
        True
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    if value.is_integer():
        return int(value)
    return None


def derive_state(entry: ScoreEntry, now: datetime) -> GameState:
    if entry.completed:
        return GameState.COMPLETED
    if _as_utc(entry.commence_time) <= _as_utc(now):
        return GameState.LIVE
    return GameState.SCHEDULED


def _as_utc(moment: datetime) -> datetime:
    # Naive timestamps are treated as UTC, matching the feed
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def normalize_score(
    entry: ScoreEntry,
    now: datetime | None = None,
    previous: GameScore | None = None,
) -> GameScore:
    """Normalize one scores-feed entry.

    Args:
        entry: Raw scores feed entry
        now: Reference time for inferring LIVE (defaults to current UTC time)
        previous: Earlier normalized score for the same event; the state
            is never moved behind it

    Returns:
        GameScore with parsed scores (None when missing or unparsable)
    """
    now = now or datetime.now(timezone.utc)
    resolver = SideResolver(entry.home_team, entry.away_team)

    home_score: int | None = None
    away_score: int | None = None
    for team_score in entry.scores or []:
        side = resolver.team_side(team_score.name)
        if side is Side.HOME:
            home_score = parse_score(team_score.score)
        elif side is Side.AWAY:
            away_score = parse_score(team_score.score)

    state = derive_state(entry, now)
    if previous is not None and previous.game_id == entry.id and previous.state.rank > state.rank:
        state = previous.state

    return GameScore(
        game_id=entry.id,
        home_team=entry.home_team,
        away_team=entry.away_team,
        home_score=home_score,
        away_score=away_score,
        state=state,
        commence_time=entry.commence_time,
        last_update=entry.last_update,
    )
