"""Odds format conversion utilities.

Converts between different odds formats:
- Decimal: 3.0, 1.67 (feed format, used for all internal storage)
- American: +200, -150 (US display format)
- Implied Probability: 0.33, 0.60 (bookmaker-implied, margin included)

Every function here is pure: no I/O, no shared state.
"""

import math

from pydantic import BaseModel


def _round_half_up(value: float) -> int:
    # Ties round towards +infinity: 112.5 -> 113, -112.5 -> -112
    return math.floor(value + 0.5)


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to American odds.

    Prices of 2.0 and above are underdog prices and map to positive
    American odds; prices below 2.0 map to negative odds. Even money
    (2.0) takes the positive branch and is exactly +100.

    Args:
        decimal_odds: Decimal odds (must be > 1.0)

    Returns:
        American odds, rounded to the nearest integer (halves round up)

    Raises:
        ValueError: If decimal_odds <= 1.0 (no American equivalent)

    Examples:
        >>> decimal_to_american(3.0)
        200
        >>> decimal_to_american(2.0)
        100
        >>> decimal_to_american(1.5)
        -200
    """
    if decimal_odds <= 1.0:
        raise ValueError(f"Decimal odds must be > 1.0 to convert (got {decimal_odds})")
    if decimal_odds >= 2.0:
        return _round_half_up((decimal_odds - 1) * 100)
    return _round_half_up(-100 / (decimal_odds - 1))


def american_to_decimal(american_odds: int) -> float:
    """Convert American odds to decimal odds.

    Args:
        american_odds: American format odds (e.g., +200, -150, +100)

    Returns:
        Decimal odds (always > 1.0)

    Raises:
        ValueError: If odds fall strictly between -100 and +100

    Examples:
        >>> american_to_decimal(200)
        3.0
        >>> american_to_decimal(-200)
        1.5
    """
    if -100 < american_odds < 100:
        raise ValueError(f"American odds must be <= -100 or >= +100 (got {american_odds})")
    if american_odds > 0:
        return (american_odds / 100) + 1
    return (100 / abs(american_odds)) + 1


def decimal_to_implied_probability(decimal_odds: float) -> float:
    """Convert decimal odds to implied probability.

    Bookmaker odds include vig, so implied probabilities across all
    outcomes of a market typically sum to more than 1.0.

    Examples:
        >>> decimal_to_implied_probability(2.0)
        0.5
    """
    return 1 / decimal_odds


def american_to_implied_probability(american_odds: int) -> float:
    """Convert American odds straight to implied probability."""
    if -100 < american_odds < 100:
        raise ValueError(f"American odds must be <= -100 or >= +100 (got {american_odds})")
    if american_odds > 0:
        return 100 / (american_odds + 100)
    return abs(american_odds) / (abs(american_odds) + 100)


def probability_to_decimal(probability: float) -> float:
    """Convert a probability in (0, 1] to fair decimal odds."""
    if not 0.0 < probability <= 1.0:
        raise ValueError(f"Probability must be in (0, 1] (got {probability})")
    return 1 / probability


def normalize_odds(price: float | int, odds_format: str = "american") -> float:
    """Normalize any supported odds format to decimal.

    Args:
        price: The odds value in the specified format
        odds_format: Format of the input odds ("american" or "decimal")

    Raises:
        ValueError: If odds_format is not recognized
    """
    if odds_format == "decimal":
        return float(price)
    elif odds_format == "american":
        return american_to_decimal(int(price))
    else:
        raise ValueError(
            f"Unknown odds format: '{odds_format}'. "
            "Supported formats: 'american', 'decimal'"
        )


def format_american_odds(american_odds: int) -> str:
    """Format American odds for display ("+123", "-152")."""
    return f"+{american_odds}" if american_odds > 0 else str(american_odds)


def format_decimal_odds(decimal_odds: float) -> str:
    return f"{decimal_odds:.2f}"


def format_probability(probability: float) -> str:
    """Format a probability as a percentage with one decimal ("60.2%")."""
    return f"{probability * 100:.1f}%"


def calculate_vig(odds_a: float, odds_b: float) -> float:
    """Overround of a two-way market as a fraction (0.045 = 4.5% vig)."""
    return decimal_to_implied_probability(odds_a) + decimal_to_implied_probability(odds_b) - 1


def calculate_fair_probability(decimal_odds: float, opposing_odds: float) -> float:
    """No-vig probability for one side of a two-way market.

    The margin is removed proportionally, so the two sides' fair
    probabilities sum to 1.0.
    """
    implied = decimal_to_implied_probability(decimal_odds)
    return implied / (1 + calculate_vig(decimal_odds, opposing_odds))


class OddsConversion(BaseModel):
    """One decimal price in every representation."""

    decimal: float
    american: int
    implied_probability: float
    formatted_decimal: str
    formatted_american: str
    formatted_probability: str


def convert_odds(decimal_odds: float) -> OddsConversion:
    american = decimal_to_american(decimal_odds)
    implied = decimal_to_implied_probability(decimal_odds)
    return OddsConversion(
        decimal=decimal_odds,
        american=american,
        implied_probability=implied,
        formatted_decimal=format_decimal_odds(decimal_odds),
        formatted_american=format_american_odds(american),
        formatted_probability=format_probability(implied),
    )
