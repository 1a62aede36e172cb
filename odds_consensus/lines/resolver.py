"""Best-price and consensus-line resolution shared by every normalizer.

Both policies live here so a tie-break or rounding decision has exactly
one place to change.
"""

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

Q = TypeVar("Q")
H = TypeVar("H", bound=Hashable)


def best_price(quotes: Iterable[Q], price: Callable[[Q], float] = lambda q: q.price) -> Q | None:
    """Return the quote with the highest decimal price.

    Highest decimal price is the best payout for the bettor. The first
    quote seen wins ties, so the result depends only on input order,
    never on anything else.

    Args:
        quotes: Quotes for one side of one market
        price: Extracts the decimal price from a quote

    Returns:
        The best quote, or None for an empty input

    Example:
        >>> best_price([1.91, 2.05, 1.87], price=lambda p: p)
        2.05
    """
    best: Q | None = None
    for quote in quotes:
        if best is None or price(quote) > price(best):
            best = quote
    return best


def is_better_price(candidate: Q, current: Q | None, price: Callable[[Q], float] = lambda q: q.price) -> bool:
    """True when candidate should replace current as a running best."""
    return current is None or price(candidate) > price(current)


def consensus_line(points: Iterable[H | None]) -> H | None:
    """Return the most commonly posted line.

    None entries (books that posted no point) are ignored. When several
    values share the highest count, the one seen first wins, so with no
    repeats at all the first posted line is returned. This is a plain
    count, not weighted by book or liquidity.

    Returns:
        The modal line, or None if no line was posted

    Examples:
        >>> consensus_line([-1.5, -1.5, -2.0])
        -1.5
        >>> consensus_line([-1.5, -2.0])
        -1.5
    """
    counts: dict[H, int] = {}
    for point in points:
        if point is None:
            continue
        counts[point] = counts.get(point, 0) + 1

    mode: H | None = None
    top = 0
    for point, count in counts.items():
        if count > top:
            mode, top = point, count
    return mode
