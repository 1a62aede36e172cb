"""Process-wide, best-effort bookkeeping of remaining odds feed requests.

The feed reports usage in the x-requests-remaining / x-requests-used
headers of every response. The tracker only records the latest values;
callers read it to decide whether to back off. It never blocks a call
and concurrent updates simply leave the last writer's values.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from odds_consensus.monitoring import get_logger

log = get_logger()

REMAINING_HEADER = "x-requests-remaining"
USED_HEADER = "x-requests-used"


@dataclass(frozen=True)
class ApiQuota:
    """Snapshot of feed usage.

    Attributes:
        requests_remaining: Requests left in the billing period, None until known
        requests_used: Requests consumed in the billing period, None until known
        updated_at: When a response last reported usage
    """

    requests_remaining: int | None = None
    requests_used: int | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "requests_remaining": self.requests_remaining,
            "requests_used": self.requests_used,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def _parse_count(value: str | None, header: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        # The feed sometimes reports fractional usage (e.g. "12.0")
        return int(float(value))
    except (ValueError, OverflowError):
        log.warning("quota_header_unparsable", header=header, value=value)
        return None


class QuotaTracker:
    """Latest known feed quota."""

    def __init__(self) -> None:
        self._quota = ApiQuota()

    def update_from_headers(self, headers: Mapping[str, str]) -> ApiQuota:
        """Record usage from a response's headers.

        Missing or unparsable headers leave the previous value in place.

        Returns:
            The snapshot after the update
        """
        remaining = _parse_count(headers.get(REMAINING_HEADER), REMAINING_HEADER)
        used = _parse_count(headers.get(USED_HEADER), USED_HEADER)
        if remaining is None and used is None:
            return self._quota

        current = self._quota
        self._quota = ApiQuota(
            requests_remaining=remaining if remaining is not None else current.requests_remaining,
            requests_used=used if used is not None else current.requests_used,
            updated_at=datetime.now(timezone.utc),
        )
        return self._quota

    def snapshot(self) -> ApiQuota:
        return self._quota

    def is_low(self, threshold: int) -> bool:
        """True when remaining requests are known and below threshold."""
        remaining = self._quota.requests_remaining
        return remaining is not None and remaining < threshold

    def reset(self) -> None:
        self._quota = ApiQuota()


quota_tracker = QuotaTracker()
