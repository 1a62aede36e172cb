"""Exceptions raised at the odds feed ingestion boundary.

Normalizers never raise these; they only come out of the feed client.
"""


class OddsFeedError(Exception):
    """Base class for odds feed failures."""


class MissingAPIKeyError(OddsFeedError, ValueError):
    """No API key was passed and none is configured in the environment."""


class OddsAPIError(OddsFeedError):
    """The feed answered with a non-success status that is not worth retrying.

    Attributes:
        status_code: HTTP status returned by the feed
        message: Error message from the response body (or a generic fallback)
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Odds API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
