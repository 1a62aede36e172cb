"""Monitoring module for structured logging and sportsbook coverage.

- Structured JSON logging for production, console output for development
- Per-sportsbook coverage metrics for odds fetches
"""

from odds_consensus.monitoring.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
