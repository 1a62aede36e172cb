"""Odds consensus - consolidates per-bookmaker sportsbook quotes per event.

Subpackages:
- lines: feed models, format conversion, market/prop/score normalizers, feed client
- monitoring: structured logging and sportsbook coverage metrics
"""
