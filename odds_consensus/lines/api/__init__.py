from odds_consensus.lines.api.odds_api import OddsAPIClient

__all__ = ["OddsAPIClient"]
