"""Protocol interfaces for the DeBank proxy."""
from .portfolio_api import PortfolioApi

__all__ = ["PortfolioApi"]
