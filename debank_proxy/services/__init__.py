"""Service modules"""
from .portfolio import PortfolioService, missing_key_diagnostic

__all__ = ["PortfolioService", "missing_key_diagnostic"]
