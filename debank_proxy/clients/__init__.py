"""Upstream API clients."""
from .debank import DebankClient

__all__ = ["DebankClient"]
