"""DeBank wallet proxy — token/protocol reconciliation behind a small HTTP API."""

__version__ = "0.1.0"
