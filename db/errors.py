"""
db/errors.py
------------
Exceptions raised by the gateway itself.
Driver errors (psycopg2.Error, sqlite3.Error, ...) are never wrapped;
they reach the caller exactly as the driver raised them.
"""


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProviderError(GatewayError):
    """A provider cannot be used (e.g. unsupported paramstyle)."""

    pass


class ProviderNotFoundError(ProviderError, LookupError):
    """No driver is registered or importable under the given provider name."""

    def __init__(self, provider: str):
        super().__init__(f"Unknown database provider: {provider!r}", {"provider": provider})
        self.provider = provider


class ResultDecodeError(GatewayError, ValueError):
    """A result value could not be decoded into the expected type."""

    pass


class EmptyResultError(ResultDecodeError, IndexError):
    """The result set has no first row or no first column."""

    pass
