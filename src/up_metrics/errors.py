"""Failure types surfaced by metric computations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain import Token


class MetricsError(Exception):
    """Base class for every failure a metric computation can raise."""


class PriceUnavailableError(MetricsError):
    """Raised when no route connects a token to a priced token."""

    def __init__(self, token: Token, message: str | None = None):
        super().__init__(message or f"Can't calc price of {token.symbol}")
        self.token = token


class RemoteReadError(MetricsError):
    """Raised when a batched contract read fails as a whole."""


class DataConsistencyError(MetricsError):
    """Raised when on-chain reads violate an arithmetic invariant."""


class ConfigurationError(MetricsError):
    """Raised when the protocol configuration files are missing or malformed."""


class UnknownTokenError(MetricsError, KeyError):
    """Raised when a token symbol is not present in the token registry."""

    def __init__(self, symbol: str):
        super().__init__(f"Unknown token symbol: {symbol}")
        self.symbol = symbol

    def __str__(self) -> str:
        return str(self.args[0])
