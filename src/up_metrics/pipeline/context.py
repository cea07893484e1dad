from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable

from ..config_loader import ProtocolConfig, TokenRegistry, load_protocol
from ..domain import Position, Token
from ..gateway import MulticallGateway, ReadCall
from ..pricing import OracleFeed, PriceHelperPair
from ..settings import MetricsSettings


class ReadGateway(Protocol):
    async def read(
        self, calls: Sequence[ReadCall], batch_size: int = ...
    ) -> dict[str, Any]: ...


@runtime_checkable
class ChainAwareGateway(ReadGateway, Protocol):
    """Gateway that can also report the chain id of its endpoint."""

    async def chain_id(self) -> int: ...


@dataclass(frozen=True)
class MetricsContext:
    """Read-only inputs shared by every step of a metric computation.

    Built once per process and passed explicitly; nothing in the pipeline
    looks up configuration globally.
    """

    settings: MetricsSettings
    tokens: TokenRegistry
    protocol: ProtocolConfig
    gateway: ReadGateway
    logger: logging.Logger

    def token(self, symbol: str) -> Token:
        return self.tokens.get(symbol)

    @property
    def reference_token(self) -> Token:
        return self.token(self.settings.reference_token)

    @property
    def batch_size(self) -> int:
        return self.settings.multicall_batch_size

    def oracle_feeds(self) -> list[OracleFeed]:
        return [
            OracleFeed(token=self.token(o.token), address=o.address)
            for o in self.protocol.oracles
        ]

    def price_helpers(self) -> list[PriceHelperPair]:
        return [
            PriceHelperPair(
                address=h.address,
                base=self.token(h.base_token),
                quote=self.token(h.quote_token),
            )
            for h in self.protocol.price_helpers
        ]

    def positions(self) -> list[Position]:
        """Pools first, then stakings, in configuration order."""
        return [
            *(p.to_position() for p in self.protocol.pools),
            *(s.to_position() for s in self.protocol.stakings),
        ]


def build_context(
    settings: MetricsSettings,
    logger: logging.Logger | None = None,
    gateway: ReadGateway | None = None,
) -> MetricsContext:
    """Load protocol data for ``settings.network`` and wire the gateway."""
    tokens, protocol = load_protocol(settings)
    if gateway is None:
        gateway = MulticallGateway(
            settings.rpc_url_resolved, protocol.multicall_address
        )
    return MetricsContext(
        settings=settings,
        tokens=tokens,
        protocol=protocol,
        gateway=gateway,
        logger=logger or logging.getLogger("up_metrics"),
    )
