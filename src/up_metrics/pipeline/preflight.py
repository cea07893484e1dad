"""Preflight connectivity check before computing metrics."""

from __future__ import annotations

from typing import Any

import backoff

from ..errors import MetricsError
from .context import ChainAwareGateway, MetricsContext


class PreflightError(MetricsError):
    """Raised when the RPC endpoint is unusable for the configured network."""

    def __init__(self, message: str, retry_recommended: bool = False):
        super().__init__(message)
        self.retry_recommended = retry_recommended


async def check_chain(ctx: MetricsContext) -> int:
    """Verify the RPC serves the chain the protocol config was loaded for."""
    gateway = ctx.gateway
    if not isinstance(gateway, ChainAwareGateway):
        ctx.logger.debug("Gateway cannot report a chain id, skipping chain check")
        return ctx.settings.chain_id

    try:
        chain_id = await gateway.chain_id()
    except Exception as e:
        raise PreflightError(
            f"Failed to reach RPC {ctx.settings.as_safe_dict()['rpc_url']}: {e}",
            retry_recommended=True,
        ) from e

    if chain_id != ctx.settings.chain_id:
        raise PreflightError(
            f"RPC reports chain {chain_id}, expected {ctx.settings.chain_id} "
            f"for network {ctx.settings.network.value}"
        )
    return chain_id


async def run_preflight(ctx: MetricsContext) -> None:
    """Run the chain check, retrying while the RPC is unreachable.

    Raises:
        PreflightError: If the check still fails after all retries
    """
    s = ctx.settings
    log = ctx.logger

    def _should_giveup(e: Exception) -> bool:
        return isinstance(e, PreflightError) and not e.retry_recommended

    def _on_backoff(details: Any) -> None:
        log.warning(
            "Preflight failed (attempt %d of %d): %s",
            details["tries"],
            s.preflight_retries + 1,
            details.get("exception", details.get("value")),
        )

    def _on_giveup(details: Any) -> None:
        log.error(
            "Preflight failed after %d attempts: %s",
            details["tries"],
            details.get("exception", details.get("value")),
        )

    @backoff.on_exception(
        backoff.constant,
        PreflightError,
        max_tries=s.preflight_retries + 1,
        interval=s.preflight_interval,
        giveup=_should_giveup,
        on_backoff=_on_backoff,
        on_giveup=_on_giveup,
    )
    async def _check_with_retry() -> int:
        return await check_chain(ctx)

    chain_id = await _check_with_retry()
    log.debug("Connected to chain %d", chain_id)
