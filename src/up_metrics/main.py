"""CLI entrypoint for up-metrics."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Awaitable, Callable, TypeVar

import typer

from .client import MetricsClient
from .errors import MetricsError
from .logger import setup_logging
from .pipeline import build_context
from .pipeline.preflight import run_preflight
from .report import format_metric, format_tvl_table, to_json
from .settings import MetricsSettings, Network

T = TypeVar("T")

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="TVL, price and market cap metrics for the UP protocol.",
)


def _build_logger() -> logging.Logger:
    return logging.getLogger("up_metrics")


class CliState:
    settings: MetricsSettings
    use_cache: bool = True
    as_json: bool = False


state = CliState()


@app.callback()
def main(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [up_metrics] table).",
        ),
    ] = None,
    network: Annotated[
        Network | None,
        typer.Option("--network", "-n", help="Network to use (bsc or bsc-testnet)."),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="RPC endpoint; overrides the network default."),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Directory containing <chainId><suffix>/ config."),
    ] = None,
    suffix: Annotated[
        str | None,
        typer.Option("--suffix", help="Config directory suffix, e.g. '-staging'."),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Bypass the metric result cache."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON."),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option("--show-config", help="Print effective config and exit."),
    ] = False,
):
    """Load settings shared by every command."""
    if config_path:
        os.environ["UP_METRICS_CONFIG"] = str(config_path)

    init_kwargs: dict[str, object] = {}
    if network is not None:
        init_kwargs["network"] = network
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if data_dir is not None:
        init_kwargs["data_dir"] = data_dir
    if suffix is not None:
        init_kwargs["config_suffix"] = suffix
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = MetricsSettings(**init_kwargs)
    setup_logging(settings.log_level)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    state.settings = settings
    state.use_cache = not no_cache
    state.as_json = as_json


def _run(fn: Callable[[MetricsClient], Awaitable[T]]) -> T:
    """Build the client, run the preflight check and one metric."""
    log = _build_logger()

    async def _inner() -> T:
        ctx = build_context(state.settings, logger=log)
        await run_preflight(ctx)
        return await fn(MetricsClient(context=ctx))

    try:
        return asyncio.run(_inner())
    except MetricsError as e:
        log.error("%s", e)
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from e


@app.command()
def tvl() -> None:
    """Total value locked with a per-position breakdown."""
    report = _run(lambda client: client.tvl(use_cache=state.use_cache))
    if state.as_json:
        typer.echo(to_json(report.to_dict()))
    else:
        format_tvl_table(report)


@app.command()
def price() -> None:
    """Price of the reference token."""
    value = _run(lambda client: client.up_price(use_cache=state.use_cache))
    if state.as_json:
        typer.echo(to_json({"price": value}))
    else:
        format_metric("Price", value)


@app.command("market-cap")
def market_cap() -> None:
    """Market capitalization of the reference token."""
    value = _run(lambda client: client.market_cap(use_cache=state.use_cache))
    if state.as_json:
        typer.echo(to_json({"marketCap": value}))
    else:
        format_metric("Market cap", value)


@app.command()
def supply() -> None:
    """Circulating supply of the reference token (raw units)."""
    value = _run(lambda client: client.circulating_supply())
    if state.as_json:
        typer.echo(to_json({"circulatingSupply": str(value)}))
    else:
        format_metric("Circulating supply", value)


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
