"""Click-based CLI for goldpulse.

Thin wrapper around library modules. Builds the shared HTTP client once,
wires sources, notifier and scheduler onto it, and hands control to asyncio.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys

import click
import httpx
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)
logger = logging.getLogger("goldpulse")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # Request lines from httpx carry API keys and the bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call. Exits on ConfigError."""
    if "config" not in ctx.obj:
        from goldpulse.core import ConfigError, load_config

        try:
            ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
        except ConfigError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            raise SystemExit(2) from e
    return ctx.obj["config"]


def _http_client(config) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http.timeout_seconds),
        headers={"User-Agent": config.http.user_agent},
        follow_redirects=True,
    )


class EchoNotifier:
    """Writes messages to stdout instead of delivering them."""

    async def send(self, text: str) -> None:
        click.echo(text)


def _flatten(node: dict, prefix: str = "") -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    for key, value in node.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            rows.extend(_flatten(value, f"{path}."))
        else:
            rows.append((path, str(value)))
    return rows


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="GOLDPULSE_CONFIG",
    default=None,
    help="Path to goldpulse.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="goldpulse")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """goldpulse: gold price digest delivered to Telegram."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--run-on-start/--no-run-on-start",
    default=None,
    help="Run one cycle immediately instead of waiting for the first tick.",
)
@click.pass_context
def run(ctx: click.Context, run_on_start: bool | None) -> None:
    """Start the scheduler and send a digest every interval."""
    config = _load_config(ctx)

    async def _run():
        from goldpulse.pipeline import IntervalScheduler, PriceAggregator

        async with _http_client(config) as client:
            aggregator = PriceAggregator.from_config(config, client)
            scheduler = IntervalScheduler(
                aggregator.run_cycle,
                interval_seconds=config.schedule.interval_minutes * 60,
                run_on_start=(
                    config.schedule.run_on_start if run_on_start is None else run_on_start
                ),
            )
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, scheduler.stop)
                except (NotImplementedError, RuntimeError):
                    # Not available on Windows event loops
                    pass
            await scheduler.run_forever()

    try:
        _run_async(_run())
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


# ---------------------------------------------------------------------------
# once
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the message instead of sending it to Telegram.",
)
@click.pass_context
def once(ctx: click.Context, dry_run: bool) -> None:
    """Run a single fetch-and-notify cycle.

    Exits with status 1 when any source failed.
    """
    config = _load_config(ctx)

    async def _run():
        from goldpulse.pipeline import PriceAggregator

        async with _http_client(config) as client:
            notifier = EchoNotifier() if dry_run else None
            aggregator = PriceAggregator.from_config(config, client, notifier=notifier)
            return await aggregator.run_cycle()

    from goldpulse.core import NotificationError

    try:
        result = _run_async(_run())
    except NotificationError as e:
        console.print(f"[red]Delivery failed:[/red] {e}")
        raise SystemExit(1) from e

    if not result.ok:
        console.print(
            f"[yellow]Degraded cycle: {', '.join(result.failed_sources)} failed[/yellow]"
        )
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Cycle completed in {result.duration_ms:.0f}ms")


# ---------------------------------------------------------------------------
# check-config
# ---------------------------------------------------------------------------


@cli.command("check-config")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def check_config(ctx: click.Context, output_format: str) -> None:
    """Validate configuration and show it with credentials masked."""
    from goldpulse.core.config import redacted

    config = _load_config(ctx)
    data = redacted(config)

    if output_format == "json":
        click.echo(json.dumps(data, indent=2, default=str))
        return

    table = Table(title="goldpulse configuration")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for key, value in _flatten(data):
        table.add_row(key, value)
    console.print(table)
    console.print("[green]✓[/green] Configuration is valid")
