"""One fetch → compose → notify cycle over the three price sources."""

from __future__ import annotations

import asyncio
import html
import logging
import time
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx

from goldpulse.core.config import GoldPulseConfig
from goldpulse.core.exceptions import SourceFailure
from goldpulse.core.models import (
    CycleResult,
    LocalPriceTable,
    Report,
    ReportSection,
    SourceOutcome,
    WorldQuote,
)
from goldpulse.notify.base import Notifier
from goldpulse.notify.telegram import TelegramNotifier
from goldpulse.sources.base import PriceSource
from goldpulse.sources.btmc import BtmcSource
from goldpulse.sources.doji import DojiSource
from goldpulse.sources.world import WorldGoldSource

logger = logging.getLogger(__name__)

# Report headings for the local sources, keyed by source label
SECTION_TITLES: dict[str, str] = {
    "DOJI": "DOJI",
    "BTMC": "Bảo Tín Minh Châu",
}


class PriceAggregator:
    """Runs the three sources and turns their outcomes into one message.

    Sources are fetched concurrently and each runs to completion whatever
    the others do. Layout order is always world, then the local sources in
    the order given, regardless of which fetch finished first.

    A cycle is all-or-nothing: if any source fails, a warning notice naming
    every failed source replaces the report. Exactly one message is sent per
    cycle.
    """

    def __init__(
        self,
        world: PriceSource,
        local: list[PriceSource],
        notifier: Notifier,
        timezone: str = "Asia/Ho_Chi_Minh",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._world = world
        self._local = list(local)
        self._notifier = notifier
        self._tz = ZoneInfo(timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))

    @classmethod
    def from_config(
        cls,
        config: GoldPulseConfig,
        client: httpx.AsyncClient,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> PriceAggregator:
        """Wire the standard sources and Telegram onto a shared client."""
        return cls(
            world=WorldGoldSource(config.sources.world, client),
            local=[
                DojiSource(config.sources.doji, client),
                BtmcSource(config.sources.btmc, client),
            ],
            notifier=notifier or TelegramNotifier(config.telegram, client),
            timezone=config.report.timezone,
            clock=clock,
        )

    @property
    def sources(self) -> list[PriceSource]:
        """All sources in report layout order."""
        return [self._world, *self._local]

    async def collect(self) -> list[SourceOutcome]:
        """Fetch every source concurrently; outcomes in layout order."""
        return list(await asyncio.gather(*(self._fetch_one(s) for s in self.sources)))

    async def _fetch_one(self, source: PriceSource) -> SourceOutcome:
        logger.info("Fetching %s prices...", source.label)
        try:
            value = await source.fetch()
        except SourceFailure as e:
            logger.error("Error fetching %s prices: %s", e.source, e.message)
            return SourceOutcome(source=source.label, failure=e)
        except Exception as e:
            # A source broke its contract; still attribute the failure to it
            logger.exception("Unexpected error from %s source", source.label)
            return SourceOutcome(
                source=source.label,
                failure=SourceFailure(source.label, str(e) or type(e).__name__, cause=e),
            )

        if value is None:
            logger.error("%s source returned no prices", source.label)
            return SourceOutcome(
                source=source.label,
                failure=SourceFailure(source.label, "No prices returned"),
            )
        if isinstance(value, WorldQuote):
            logger.info("World gold price fetched: %s", value.render())
        else:
            logger.info("%s prices fetched successfully", source.label)
        return SourceOutcome(source=source.label, value=value)

    def build_report(self, outcomes: list[SourceOutcome]) -> Report:
        """Compose the report from fully successful outcomes.

        Raises:
            ValueError: if any outcome is a failure or the world quote is
                missing.
        """
        failed = [o.source for o in outcomes if not o.ok]
        if failed:
            raise ValueError(f"Cannot build a report with failed sources: {failed}")

        world: WorldQuote | None = None
        sections: list[ReportSection] = []
        for outcome in outcomes:
            if isinstance(outcome.value, WorldQuote):
                world = outcome.value
            elif isinstance(outcome.value, LocalPriceTable):
                sections.append(
                    ReportSection(
                        title=SECTION_TITLES.get(outcome.source, outcome.source),
                        body=outcome.value.render(),
                    )
                )
        if world is None:
            raise ValueError("Cannot build a report without a world quote")

        return Report(generated_at=self._clock(), world=world, sections=sections)

    @staticmethod
    def failure_notice(failures: list[SourceFailure]) -> str:
        """One warning line per failed source."""
        return "\n".join(
            f"⚠️ Error fetching {html.escape(f.source)} prices: {html.escape(f.message)}"
            for f in failures
        )

    async def run_cycle(self) -> CycleResult:
        """Fetch, compose and send. Notifier errors propagate."""
        logger.info("Starting to fetch gold prices...")
        started = time.perf_counter()

        outcomes = await self.collect()
        failures = [o.failure for o in outcomes if o.failure is not None]

        if failures:
            message = self.failure_notice(failures)
            logger.warning(
                "Cycle degraded, sending warning for: %s",
                ", ".join(f.source for f in failures),
            )
        else:
            message = self.build_report(outcomes).render()
            logger.info("Sending notification to Telegram...")

        await self._notifier.send(message)
        logger.info("Notification sent successfully")

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info("Price update completed in %.0fms", duration_ms)
        return CycleResult(
            ok=not failures,
            message=message,
            duration_ms=duration_ms,
            failed_sources=[f.source for f in failures],
        )
