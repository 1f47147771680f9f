"""End-to-end cycle: sources → aggregator → Telegram, over mocked HTTP."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import httpx
import pytest

from goldpulse.pipeline.aggregator import PriceAggregator

pytestmark = pytest.mark.integration


def _sent_texts(router) -> list[str]:
    return [json.loads(call.request.content)["text"] for call in router["telegram"].calls]


class _Clock:
    def __init__(self):
        self.now = datetime(2026, 10, 18, 16, 40, 0)

    def __call__(self):
        current = self.now
        self.now += timedelta(minutes=10)
        return current


@pytest.fixture
async def aggregator(config):
    async with httpx.AsyncClient(timeout=5) as client:
        yield PriceAggregator.from_config(config, client, clock=_Clock())


class TestHealthyCycle:
    async def test_sends_full_report(self, aggregator, upstream):
        result = await aggregator.run_cycle()

        assert result.ok
        (text,) = _sent_texts(upstream)
        assert text.startswith("🕒 Gold Prices Update (18/10/2026 16:40:00)")
        assert "🌍 World Gold Price: $1,234.56/oz" in text
        assert "DOJI:\n- DOJI HN lẻ:\n  Mua: 82,500,000 VND\n  Bán: 84,500,000 VND" in text
        assert "Bảo Tín Minh Châu:\n- SJC:\n  Mua: 8,300,000 VND" in text

    async def test_section_order(self, aggregator, upstream):
        await aggregator.run_cycle()
        (text,) = _sent_texts(upstream)
        assert text.index("World Gold Price") < text.index("\nDOJI:\n") < text.index("Bảo Tín Minh Châu:")

    async def test_each_source_called_once(self, aggregator, upstream):
        await aggregator.run_cycle()
        for name in ("world", "doji", "btmc", "telegram"):
            assert upstream[name].call_count == 1

    async def test_two_cycles_differ_only_in_timestamp(self, aggregator, upstream):
        await aggregator.run_cycle()
        await aggregator.run_cycle()
        first, second = _sent_texts(upstream)
        assert first.splitlines()[0] != second.splitlines()[0]
        assert first.splitlines()[1:] == second.splitlines()[1:]


class TestDegradedCycle:
    async def test_btmc_500_sends_single_warning(self, aggregator, upstream):
        upstream["btmc"].mock(return_value=httpx.Response(500))

        result = await aggregator.run_cycle()

        assert not result.ok
        assert _sent_texts(upstream) == [
            "⚠️ Error fetching BTMC prices: API Error: 500 - Internal Server Error"
        ]

    async def test_other_sources_still_fetched(self, aggregator, upstream):
        upstream["world"].mock(side_effect=httpx.ConnectError("refused"))

        await aggregator.run_cycle()

        assert upstream["doji"].call_count == 1
        assert upstream["btmc"].call_count == 1
        (text,) = _sent_texts(upstream)
        assert text == "⚠️ Error fetching World Gold prices: API Error: ConnectError"

    async def test_malformed_doji_named(self, aggregator, upstream):
        upstream["doji"].mock(return_value=httpx.Response(200, text="<Maintenance/>"))

        await aggregator.run_cycle()

        (text,) = _sent_texts(upstream)
        assert "DOJI" in text
        assert "Gold Prices Update" not in text
