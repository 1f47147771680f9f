"""Bao Tin Minh Chau price feed: JSON records with slot-numbered keys."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from goldpulse.core.config import BtmcSourceConfig
from goldpulse.core.exceptions import ParsingError
from goldpulse.core.models import LabeledRow, LocalPriceRow, LocalPriceTable
from goldpulse.sources.base import HttpPriceSource

logger = logging.getLogger(__name__)

# A record fills exactly one of five price-line slots; the probe order
# matters when the feed repeats a field across slots.
SLOTS = (1, 2, 3, 4, 5)

NAME, KARAT, PURITY, BUY, SELL = "n", "k", "h", "pb", "ps"

BULLION_MARKER = "SJC"
TOP_KARAT = "24k"
TOP_PURITY = "999.9"
BULLION_LABEL = "SJC"
RETAIL_LABEL = "Vàng 24K (999.9)"


def resolve_field(record: dict[str, Any], prefix: str) -> Any:
    """Return the first non-empty ``@<prefix>_<slot>`` value, slots 1→5."""
    for slot in SLOTS:
        value = record.get(f"@{prefix}_{slot}")
        if value:
            return value
    return None


class BtmcAdapter:
    """Parses ``{"DataList": {"Data": [record, ...]}}``.

    A record is kept when its name contains ``SJC``, or when it is 24k gold
    of 999.9 purity. Output preserves record order.
    """

    def adapt(self, raw_data: Any) -> LocalPriceTable:
        try:
            records = raw_data["DataList"]["Data"]
        except (KeyError, TypeError) as e:
            raise ParsingError(
                "Missing DataList.Data in response", context={"reason": "DataList"}
            ) from e
        if not isinstance(records, list):
            raise ParsingError(
                f"DataList.Data must be a list, got {type(records).__name__}",
                context={"reason": "DataList"},
            )

        rows: list[LabeledRow] = []
        for record in records:
            if not isinstance(record, dict):
                continue
            name = resolve_field(record, NAME)
            if not self._keep(name, resolve_field(record, KARAT), resolve_field(record, PURITY)):
                continue
            label = BULLION_LABEL if self._is_bullion(name) else RETAIL_LABEL
            rows.append(
                LabeledRow(
                    row=LocalPriceRow(
                        display_name=str(name or ""),
                        buy_price=resolve_field(record, BUY),
                        sell_price=resolve_field(record, SELL),
                    ),
                    label=label,
                )
            )

        logger.debug("Found %d BTMC price types", len(rows))
        return LocalPriceTable(source="BTMC", rows=rows)

    @staticmethod
    def _is_bullion(name: Any) -> bool:
        return isinstance(name, str) and BULLION_MARKER in name

    @classmethod
    def _keep(cls, name: Any, karat: Any, purity: Any) -> bool:
        return cls._is_bullion(name) or (karat == TOP_KARAT and purity == TOP_PURITY)


class BtmcSource(HttpPriceSource):
    """Fetches BTMC SJC bullion and 24k retail prices."""

    label = "BTMC"
    generic_message = "Failed to fetch BTMC prices"

    def __init__(
        self,
        config: BtmcSourceConfig,
        client: httpx.AsyncClient,
        adapter: BtmcAdapter | None = None,
    ) -> None:
        super().__init__(client, adapter or BtmcAdapter())
        self._config = config

    async def _request(self) -> httpx.Response:
        return await self._client.get(
            self._config.url, params={"key": self._config.api_key}
        )
