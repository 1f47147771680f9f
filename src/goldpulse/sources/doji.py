"""DOJI price feed: XML with a bullion list and a jewelry list."""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup, Tag

from goldpulse.core.config import DojiSourceConfig
from goldpulse.core.exceptions import ParsingError
from goldpulse.core.models import LabeledRow, LocalPriceRow, LocalPriceTable
from goldpulse.sources.base import HttpPriceSource

logger = logging.getLogger(__name__)

BRAND_MARKER = "DOJI"
PURITY_MARKERS = ("24k", "9999")


class DojiAdapter:
    """Parses the ``<GoldList>`` document.

    Expected shape::

        <GoldList>
          <DGPlist>
            <DateTime>...</DateTime>
            <Row Name="DOJI HN lẻ" Key="dojihanoile" Sell="..." Buy="..."/>
          </DGPlist>
          <JewelryList>
            <Row Name="Nhẫn Tròn 9999 Hưng Thịnh Vượng" Key="..." .../>
          </JewelryList>
        </GoldList>

    Bullion rows are kept when their name carries the brand marker, jewelry
    rows when it carries a 24k / 9999 purity token. Bullion rows come first.
    """

    def adapt(self, raw_data: str | bytes) -> LocalPriceTable:
        soup = BeautifulSoup(raw_data, "xml")
        root = soup.find("GoldList")
        if not isinstance(root, Tag):
            raise ParsingError("No <GoldList> root element", context={"reason": "GoldList"})

        bullion = [
            row for row in self._rows(root, "DGPlist")
            if BRAND_MARKER in row.display_name
        ]
        jewelry = [
            row for row in self._rows(root, "JewelryList")
            if any(marker in row.display_name for marker in PURITY_MARKERS)
        ]
        logger.debug(
            "DOJI: %d bullion rows, %d jewelry rows kept", len(bullion), len(jewelry)
        )
        return LocalPriceTable(
            source="DOJI",
            rows=[LabeledRow(row=row) for row in bullion + jewelry],
        )

    @staticmethod
    def _rows(root: Tag, collection: str) -> list[LocalPriceRow]:
        # Only the first collection element is read
        node = root.find(collection)
        if not isinstance(node, Tag):
            raise ParsingError(
                f"No <{collection}> element", context={"reason": collection}
            )
        rows: list[LocalPriceRow] = []
        for row in node.find_all("Row"):
            rows.append(
                LocalPriceRow(
                    display_name=row.get("Name", ""),
                    key=row.get("Key"),
                    buy_price=row.get("Buy", ""),
                    sell_price=row.get("Sell", ""),
                )
            )
        return rows


class DojiSource(HttpPriceSource):
    """Fetches DOJI bullion and 24k jewelry prices."""

    label = "DOJI"
    generic_message = "Failed to fetch DOJI prices"

    def __init__(
        self,
        config: DojiSourceConfig,
        client: httpx.AsyncClient,
        adapter: DojiAdapter | None = None,
    ) -> None:
        super().__init__(client, adapter or DojiAdapter())
        self._config = config

    async def _request(self) -> httpx.Response:
        return await self._client.get(
            self._config.url, params={"api_key": self._config.api_key}
        )

    def _decode(self, response: httpx.Response) -> bytes:
        # Raw bytes so the parser honours the encoding declaration
        return response.content
