"""World spot price from goldapi.io."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from goldpulse.core.config import WorldSourceConfig
from goldpulse.core.exceptions import ParsingError
from goldpulse.core.models import WorldQuote
from goldpulse.sources.base import HttpPriceSource

logger = logging.getLogger(__name__)


class GoldApiAdapter:
    """Parses a goldapi.io quote.

    The endpoint returns a flat object (``price``, ``ask``, ``bid``,
    ``prev_close_price``, ...); only ``price`` is required.
    """

    def adapt(self, raw_data: Any) -> WorldQuote:
        if not isinstance(raw_data, dict):
            raise ParsingError(
                f"Expected a JSON object, got {type(raw_data).__name__}",
                context={"reason": "not_an_object"},
            )
        price = raw_data.get("price")
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise ParsingError(
                f"Missing or non-numeric price: {price!r}",
                context={"reason": "price"},
            )
        return WorldQuote(
            price=float(price),
            metal=raw_data.get("metal") or "XAU",
            currency=raw_data.get("currency") or "USD",
            timestamp=raw_data.get("timestamp"),
        )


class WorldGoldSource(HttpPriceSource):
    """Fetches the XAU/USD spot price with a token-authenticated GET."""

    label = "World Gold"
    generic_message = "Failed to fetch world gold price"

    def __init__(
        self,
        config: WorldSourceConfig,
        client: httpx.AsyncClient,
        adapter: GoldApiAdapter | None = None,
    ) -> None:
        super().__init__(client, adapter or GoldApiAdapter())
        self._config = config

    async def _request(self) -> httpx.Response:
        return await self._client.get(
            self._config.url,
            headers={
                "x-access-token": self._config.api_token,
                "Content-Type": "application/json",
            },
        )
