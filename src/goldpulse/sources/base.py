"""Price source protocol and the shared fetch/translate skeleton.

Architecture
------------
Each source splits into two parts, mirroring one another:

    HTTP response → SourceAdapter → WorldQuote | LocalPriceTable

- **SourceAdapter** turns a raw payload (JSON dict, XML text) into the
  normalized value. Adapters are pure and raise ``ParsingError`` on
  unexpected shapes.

- **PriceSource** is what the aggregator depends on: a label plus an async
  ``fetch()``. ``HttpPriceSource`` implements it once for all three feeds and
  guarantees that nothing but ``SourceFailure`` leaves ``fetch()``.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Protocol, runtime_checkable

import httpx

from goldpulse.core.exceptions import SourceFailure
from goldpulse.core.models import LocalPriceTable, WorldQuote

logger = logging.getLogger(__name__)

PriceValue = WorldQuote | LocalPriceTable


@runtime_checkable
class SourceAdapter(Protocol):
    """Transforms one source's raw payload into its normalized value."""

    def adapt(self, raw_data: Any) -> PriceValue: ...


@runtime_checkable
class PriceSource(Protocol):
    """Consumer-facing interface of a price source."""

    label: str

    async def fetch(self) -> PriceValue:
        """Fetch and normalize the current prices.

        Raises
        ------
        SourceFailure
            On any transport, status or payload problem. No other exception
            type escapes.
        """
        ...


class HttpPriceSource:
    """One GET request, one adapter call, errors folded into SourceFailure.

    Subclasses set ``label`` and ``generic_message`` and implement
    ``_request`` (and ``_decode`` when the body is not JSON). The HTTP client
    is owned by the caller.
    """

    label: ClassVar[str] = "unknown"
    generic_message: ClassVar[str] = "Failed to fetch prices"

    def __init__(self, client: httpx.AsyncClient, adapter: SourceAdapter) -> None:
        self._client = client
        self._adapter = adapter

    async def _request(self) -> httpx.Response:
        raise NotImplementedError

    def _decode(self, response: httpx.Response) -> Any:
        """Extract the raw payload handed to the adapter."""
        return response.json()

    async def fetch(self) -> PriceValue:
        try:
            logger.debug("Making request to %s API...", self.label)
            response = await self._request()
            response.raise_for_status()
            logger.debug("%s API response received", self.label)
            return self._adapter.adapt(self._decode(response))
        except SourceFailure:
            raise
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            reason = e.response.reason_phrase
            logger.error("%s API error: %s - %s", self.label, status, reason)
            raise SourceFailure(
                self.label,
                f"API Error: {status} - {reason}",
                cause=e,
                context={"status_code": status},
            ) from e
        except httpx.RequestError as e:
            logger.error("%s API request failed: %s", self.label, type(e).__name__)
            raise SourceFailure(
                self.label,
                f"API Error: {type(e).__name__}",
                cause=e,
                context={"status_code": None},
            ) from e
        except Exception as e:
            logger.error("%s: %s (%s)", self.label, self.generic_message, e)
            raise SourceFailure(self.label, self.generic_message, cause=e) from e
