"""Price sources: one world spot feed and two local shop feeds.

- ``WorldGoldSource``: goldapi.io XAU/USD spot price (JSON, token header).
- ``DojiSource``: DOJI bullion + jewelry lists (XML, api_key parameter).
- ``BtmcSource``: Bao Tin Minh Chau records (JSON with slot-numbered keys).

Every source's ``fetch()`` raises only ``SourceFailure``.
"""

from goldpulse.sources.base import HttpPriceSource, PriceSource, SourceAdapter
from goldpulse.sources.btmc import BtmcAdapter, BtmcSource, resolve_field
from goldpulse.sources.doji import DojiAdapter, DojiSource
from goldpulse.sources.world import GoldApiAdapter, WorldGoldSource

__all__ = [
    # Protocols
    "PriceSource",
    "SourceAdapter",
    "HttpPriceSource",
    # World
    "GoldApiAdapter",
    "WorldGoldSource",
    # DOJI
    "DojiAdapter",
    "DojiSource",
    # BTMC
    "BtmcAdapter",
    "BtmcSource",
    "resolve_field",
]
