"""Integration test fixtures: real sources and notifier, mocked transport."""

from __future__ import annotations

import httpx
import pytest
import respx

WORLD_URL = "https://www.goldapi.io/api/XAU/USD"
DOJI_URL = "http://giavang.doji.vn/api/giavang/"
BTMC_URL = "http://api.btmc.vn/api/BTMCAPI/getpricebtmc"
TELEGRAM_URL = "https://api.telegram.org/bottest-bot-token/sendMessage"


@pytest.fixture
def upstream(world_json, doji_xml, btmc_json):
    """All four endpoints mocked with healthy responses.

    Yields the respx router; tests override individual routes as needed.
    """
    with respx.mock(assert_all_called=False) as router:
        router.get(WORLD_URL, name="world").mock(
            return_value=httpx.Response(200, json=world_json)
        )
        router.get(DOJI_URL, name="doji").mock(
            return_value=httpx.Response(200, content=doji_xml.encode("utf-8"))
        )
        router.get(BTMC_URL, name="btmc").mock(
            return_value=httpx.Response(200, json=btmc_json)
        )
        router.post(TELEGRAM_URL, name="telegram").mock(
            return_value=httpx.Response(200, json={"ok": True, "result": {"message_id": 7}})
        )
        yield router
