"""Shared pytest fixtures for goldpulse."""

from __future__ import annotations

import os

import pytest

from goldpulse.core.config import (
    BtmcSourceConfig,
    DojiSourceConfig,
    GoldPulseConfig,
    SourcesConfig,
    TelegramConfig,
    WorldSourceConfig,
)

LEGACY_ENV = (
    "GOLD_API_TOKEN",
    "DOJI_API_KEY",
    "BTMC_API_KEY",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No goldpulse env vars and no goldpulse.yml in the working directory."""
    for key in list(os.environ):
        if key.startswith("GOLDPULSE_") or key in LEGACY_ENV:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def full_env(clean_env):
    """All required credentials supplied through the flat legacy variables."""
    clean_env.setenv("GOLD_API_TOKEN", "gold-token")
    clean_env.setenv("DOJI_API_KEY", "doji-key")
    clean_env.setenv("BTMC_API_KEY", "btmc-key")
    clean_env.setenv("TELEGRAM_BOT_TOKEN", "test-bot-token")
    clean_env.setenv("TELEGRAM_CHAT_ID", "-100123456")
    return clean_env


@pytest.fixture
def config() -> GoldPulseConfig:
    return GoldPulseConfig(
        sources=SourcesConfig(
            world=WorldSourceConfig(api_token="gold-token"),
            doji=DojiSourceConfig(api_key="doji-key"),
            btmc=BtmcSourceConfig(api_key="btmc-key"),
        ),
        telegram=TelegramConfig(bot_token="test-bot-token", chat_id="-100123456"),
    )


@pytest.fixture
def world_json() -> dict:
    """goldapi.io XAU/USD quote."""
    return {
        "timestamp": 1792300800,
        "metal": "XAU",
        "currency": "USD",
        "exchange": "FOREXCOM",
        "symbol": "FOREXCOM:XAUUSD",
        "prev_close_price": 1230.1,
        "open_price": 1230.1,
        "low_price": 1228.4,
        "high_price": 1240.9,
        "open_time": 1792281600,
        "price": 1234.56,
        "ch": 4.46,
        "chp": 0.36,
        "ask": 1234.9,
        "bid": 1234.2,
    }


@pytest.fixture
def doji_xml() -> str:
    """DOJI feed with matching and non-matching rows in both lists."""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        "<GoldList>\n"
        "  <DGPlist>\n"
        "    <DateTime>10:30 18/10/2026</DateTime>\n"
        '    <Row Name="DOJI HN lẻ" Key="dojihanoile" Sell="84500000" Buy="82500000"/>\n'
        '    <Row Name="SJC HN bán lẻ" Key="sjchanoile" Sell="85000000" Buy="83000000"/>\n'
        '    <Row Name="DOJI HCM lẻ" Key="dojihcmle" Sell="84600000" Buy="82600000"/>\n'
        "  </DGPlist>\n"
        "  <JewelryList>\n"
        "    <DateTime>10:30 18/10/2026</DateTime>\n"
        '    <Row Name="Nữ trang 18k" Key="nutrang18k" Sell="6100000" Buy="5900000"/>\n'
        '    <Row Name="Nhẫn Tròn 9999 Hưng Thịnh Vượng" Key="nhantron9999" Sell="8450000" Buy="8350000"/>\n'
        '    <Row Name="Nữ trang 24k" Key="nutrang24k" Sell="8300000" Buy="8200000"/>\n'
        "  </JewelryList>\n"
        "</GoldList>\n"
    )


@pytest.fixture
def btmc_json() -> dict:
    """BTMC feed; each record fills the slot matching its row number."""
    return {
        "DataList": {
            "Data": [
                {
                    "@row": "1",
                    "@n_1": "VÀNG MIẾNG SJC (Vàng SJC)",
                    "@k_1": "24k",
                    "@h_1": "999.9",
                    "@pb_1": "8300000",
                    "@ps_1": "8500000",
                    "@d_1": "18/10/2026 10:25",
                },
                {
                    "@row": "2",
                    "@n_2": "NHẪN TRÒN TRƠN (Vàng Rồng Thăng Long)",
                    "@k_2": "24k",
                    "@h_2": "999.9",
                    "@pb_2": "7480000",
                    "@ps_2": "7580000",
                    "@d_2": "18/10/2026 10:25",
                },
                {
                    "@row": "3",
                    "@n_3": "TRANG SỨC BẰNG VÀNG RỒNG THĂNG LONG 99.9",
                    "@k_3": "24k",
                    "@h_3": "99.9",
                    "@pb_3": "7360000",
                    "@ps_3": "7500000",
                    "@d_3": "18/10/2026 10:25",
                },
                {
                    "@row": "4",
                    "@n_4": "VÀNG 18K",
                    "@k_4": "18k",
                    "@h_4": "75",
                    "@pb_4": "5400000",
                    "@ps_4": "5600000",
                    "@d_4": "18/10/2026 10:25",
                },
            ]
        }
    }
