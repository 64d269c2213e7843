from decimal import Decimal

import pandas as pd
import pytest

from autoledger.config import settings
from autoledger.infrastructure.market_data import yfinance_provider
from autoledger.infrastructure.market_data.provider_chain import FxProviderChain, NamedProvider
from autoledger.infrastructure.market_data.provider_factory import get_fx_provider
from autoledger.infrastructure.market_data.static_provider import StaticFxRateProvider
from autoledger.infrastructure.market_data.yfinance_provider import YFinanceFxRateProvider


class BrokenProvider:
    async def get_rate(self, base, quote):
        raise ConnectionError("offline")


class EmptyProvider:
    async def get_rate(self, base, quote):
        return None


@pytest.mark.asyncio
async def test_static_provider_direct_inverse_and_identity():
    provider = StaticFxRateProvider({("EUR", "USD"): Decimal("1.25")})

    assert await provider.get_rate("eur", "usd") == Decimal("1.25")
    assert await provider.get_rate("USD", "EUR") == Decimal("0.8")
    assert await provider.get_rate("EUR", "EUR") == Decimal("1")
    assert await provider.get_rate("EUR", "GBP") is None


@pytest.mark.asyncio
async def test_chain_falls_back_in_order():
    chain = FxProviderChain(
        [
            NamedProvider("broken", BrokenProvider()),
            NamedProvider("empty", EmptyProvider()),
            NamedProvider("static", StaticFxRateProvider({("EUR", "USD"): Decimal("1.08")})),
        ]
    )

    assert await chain.get_rate("EUR", "USD") == Decimal("1.08")
    assert chain.last_sources["EUR/USD"] == "static"


@pytest.mark.asyncio
async def test_chain_returns_none_when_exhausted():
    chain = FxProviderChain([NamedProvider("empty", EmptyProvider())])

    assert await chain.get_rate("EUR", "USD") is None


def test_chain_requires_providers():
    with pytest.raises(ValueError):
        FxProviderChain([])


@pytest.mark.asyncio
async def test_factory_static_only(monkeypatch):
    monkeypatch.setattr(settings, "FX_PROVIDER", "static")
    monkeypatch.setattr(settings, "EUR_USD_FALLBACK_RATE", 1.2)

    chain = get_fx_provider()

    assert [p.name for p in chain.providers] == ["static"]
    assert await chain.get_rate("EUR", "USD") == Decimal("1.2")


def test_factory_yfinance_first(monkeypatch):
    monkeypatch.setattr(settings, "FX_PROVIDER", "yfinance")

    chain = get_fx_provider()

    assert [p.name for p in chain.providers] == ["yfinance", "static"]


@pytest.mark.asyncio
async def test_yfinance_provider_uses_last_close_and_caches(monkeypatch):
    calls = []

    class FakeTicker:
        def __init__(self, symbol):
            calls.append(symbol)

        def history(self, **kwargs):
            return pd.DataFrame({"Close": [1.081, 1.0925]})

    monkeypatch.setattr(yfinance_provider.yf, "Ticker", FakeTicker)
    provider = YFinanceFxRateProvider()

    assert await provider.get_rate("EUR", "USD") == Decimal("1.092500")
    assert await provider.get_rate("EUR", "USD") == Decimal("1.092500")
    assert calls == ["EURUSD=X"]


@pytest.mark.asyncio
async def test_yfinance_provider_empty_history(monkeypatch):
    class FakeTicker:
        def __init__(self, symbol):
            pass

        def history(self, **kwargs):
            return pd.DataFrame()

    monkeypatch.setattr(yfinance_provider.yf, "Ticker", FakeTicker)

    assert await YFinanceFxRateProvider(retries=0).get_rate("EUR", "USD") is None
