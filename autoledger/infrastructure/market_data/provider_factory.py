"""
FX provider factory (configured by FX_PROVIDER)
"""

from __future__ import annotations

from decimal import Decimal

from autoledger.config import settings
from autoledger.infrastructure.market_data.provider_chain import FxProviderChain, NamedProvider
from autoledger.infrastructure.market_data.static_provider import StaticFxRateProvider


def get_fx_provider() -> FxProviderChain:
    """
    Build the FX provider chain.

    The static fallback is always last so snapshots never lack a rate.
    """
    static = StaticFxRateProvider({("EUR", "USD"): Decimal(str(settings.EUR_USD_FALLBACK_RATE))})
    providers = []

    if settings.FX_PROVIDER.lower() == "yfinance":
        from autoledger.infrastructure.market_data.yfinance_provider import YFinanceFxRateProvider

        providers.append(NamedProvider("yfinance", YFinanceFxRateProvider()))

    providers.append(NamedProvider("static", static))
    return FxProviderChain(providers)
