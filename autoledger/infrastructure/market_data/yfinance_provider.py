"""
YFinance FX Rate Provider
Async-safe Yahoo Finance lookups for currency pairs (e.g. EURUSD=X)
"""

import asyncio
import logging
import random
import time
from decimal import Decimal
from typing import Dict, Optional

import yfinance as yf

logger = logging.getLogger(__name__)


class YFinanceFxRateProvider:
    """
    Yahoo Finance FX provider
    Async-safe via thread offloading
    """

    def __init__(self, cache_ttl_seconds: int = 900, retries: int = 2):
        self.cache_ttl_seconds = cache_ttl_seconds
        self.retries = retries
        self._cache: Dict[str, tuple[float, Decimal]] = {}

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    @staticmethod
    def ticker_symbol(base: str, quote: str) -> str:
        return f"{base.upper()}{quote.upper()}=X"

    async def _history(self, ticker: yf.Ticker, **kwargs):
        """
        Async-safe wrapper around yfinance history()
        """
        return await asyncio.to_thread(ticker.history, **kwargs)

    async def _history_with_retry(self, ticker: yf.Ticker, **kwargs):
        """
        Retry wrapper around history() to handle transient failures.
        """
        last_exc: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                return await self._history(ticker, **kwargs)
            except Exception as exc:
                last_exc = exc
                await asyncio.sleep(0.4 * (2 ** attempt) + random.random() * 0.2)
        raise last_exc

    def _cache_get(self, key: str) -> Optional[Decimal]:
        cached = self._cache.get(key)
        if not cached:
            return None
        ts, value = cached
        if time.time() - ts > self.cache_ttl_seconds:
            return None
        return value

    def _cache_set(self, key: str, value: Decimal) -> None:
        self._cache[key] = (time.time(), value)

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    async def get_rate(self, base: str, quote: str) -> Optional[Decimal]:
        if base.upper() == quote.upper():
            return Decimal("1")

        symbol = self.ticker_symbol(base, quote)
        cached = self._cache_get(symbol)
        if cached is not None:
            return cached

        try:
            df = await self._history_with_retry(yf.Ticker(symbol), period="5d", interval="1d")
        except Exception as exc:
            logger.warning(f"yfinance rate lookup failed for {symbol}: {exc}")
            return None

        if df is None or df.empty:
            logger.warning(f"yfinance returned no data for {symbol}")
            return None

        close = df["Close"].dropna()
        if close.empty:
            return None

        rate = Decimal(str(float(close.iloc[-1]))).quantize(Decimal("0.000001"))
        if rate <= 0:
            return None

        self._cache_set(symbol, rate)
        return rate
