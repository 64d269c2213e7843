"""
Provider chain - try primary, then fallbacks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from autoledger.infrastructure.market_data.types import FxRateProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedProvider:
    name: str
    provider: FxRateProvider


class FxProviderChain:
    """First provider returning a positive rate wins"""

    def __init__(self, providers: List[NamedProvider]):
        if not providers:
            raise ValueError("FxProviderChain needs at least one provider")
        self.providers = providers
        self.last_sources: Dict[str, str] = {}

    async def get_rate(self, base: str, quote: str) -> Optional[Decimal]:
        pair = f"{base.upper()}/{quote.upper()}"
        for named in self.providers:
            try:
                rate = await named.provider.get_rate(base, quote)
            except Exception as exc:
                logger.warning(f"FX provider {named.name} failed for {pair}: {exc}")
                continue
            if rate is not None and rate > 0:
                self.last_sources[pair] = named.name
                return rate
        logger.error(f"No FX rate available for {pair}")
        return None
