"""
FX rate provider protocol for type hints.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol


class FxRateProvider(Protocol):
    async def get_rate(self, base: str, quote: str) -> Optional[Decimal]:
        """Units of `quote` per one unit of `base`, or None if unavailable"""
        ...
