"""
Static FX rates (configured fallback)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional, Tuple


class StaticFxRateProvider:
    """Fixed rate table; inverse pairs are derived"""

    def __init__(self, rates: Dict[Tuple[str, str], Decimal]):
        self.rates = {(b.upper(), q.upper()): Decimal(str(r)) for (b, q), r in rates.items()}

    async def get_rate(self, base: str, quote: str) -> Optional[Decimal]:
        base, quote = base.upper(), quote.upper()
        if base == quote:
            return Decimal("1")
        if (base, quote) in self.rates:
            return self.rates[(base, quote)]
        inverse = self.rates.get((quote, base))
        if inverse:
            return Decimal("1") / inverse
        return None
