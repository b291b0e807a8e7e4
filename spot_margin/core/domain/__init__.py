"""
Доменные модели spot_margin.

Immutable Pydantic модели снимков рынка, оракула и guard rails.
SpotPosition зависит от конвертации балансов и импортируется из
spot_margin.core.domain.position напрямую.
"""

from spot_margin.core.domain.guard_rails import (
    OracleGuardRails,
    PriceDivergenceGuardRails,
    ValidityGuardRails,
)
from spot_margin.core.domain.market import Market, MarketStatus, SpotBalanceType
from spot_margin.core.domain.oracle import (
    HistoricalIndexData,
    HistoricalPriceData,
    OraclePriceData,
)

__all__ = [
    # Market
    "Market",
    "MarketStatus",
    "SpotBalanceType",
    # Oracle
    "HistoricalIndexData",
    "HistoricalPriceData",
    "OraclePriceData",
    # Guard rails
    "OracleGuardRails",
    "PriceDivergenceGuardRails",
    "ValidityGuardRails",
]
