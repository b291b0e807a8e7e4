"""
JSON Schema контракты входных снимков ядра.
"""

from spot_margin.core.contracts.validators import (
    ContractValidator,
    MarketSnapshotValidator,
    OracleGuardRailsValidator,
    OraclePriceDataValidator,
    SchemaLoader,
    load_guard_rails,
    load_market,
    load_oracle_price_data,
    validate_market_snapshot,
    validate_oracle_guard_rails,
    validate_oracle_price_data,
)

__all__ = [
    # Loader / validators
    "ContractValidator",
    "MarketSnapshotValidator",
    "OracleGuardRailsValidator",
    "OraclePriceDataValidator",
    "SchemaLoader",
    # Convenience
    "load_guard_rails",
    "load_market",
    "load_oracle_price_data",
    "validate_market_snapshot",
    "validate_oracle_guard_rails",
    "validate_oracle_price_data",
]
