"""
Oracle: классификация валидности, расхождение mark/oracle, TWAP оракула,
нормализация показаний feed.
"""

from spot_margin.oracle.normalize import (
    OracleSource,
    get_oracle_price_data,
    normalize_stablecoin_price,
    scale_feed_price,
)
from spot_margin.oracle.twap_updater import OracleTwapConfig, OracleTwapUpdater
from spot_margin.oracle.validity import (
    ORACLE_VALIDITY_ACCEPTANCE,
    Action,
    OracleStatus,
    OracleValidity,
    block_action,
    calculate_oracle_twap_5min_mark_spread_pct,
    get_oracle_status,
    is_oracle_mark_too_divergent,
    is_oracle_valid_for_action,
    oracle_validity,
    validate_oracle,
)

__all__ = [
    # Validity
    "ORACLE_VALIDITY_ACCEPTANCE",
    "Action",
    "OracleStatus",
    "OracleValidity",
    "block_action",
    "calculate_oracle_twap_5min_mark_spread_pct",
    "get_oracle_status",
    "is_oracle_mark_too_divergent",
    "is_oracle_valid_for_action",
    "oracle_validity",
    "validate_oracle",
    # TWAP
    "OracleTwapConfig",
    "OracleTwapUpdater",
    # Normalization
    "OracleSource",
    "get_oracle_price_data",
    "normalize_stablecoin_price",
    "scale_feed_price",
]
