"""
Core math modules для spot_margin

Целочисленные примитивы фиксированной ширины без зависимостей от доменных
моделей. Модули, работающие с Market (balance, interest, twap), импортируются
по полному пути.
"""

# Integer types
from spot_margin.core.math.int_types import (
    I8,
    I16,
    I32,
    I64,
    I128,
    U8,
    U16,
    U32,
    U64,
    U128,
    IntType,
)

# Safe Math
from spot_margin.core.math.safe_math import (
    safe_add,
    safe_ceil_div,
    safe_div,
    safe_floor_div,
    safe_mul,
    safe_pow,
    safe_rem_euclid,
    safe_sub,
)

# Wide Integers (U192/U256 — классы значений, не дескрипторы int_types)
from spot_margin.core.math.bignumber import U192, U256, WideUInt

# Casting
from spot_margin.core.math.casting import (
    cast,
    cast_to_i64,
    cast_to_i128,
    cast_to_u32,
    cast_to_u64,
    cast_to_u128,
    try_cast,
)

# Price Standardization
from spot_margin.core.math.price import (
    PositionDirection,
    force_resolve_limit_price,
    is_base_asset_amt_multiple_of_order_step_size,
    resolve_limit_price,
    standardize_base_asset_amt,
    standardize_base_asset_amt_ceil,
    standardize_price,
    standardize_price_i64,
)

__all__ = [
    # Integer types
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "IntType",
    # Safe Math
    "safe_add",
    "safe_ceil_div",
    "safe_div",
    "safe_floor_div",
    "safe_mul",
    "safe_pow",
    "safe_rem_euclid",
    "safe_sub",
    # Wide Integers
    "U192",
    "U256",
    "WideUInt",
    # Casting
    "cast",
    "cast_to_i64",
    "cast_to_i128",
    "cast_to_u32",
    "cast_to_u64",
    "cast_to_u128",
    "try_cast",
    # Price Standardization
    "PositionDirection",
    "force_resolve_limit_price",
    "is_base_asset_amt_multiple_of_order_step_size",
    "resolve_limit_price",
    "standardize_base_asset_amt",
    "standardize_base_asset_amt_ceil",
    "standardize_price",
    "standardize_price_i64",
]
