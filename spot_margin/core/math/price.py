"""
Price Standardization — округление цен и размеров к tick/step.

Цены в PRICE_PRECISION, размеры в BASE_PRECISION.

Направление округления цены:
- LONG     → вниз до кратного tick (покупатель не переплачивает)
- SHORT    → вверх до кратного tick (продавец не недополучает)
- TWO_WAY  → цена + полный tick при ненулевом остатке
Цена 0 (market order без лимита) проходит без изменений.
"""

from enum import Enum
from typing import Optional

from spot_margin.core.errors import (
    InvalidOracleSpreadLimitPrice,
    OracleNotFound,
    UnableToGetLimitPrice,
)
from spot_margin.core.math.casting import cast_to_u64
from spot_margin.core.math.int_types import I64, U64
from spot_margin.core.math.safe_math import safe_add, safe_rem_euclid, safe_sub


class PositionDirection(str, Enum):
    """Направление позиции/ордера."""

    LONG = "long"
    SHORT = "short"
    TWO_WAY = "two_way"

    def opposite(self) -> "PositionDirection":
        """LONG ↔ SHORT, TWO_WAY остаётся TWO_WAY."""
        if self == PositionDirection.LONG:
            return PositionDirection.SHORT
        if self == PositionDirection.SHORT:
            return PositionDirection.LONG
        return PositionDirection.TWO_WAY


# =============================================================================
# PRICE
# =============================================================================


def _standardize(price: int, tick_size: int, direction: PositionDirection, int_type) -> int:
    if price == 0:
        return 0

    remainder = safe_rem_euclid(price, tick_size, int_type)
    if remainder == 0:
        return price

    if direction == PositionDirection.LONG:
        return safe_sub(price, remainder, int_type)
    if direction == PositionDirection.SHORT:
        return safe_add(price, safe_sub(tick_size, remainder, int_type), int_type)
    return safe_add(price, tick_size, int_type)


def standardize_price(price: int, tick_size: int, direction: PositionDirection) -> int:
    """
    Округление беззнаковой цены (u64) к tick_size.

    Raises:
        MathError: tick_size == 0 или переполнение

    Examples:
        >>> standardize_price(1_234_567, 1_000, PositionDirection.LONG)
        1234000
        >>> standardize_price(1_234_567, 1_000, PositionDirection.SHORT)
        1235000
    """
    return _standardize(price, tick_size, direction, U64)


def standardize_price_i64(price: int, tick_size: int, direction: PositionDirection) -> int:
    """
    Округление знаковой цены (i64) к tick_size.

    Остаток евклидов, поэтому для отрицательной цены LONG тоже округляет к -∞:
    standardize_price_i64(-1_234_567, 1_000, LONG) == -1_235_000.
    """
    return _standardize(price, tick_size, direction, I64)


# =============================================================================
# BASE ASSET AMOUNT
# =============================================================================


def standardize_base_asset_amt(base_asset_amt: int, order_step_size: int) -> int:
    """Округление размера вниз до кратного order_step_size."""
    remainder = safe_rem_euclid(base_asset_amt, order_step_size, U64)
    return safe_sub(base_asset_amt, remainder, U64)


def standardize_base_asset_amt_ceil(base_asset_amt: int, order_step_size: int) -> int:
    """Округление размера вверх до кратного order_step_size."""
    remainder = safe_rem_euclid(base_asset_amt, order_step_size, U64)
    if remainder == 0:
        return base_asset_amt
    return safe_sub(safe_add(base_asset_amt, order_step_size, U64), remainder, U64)


def is_base_asset_amt_multiple_of_order_step_size(base_asset_amt: int, order_step_size: int) -> bool:
    """Кратен ли размер order_step_size."""
    return safe_rem_euclid(base_asset_amt, order_step_size, U64) == 0


# =============================================================================
# LIMIT PRICE
# =============================================================================


def resolve_limit_price(
    price: int,
    direction: PositionDirection,
    tick_size: int,
    oracle_price_offset: int = 0,
    last_acceptable_oracle_price: Optional[int] = None,
    fallback_price: Optional[int] = None,
) -> Optional[int]:
    """
    Лимитная цена ордера.

    1. oracle_price_offset != 0 → oracle + offset, округлённая по направлению
    2. price == 0 → округлённая fallback_price (или None, если её нет)
    3. иначе → price как есть

    Args:
        price: Лимитная цена ордера (u64, 0 = без лимита)
        direction: Направление ордера (выбирает округление)
        tick_size: Tick рынка
        oracle_price_offset: Смещение от цены оракула (i32)
        last_acceptable_oracle_price: Последняя допустимая цена оракула (i64)
        fallback_price: Цена для ордеров без лимита

    Raises:
        OracleNotFound: Offset-ордер без цены оракула
        InvalidOracleSpreadLimitPrice: oracle + offset <= 0
        MathError: tick_size == 0 или переполнение
    """
    if oracle_price_offset != 0:
        if last_acceptable_oracle_price is None:
            raise OracleNotFound("oracle price required for oracle offset order")

        limit_price = safe_add(last_acceptable_oracle_price, oracle_price_offset, I64)
        if limit_price <= 0:
            raise InvalidOracleSpreadLimitPrice(
                f"limit price must be positive, got {limit_price}"
            )
        return standardize_price(cast_to_u64(limit_price), tick_size, direction)

    if price == 0:
        if fallback_price is None:
            return None
        return standardize_price(fallback_price, tick_size, direction)

    return price


def force_resolve_limit_price(
    price: int,
    direction: PositionDirection,
    tick_size: int,
    oracle_price_offset: int = 0,
    last_acceptable_oracle_price: Optional[int] = None,
    fallback_price: Optional[int] = None,
) -> int:
    """
    Как resolve_limit_price, но отсутствие цены — ошибка.

    Raises:
        UnableToGetLimitPrice: Цену определить невозможно
    """
    limit_price = resolve_limit_price(
        price,
        direction,
        tick_size,
        oracle_price_offset=oracle_price_offset,
        last_acceptable_oracle_price=last_acceptable_oracle_price,
        fallback_price=fallback_price,
    )
    if limit_price is None:
        raise UnableToGetLimitPrice("order has no limit price and no fallback price")
    return limit_price
