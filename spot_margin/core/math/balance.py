"""
Token Balance Valuation — конвертация scaled balance ↔ token amount ↔ value.

Scaled balance хранится независимо от начисленных процентов:
    token_amount = scaled_balance * cumulative_interest / 10^(19 - decimals)

Value (стоимость в quote) в QUOTE_PRECISION:
    value = token_amount * price / 10^decimals

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Депозиты округляются вниз: депозитору никогда не начисляется лишнего
2. Займы округляются вверх: заёмщик никогда не платит меньше долга
3. Займы имеют отрицательный знак в signed-представлении
4. Strict value всегда менее выгоден владельцу, чем любая из цен (oracle/twap)
"""

from spot_margin.core.domain.market import Market, SpotBalanceType
from spot_margin.core.domain.oracle import OraclePriceData
from spot_margin.core.errors import InvalidOracle
from spot_margin.core.math.casting import cast_to_i128
from spot_margin.core.math.constants import SPOT_BALANCE_SCALE_EXPONENT
from spot_margin.core.math.int_types import I128, U32
from spot_margin.core.math.safe_math import (
    safe_add,
    safe_ceil_div,
    safe_div,
    safe_floor_div,
    safe_mul,
    safe_pow,
    safe_sub,
)


def balance_precision_increase(decimals: int) -> int:
    """
    Множитель 10^(19 - decimals) между token amount и scaled balance.

    Raises:
        MathError: Если decimals > 19
    """
    return safe_pow(10, safe_sub(SPOT_BALANCE_SCALE_EXPONENT, decimals, U32))


def token_precision(decimals: int) -> int:
    """10^decimals (i128) — делитель при переводе token amount в value."""
    return safe_pow(10, decimals, I128)


# =============================================================================
# SCALED BALANCE <-> TOKEN AMOUNT
# =============================================================================


def get_spot_asset_balance(
    token_amount: int,
    market: Market,
    balance_type: SpotBalanceType,
    round_up: bool = False,
) -> int:
    """
    Конвертация token amount в scaled balance рынка.

    balance = token_amount * 10^(19 - decimals) / cumulative_interest

    Args:
        token_amount: Количество токенов (u128, точность токена)
        market: Снимок рынка
        balance_type: Депозит или заём (выбирает cumulative interest)
        round_up: Округлить ненулевой результат вверх на единицу

    Returns:
        Scaled balance (SPOT_BALANCE_PRECISION)

    Raises:
        MathError: Переполнение или нулевой cumulative interest
    """
    precision_increase = balance_precision_increase(market.decimals)
    cumulative_interest = market.cumulative_interest(balance_type)

    balance = safe_div(safe_mul(token_amount, precision_increase), cumulative_interest)

    if round_up and balance != 0:
        balance = safe_add(balance, 1)

    return balance


def get_amount_of_tokens(
    balance: int,
    market: Market,
    balance_type: SpotBalanceType,
) -> int:
    """
    Обратная конвертация: scaled balance → token amount.

    Депозиты делятся с усечением, займы с округлением вверх.

    Examples:
        >>> # decimals=6, cumulative=1e10: 1e9 scaled = 1e6 tokens
        >>> get_amount_of_tokens(10**9, market, SpotBalanceType.DEPOSITS)
        1000000
    """
    precision_decrease = balance_precision_increase(market.decimals)
    cumulative_interest = market.cumulative_interest(balance_type)
    scaled = safe_mul(balance, cumulative_interest)

    if balance_type == SpotBalanceType.DEPOSITS:
        return safe_div(scaled, precision_decrease)
    return safe_ceil_div(scaled, precision_decrease)


def get_amount_signed(token_amount: int, balance_type: SpotBalanceType) -> int:
    """
    Знаковое количество: депозиты положительны, займы отрицательны.

    Raises:
        CastingFailure: Если token_amount не помещается в i128
    """
    amount = cast_to_i128(token_amount)
    if balance_type == SpotBalanceType.DEPOSITS:
        return amount
    return -amount


# =============================================================================
# TOKEN AMOUNT -> VALUE
# =============================================================================


def _value_of(token_amount: int, decimals: int, price: int) -> int:
    value = safe_mul(token_amount, price, I128)
    precision = token_precision(decimals)
    if value < 0:
        return safe_floor_div(value, precision, I128)
    return safe_div(value, precision, I128)


def get_strict_value(
    token_amount: int,
    decimals: int,
    oracle_price_data: OraclePriceData,
    oracle_price_twap: int,
) -> int:
    """
    Консервативная стоимость знакового количества токенов.

    Для длинной позиции (amount > 0) берётся min(price, twap), для
    короткой — max(price, twap). Отрицательная стоимость делится с
    округлением к -∞, неотрицательная — с усечением.

    Args:
        token_amount: Знаковое количество токенов (i128)
        decimals: Десятичные знаки токена
        oracle_price_data: Показание оракула (PRICE_PRECISION)
        oracle_price_twap: TWAP оракула (PRICE_PRECISION)

    Returns:
        Стоимость (QUOTE_PRECISION, i128)

    Raises:
        InvalidOracle: Если price <= 0 или twap <= 0 (при ненулевом amount)
        MathError: Переполнение
    """
    if token_amount == 0:
        return 0

    price = oracle_price_data.price
    if oracle_price_twap <= 0 or price <= 0:
        raise InvalidOracle(
            f"strict value requires positive prices: price={price}, twap={oracle_price_twap}"
        )

    if token_amount > 0:
        strict_price = min(price, oracle_price_twap)
    else:
        strict_price = max(price, oracle_price_twap)

    return _value_of(token_amount, decimals, strict_price)


def get_token_value(token_amount: int, decimals: int, oracle_price: int) -> int:
    """
    Стоимость знакового количества токенов по цене оракула.

    Правило округления как у get_strict_value; цена не валидируется.

    Examples:
        >>> get_token_value(-1_500_001, 6, 1_000_000)
        -1500001
        >>> get_token_value(-3, 1, 1)
        -1
    """
    if token_amount == 0:
        return 0
    return _value_of(token_amount, decimals, oracle_price)
