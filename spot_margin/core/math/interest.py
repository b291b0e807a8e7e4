"""
Utilization Interest Model — утилизация пула и начисление процентов.

Ставка займа — кусочно-линейная функция утилизации с изломом (kink) в
optimal_utilization:

    util <= kink:  rate = util * (optimal_rate * P / kink) / P
    util >  kink:  slope = (max_rate - optimal_rate) * P / (P - kink)
                   rate  = optimal_rate + (util - kink) * slope / P

Начисление за период elapsed секунд:

    period_borrow_rate  = rate * elapsed
    period_deposit_rate = period_borrow_rate * util / P
    borrows_interest    = cum_borrow  * period_borrow_rate  / ONE_YEAR / RATE_P + 1
    deposits_interest   = cum_deposit * period_deposit_rate / ONE_YEAR / RATE_P

Точность: utilization в SPOT_UTILIZATION_PRECISION (1e6 = 100%),
ставки в SPOT_RATE_PRECISION (1e6 = 100% годовых),
cumulative interest в SPOT_CUMULATIVE_INTEREST_PRECISION (1e10 = 1.0).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. deposits == 0 и borrows == 0 → utilization = 0
2. deposits == 0 и borrows > 0 → utilization = 100% (сатурация, не ошибка)
3. utilization == 0 → начисление нулевое
4. borrows_interest >= 1 при ненулевой утилизации (+1 в пользу протокола)
5. Кумулятивные множители после update_cumulative_interest не убывают
"""

from dataclasses import dataclass

from spot_margin.core.domain.market import Market, SpotBalanceType
from spot_margin.core.errors import UnableToCastUnixTimestamp
from spot_margin.core.math.balance import balance_precision_increase, get_amount_of_tokens
from spot_margin.core.math.casting import try_cast
from spot_margin.core.math.constants import (
    ONE_YEAR,
    SPOT_RATE_PRECISION,
    SPOT_UTILIZATION_PRECISION,
)
from spot_margin.core.math.int_types import U64
from spot_margin.core.math.safe_math import safe_add, safe_div, safe_mul, safe_sub


@dataclass(frozen=True)
class InterestAccumulated:
    """
    Приращения кумулятивных множителей за период.

    Attributes:
        deposits_interest: Приращение cumulative_deposit_interest
        borrows_interest: Приращение cumulative_borrow_interest
    """

    deposits_interest: int
    borrows_interest: int


# =============================================================================
# UTILIZATION
# =============================================================================


def calculate_utilization(deposit_token_amount: int, borrow_token_amount: int) -> int:
    """
    Утилизация пула: borrows * P / deposits.

    Examples:
        >>> calculate_utilization(1_000_000, 800_000)
        800000
        >>> calculate_utilization(0, 0)
        0
        >>> calculate_utilization(0, 1)
        1000000
    """
    numerator = safe_mul(borrow_token_amount, SPOT_UTILIZATION_PRECISION)
    if deposit_token_amount == 0:
        return 0 if borrow_token_amount == 0 else SPOT_UTILIZATION_PRECISION
    return safe_div(numerator, deposit_token_amount)


def calculate_per_market_utilization(market: Market) -> int:
    """Утилизация рынка по token amounts (депозиты вниз, займы вверх)."""
    deposits = get_amount_of_tokens(market.deposit_balance, market, SpotBalanceType.DEPOSITS)
    borrows = get_amount_of_tokens(market.borrow_balance, market, SpotBalanceType.BORROWS)
    return calculate_utilization(deposits, borrows)


# =============================================================================
# RATE CURVE
# =============================================================================


def calculate_borrow_rate(market: Market, utilization: int) -> int:
    """
    Мгновенная годовая ставка займа (SPOT_RATE_PRECISION).

    Args:
        market: Рынок (параметры кривой)
        utilization: Утилизация (SPOT_UTILIZATION_PRECISION)

    Raises:
        MathError: Переполнение или нулевой kink при утилизации ниже kink
    """
    optimal_utilization = market.optimal_utilization
    optimal_borrow_rate = market.optimal_borrow_rate

    if utilization > optimal_utilization:
        surplus_utilization = safe_sub(utilization, optimal_utilization)
        slope = safe_div(
            safe_mul(
                safe_sub(market.max_borrow_rate, optimal_borrow_rate),
                SPOT_UTILIZATION_PRECISION,
            ),
            safe_sub(SPOT_UTILIZATION_PRECISION, optimal_utilization),
        )
        return safe_add(
            optimal_borrow_rate,
            safe_div(safe_mul(surplus_utilization, slope), SPOT_UTILIZATION_PRECISION),
        )

    slope = safe_div(safe_mul(optimal_borrow_rate, SPOT_UTILIZATION_PRECISION), optimal_utilization)
    return safe_div(safe_mul(utilization, slope), SPOT_UTILIZATION_PRECISION)


def calculate_deposit_rate(market: Market, utilization: int) -> int:
    """Мгновенная годовая ставка депозита: borrow_rate * utilization / P."""
    borrow_rate = calculate_borrow_rate(market, utilization)
    return safe_div(safe_mul(borrow_rate, utilization), SPOT_UTILIZATION_PRECISION)


# =============================================================================
# ACCRUAL
# =============================================================================


def _elapsed_since_last_interest(market: Market, now_ts: int) -> int:
    now = try_cast(now_ts, U64)
    if now is None:
        raise UnableToCastUnixTimestamp(f"cannot cast unix timestamp {now_ts} to u64")
    return safe_sub(now, market.last_interest_ts, U64)


def calculate_accumulated_interest(market: Market, now_ts: int) -> InterestAccumulated:
    """
    Приращения кумулятивных множителей с last_interest_ts до now_ts.

    Args:
        market: Снимок рынка
        now_ts: Текущее unix-время (секунды)

    Returns:
        InterestAccumulated

    Raises:
        UnableToCastUnixTimestamp: now_ts отрицателен или не помещается в u64
        MathError: now_ts < last_interest_ts или переполнение
    """
    utilization = calculate_per_market_utilization(market)

    if utilization == 0:
        return InterestAccumulated(deposits_interest=0, borrows_interest=0)

    borrow_rate = calculate_borrow_rate(market, utilization)
    elapsed = _elapsed_since_last_interest(market, now_ts)

    period_borrow_rate = safe_mul(borrow_rate, elapsed)
    period_deposit_rate = safe_div(
        safe_mul(period_borrow_rate, utilization), SPOT_UTILIZATION_PRECISION
    )

    borrows_interest = safe_add(
        safe_div(
            safe_div(safe_mul(market.cumulative_borrow_interest, period_borrow_rate), ONE_YEAR),
            SPOT_RATE_PRECISION,
        ),
        1,
    )
    deposits_interest = safe_div(
        safe_div(safe_mul(market.cumulative_deposit_interest, period_deposit_rate), ONE_YEAR),
        SPOT_RATE_PRECISION,
    )

    return InterestAccumulated(
        deposits_interest=deposits_interest,
        borrows_interest=borrows_interest,
    )


def update_cumulative_interest(market: Market, now_ts: int) -> Market:
    """
    Применение начисления к рынку.

    Возвращает новый Market с увеличенными кумулятивными множителями и
    last_interest_ts = now_ts. Если время не прошло, рынок возвращается
    без изменений.

    Raises:
        UnableToCastUnixTimestamp, MathError: как calculate_accumulated_interest
    """
    elapsed = _elapsed_since_last_interest(market, now_ts)
    if elapsed == 0:
        return market

    accumulated = calculate_accumulated_interest(market, now_ts)

    return market.model_copy(
        update={
            "cumulative_deposit_interest": safe_add(
                market.cumulative_deposit_interest, accumulated.deposits_interest
            ),
            "cumulative_borrow_interest": safe_add(
                market.cumulative_borrow_interest, accumulated.borrows_interest
            ),
            "last_interest_ts": now_ts,
        }
    )


def get_interest(balance: int, market: Market, interest: int) -> int:
    """
    Токены, соответствующие приращению процентов на scaled balance.

    interest_amount = balance * interest / 10^(19 - decimals)
    """
    return safe_div(safe_mul(balance, interest), balance_precision_increase(market.decimals))
