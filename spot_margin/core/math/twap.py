"""
Time Weighted Averages — взвешенное среднее, TWAP и rolling sum.

Используются для сглаживания цены оракула (1h, 5min) и рыночной статистики
(депозиты, займы, утилизация за 24h).

Коррекция ±1: при весе новой точки > 1 результат смещается на единицу в
сторону взвешенной новой точки, компенсируя дрейф от усечения при делении.
Поведение сохраняется бит-в-бит.
"""

from spot_margin.core.domain.market import Market, SpotBalanceType
from spot_margin.core.math.balance import get_amount_of_tokens
from spot_margin.core.math.casting import cast, cast_to_i64, cast_to_u64
from spot_margin.core.math.constants import SPOT_MARKET_TOKEN_TWAP_WINDOW
from spot_margin.core.math.int_types import I128, I64, U128, U64
from spot_margin.core.math.interest import calculate_utilization
from spot_margin.core.math.safe_math import safe_add, safe_div, safe_mul, safe_sub


def weighted_average(
    data_point_1: int,
    data_point_2: int,
    weight_1: int,
    weight_2: int,
) -> int:
    """
    Взвешенное среднее двух i64 точек.

    (data_point_1 * weight_1 + data_point_2 * weight_2) / (weight_1 + weight_2)
    с коррекцией ±1 в сторону data_point_2 при weight_2 > 1.

    Args:
        data_point_1: Первая точка (i64)
        data_point_2: Вторая точка (i64)
        weight_1: Вес первой точки (i64)
        weight_2: Вес второй точки (i64)

    Returns:
        Среднее (i64). При weight_1 == 0 → data_point_2, при weight_2 == 0 → data_point_1.

    Raises:
        MathError: Переполнение
        CastingFailure: Результат не помещается в i64

    Examples:
        >>> weighted_average(100, 200, 0, 7)
        200
        >>> weighted_average(100, 200, 1, 1)
        150
        >>> weighted_average(100, 200, 1, 2)
        167
    """
    denominator = cast(safe_add(weight_1, weight_2, I64), I128)
    previous = safe_mul(data_point_1, weight_1, I128)
    weighted = safe_mul(data_point_2, weight_2, I128)

    if weight_1 == 0:
        return cast_to_i64(data_point_2)
    if weight_2 == 0:
        return cast_to_i64(data_point_1)

    nudge = 0
    if weight_2 > 1:
        if weighted < previous:
            nudge = -1
        elif weighted > previous:
            nudge = 1

    average = cast_to_i64(safe_div(safe_add(previous, weighted, I128), denominator, I128))
    return safe_add(average, nudge, I64)


def calculate_twap(
    curr_price: int,
    curr_ts: int,
    last_twap: int,
    last_ts: int,
    period: int,
) -> int:
    """
    Обновление TWAP новой точкой.

    backward = max(0, curr_ts - last_ts) — вес новой цены
    forward  = max(1, period - backward) — вес прошлого TWAP

    Args:
        curr_price: Новая цена (i64)
        curr_ts: Время новой цены
        last_twap: Прошлый TWAP
        last_ts: Время прошлого TWAP
        period: Окно TWAP (секунды)
    """
    backward = max(0, safe_sub(curr_ts, last_ts, I64))
    forward = max(1, safe_sub(period, backward, I64))
    return weighted_average(curr_price, last_twap, backward, forward)


def calculate_rolling_sum(
    data_point_1: int,
    data_point_2: int,
    weight_numerator: int,
    weight_denominator: int,
) -> int:
    """
    Rolling sum с экспоненциальным затуханием.

    data_point_1 * max(0, den - num) / den + data_point_2

    Args:
        data_point_1: Накопленная сумма (u64)
        data_point_2: Новая точка (u64)
        weight_numerator: Вес новой точки (i64)
        weight_denominator: Знаменатель веса (i64)

    Raises:
        MathError: weight_denominator == 0 или переполнение
        CastingFailure: weight_denominator < 0
    """
    decay_weight = max(0, safe_sub(weight_denominator, weight_numerator, I64))
    carried = safe_div(
        safe_mul(data_point_1, decay_weight, U128),
        cast(weight_denominator, U128),
        U128,
    )
    return safe_add(cast_to_u64(carried), data_point_2, U64)


def update_market_twap_stats(market: Market, now_ts: int) -> Market:
    """
    Обновление 24h TWAP депозитов, займов и утилизации рынка.

    Returns:
        Новый Market с обновлёнными token_deposit_twap, token_borrow_twap,
        utilization_twap и last_twap_ts = max(now_ts, last_twap_ts)
    """
    deposit_tokens = get_amount_of_tokens(market.deposit_balance, market, SpotBalanceType.DEPOSITS)
    borrow_tokens = get_amount_of_tokens(market.borrow_balance, market, SpotBalanceType.BORROWS)
    utilization = calculate_utilization(deposit_tokens, borrow_tokens)

    def _twap(current: int, last_twap: int) -> int:
        updated = calculate_twap(
            cast_to_i64(current),
            now_ts,
            cast_to_i64(last_twap),
            market.last_twap_ts,
            SPOT_MARKET_TOKEN_TWAP_WINDOW,
        )
        return cast(updated, U128)

    return market.model_copy(
        update={
            "token_deposit_twap": _twap(deposit_tokens, market.token_deposit_twap),
            "token_borrow_twap": _twap(borrow_tokens, market.token_borrow_twap),
            "utilization_twap": _twap(utilization, market.utilization_twap),
            "last_twap_ts": cast_to_u64(max(now_ts, market.last_twap_ts)),
        }
    )
