"""
Тесты для модуля Time Weighted Averages

Проверяет:
1. weighted_average: граничные веса, коррекцию ±1
2. calculate_twap: backward/forward веса
3. calculate_rolling_sum: затухание и ошибки
4. update_market_twap_stats: 24h TWAP депозитов, займов, утилизации
"""

import pytest

from spot_margin.core.domain.market import Market
from spot_margin.core.errors import CastingFailure, MathError
from spot_margin.core.math.constants import ONE_HOUR, TWENTY_FOUR_HOUR
from spot_margin.core.math.twap import (
    calculate_rolling_sum,
    calculate_twap,
    update_market_twap_stats,
    weighted_average,
)

# =============================================================================
# WEIGHTED AVERAGE
# =============================================================================


class TestWeightedAverage:
    """Тесты для weighted_average"""

    @pytest.mark.parametrize("other", [-7, 0, 123_456])
    def test_zero_first_weight_returns_second_point(self, other: int) -> None:
        """Нулевой первый вес → вторая точка"""
        assert weighted_average(999, other, 0, 42) == other

    def test_zero_second_weight_returns_first_point(self) -> None:
        """Нулевой второй вес → первая точка"""
        assert weighted_average(999, 123, 42, 0) == 999

    def test_no_nudge_when_second_weight_is_one(self) -> None:
        """При втором весе 1 сдвига нет"""
        assert weighted_average(100, 200, 1, 1) == 150
        assert weighted_average(100, 200, 2, 1) == 133

    def test_nudge_up_toward_larger_weighted_component(self) -> None:
        """(100*1 + 200*2) / 3 = 166, weighted > previous → +1"""
        assert weighted_average(100, 200, 1, 2) == 167

    def test_nudge_down(self) -> None:
        """(300*3 + 100*2) / 5 = 220, weighted < previous → -1"""
        assert weighted_average(300, 100, 3, 2) == 219

    def test_no_nudge_when_components_equal(self) -> None:
        """Равные взвешенные компоненты → без сдвига"""
        assert weighted_average(200, 100, 2, 4) == 133

    def test_zero_weight_result_must_fit_i64(self) -> None:
        """Точка, возвращаемая при нулевом весе, тоже обязана помещаться в i64"""
        with pytest.raises(CastingFailure):
            weighted_average(2**70, 5, 3, 0)
        with pytest.raises(CastingFailure):
            weighted_average(5, -(2**70), 0, 3)

    def test_result_must_fit_i64(self) -> None:
        """Результат вне i64 → MathError"""
        big = 2**62
        assert weighted_average(big, big, 1, 1) == big
        with pytest.raises(MathError):
            weighted_average(2**63 - 1, 2**63 - 1, 2**62, 2**62)


class TestCalculateTwap:
    """Тесты для calculate_twap"""

    def test_half_period_elapsed(self) -> None:
        """backward=1800, forward=1800: (110 + 100) / 2 = 105, коррекция -1 к прошлому TWAP"""
        twap = calculate_twap(110, 1_800, 100, 0, ONE_HOUR)
        assert twap == 104

    def test_full_period_elapsed_forward_floor_is_one(self) -> None:
        """Прошёл полный период, вес истории не меньше 1"""
        twap = calculate_twap(110, 10 * ONE_HOUR, 100, 0, ONE_HOUR)
        # (110*36000 + 100*1) / 36001 = 109.99
        assert twap == 109

    def test_clock_going_backwards_keeps_last_twap(self) -> None:
        """Время назад → прошлый TWAP"""
        assert calculate_twap(110, 0, 100, 50, ONE_HOUR) == 100

    def test_twap_between_points(self) -> None:
        """TWAP лежит между прошлым значением и новой точкой"""
        for elapsed in (1, 60, 600, 3599):
            twap = calculate_twap(1_000_000, elapsed, 2_000_000, 0, ONE_HOUR)
            assert 1_000_000 <= twap <= 2_000_000


class TestRollingSum:
    """Тесты для calculate_rolling_sum"""

    def test_decay(self) -> None:
        """История затухает пропорционально весу"""
        # 1000 * (10 - 3) / 10 + 50
        assert calculate_rolling_sum(1_000, 50, 3, 10) == 750

    def test_full_weight_drops_history(self) -> None:
        """Вес >= знаменателя отбрасывает историю"""
        assert calculate_rolling_sum(1_000, 50, 20, 10) == 50

    def test_zero_denominator(self) -> None:
        """Нулевой знаменатель → MathError"""
        with pytest.raises(MathError):
            calculate_rolling_sum(1_000, 50, 0, 0)

    def test_negative_denominator(self) -> None:
        """Отрицательный знаменатель → CastingFailure"""
        with pytest.raises(CastingFailure):
            calculate_rolling_sum(1_000, 50, -20, -10)

    def test_overflow_u64(self) -> None:
        """Переполнение u64 → MathError"""
        with pytest.raises(MathError):
            calculate_rolling_sum(1, 2**64 - 1, 0, 1)


# =============================================================================
# MARKET TWAP STATS
# =============================================================================


class TestUpdateMarketTwapStats:
    """Тесты для update_market_twap_stats"""

    @pytest.fixture
    def market(self) -> Market:
        return Market(
            decimals=6,
            optimal_utilization=800_000,
            optimal_borrow_rate=100_000,
            max_borrow_rate=1_000_000,
            deposit_balance=10**12,
            borrow_balance=5 * 10**11,
            token_deposit_twap=10**9,
            token_borrow_twap=5 * 10**8,
            utilization_twap=500_000,
            last_twap_ts=1_000,
        )

    def test_steady_state_is_stable(self, market: Market) -> None:
        """Неизменные балансы оставляют TWAP на месте"""
        updated = update_market_twap_stats(market, 1_000 + TWENTY_FOUR_HOUR // 2)
        # Равные точки и веса → коррекция не срабатывает
        assert updated.token_deposit_twap == 10**9
        assert updated.token_borrow_twap == 5 * 10**8
        assert updated.utilization_twap == 500_000
        assert updated.last_twap_ts == 1_000 + TWENTY_FOUR_HOUR // 2

    def test_moves_toward_current_values(self, market: Market) -> None:
        """TWAP движутся к текущим значениям"""
        stressed = market.model_copy(update={"borrow_balance": 9 * 10**11})
        updated = update_market_twap_stats(stressed, 1_000 + TWENTY_FOUR_HOUR // 2)
        assert 500_000 < updated.utilization_twap < 900_000
        assert 5 * 10**8 < updated.token_borrow_twap < 9 * 10**8

    def test_does_not_mutate_input(self, market: Market) -> None:
        """Исходный рынок не меняется"""
        update_market_twap_stats(market, 50_000)
        assert market.last_twap_ts == 1_000

    def test_timestamp_never_moves_backwards(self, market: Market) -> None:
        """Обновление из прошлого не сдвигает last_twap_ts назад и не меняет TWAP"""
        later = market.model_copy(update={"last_twap_ts": 10_000})
        updated = update_market_twap_stats(later, 5_000)

        assert updated.last_twap_ts == 10_000
        assert updated.token_deposit_twap == later.token_deposit_twap
        assert updated.utilization_twap == later.utilization_twap

    def test_next_update_weighted_from_latest_timestamp(self, market: Market) -> None:
        """После обновления из прошлого вес следующей точки считается от последнего ts"""
        later = market.model_copy(update={"last_twap_ts": 10_000, "borrow_balance": 9 * 10**11})
        after_stale = update_market_twap_stats(update_market_twap_stats(later, 5_000), 10_060)
        direct = update_market_twap_stats(later, 10_060)
        assert after_stale == direct
