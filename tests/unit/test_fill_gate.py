"""
Тесты для Fill Gate

Проверяет:
1. Приоритет причин блокировки (fills_paused > oracle > mark divergence)
2. Допуск fill при валидном оракуле
3. Согласованность с block_action
4. Пользовательские guard rails
"""

import pytest

from spot_margin.core.domain.guard_rails import OracleGuardRails, PriceDivergenceGuardRails
from spot_margin.core.domain.market import Market, MarketStatus
from spot_margin.core.domain.oracle import HistoricalPriceData, OraclePriceData
from spot_margin.core.math.constants import PRICE_PRECISION
from spot_margin.gatekeeper import FillGate, FillGateResult
from spot_margin.oracle.validity import OracleValidity, block_action

PRICE = 34 * PRICE_PRECISION


@pytest.fixture
def market() -> Market:
    return Market(
        market_index=3,
        status=MarketStatus.ACTIVE,
        decimals=9,
        optimal_utilization=800_000,
        optimal_borrow_rate=100_000,
        max_borrow_rate=1_000_000,
        historical_oracle_data=HistoricalPriceData.default_price(PRICE),
    )


@pytest.fixture
def gate() -> FillGate:
    return FillGate()


def reading(price: int = PRICE, delay: int = 1) -> OraclePriceData:
    return OraclePriceData(
        price=price, confidence=10_000, delay=delay, has_sufficient_data_points=True
    )


class TestFillGate:
    """Тесты для FillGate.evaluate"""

    def test_fill_allowed(self, gate: FillGate, market: Market) -> None:
        """Валидный оракул и близкая mark цена → fill разрешён"""
        result = gate.evaluate(market, reading(), last_mark_price=PRICE)

        assert isinstance(result, FillGateResult)
        assert result.fill_allowed
        assert result.block_reason == ""
        assert result.oracle_status.oracle_validity == OracleValidity.VALID
        assert result.oracle_status.oracle_mark_spread_pct == 0

    def test_no_mark_price_allowed(self, gate: FillGate, market: Market) -> None:
        """Без mark цены расхождение не проверяется"""
        assert gate.evaluate(market, reading()).fill_allowed

    def test_fills_paused(self, gate: FillGate, market: Market) -> None:
        """Пауза fills блокирует"""
        paused = market.model_copy(update={"status": MarketStatus.FILLS_PAUSED})
        result = gate.evaluate(paused, reading(), last_mark_price=PRICE)

        assert not result.fill_allowed
        assert result.block_reason == "fills_paused"
        assert "fills_paused" in result.details

    def test_fills_paused_outranks_oracle(self, gate: FillGate, market: Market) -> None:
        """Пауза приоритетнее невалидного оракула"""
        paused = market.model_copy(update={"status": MarketStatus.FILLS_PAUSED})
        result = gate.evaluate(paused, reading(price=0), last_mark_price=PRICE)

        assert result.block_reason == "fills_paused"
        assert result.oracle_status.oracle_validity == OracleValidity.INVALID

    @pytest.mark.parametrize(
        "oracle_price_data,validity",
        [
            (reading(delay=121), OracleValidity.STALE_FOR_MARGIN),
            (reading(price=-1), OracleValidity.INVALID),
            (reading(price=PRICE * 6), OracleValidity.VOLATILE),
        ],
        ids=["stale", "negative", "volatile"],
    )
    def test_oracle_invalid_for_fill(
        self,
        gate: FillGate,
        market: Market,
        oracle_price_data: OraclePriceData,
        validity: OracleValidity,
    ) -> None:
        """Состояния оракула, недопустимые для fill, блокируют"""
        result = gate.evaluate(market, oracle_price_data, last_mark_price=PRICE)

        assert not result.fill_allowed
        assert result.block_reason == "oracle_invalid_for_fill"
        assert result.oracle_status.oracle_validity == validity
        assert validity.name in result.details

    def test_oracle_outranks_mark_divergence(self, gate: FillGate, market: Market) -> None:
        """Оракул приоритетнее расхождения mark цены"""
        result = gate.evaluate(market, reading(delay=121), last_mark_price=40 * PRICE_PRECISION)
        assert result.block_reason == "oracle_invalid_for_fill"
        assert result.oracle_status.is_mark_price_too_divergent

    def test_mark_price_too_divergent(self, gate: FillGate, market: Market) -> None:
        """(40 - 34) / 40 = 15% > 10%"""
        result = gate.evaluate(market, reading(), last_mark_price=40 * PRICE_PRECISION)

        assert not result.fill_allowed
        assert result.block_reason == "mark_price_too_divergent"
        assert result.oracle_status.oracle_mark_spread_pct == 150_000

    def test_empty_oracle_history_blocks(self, gate: FillGate, market: Market) -> None:
        """Нулевой TWAP делает любое показание VOLATILE"""
        fresh = market.model_copy(update={"historical_oracle_data": HistoricalPriceData()})
        result = gate.evaluate(fresh, reading())
        assert result.block_reason == "oracle_invalid_for_fill"

    def test_custom_divergence_threshold(self, market: Market) -> None:
        """Порог расхождения настраивается"""
        gate = FillGate(
            OracleGuardRails(
                price_divergence=PriceDivergenceGuardRails(oracle_mark_pct_divergence=200_000)
            )
        )
        assert gate.evaluate(market, reading(), last_mark_price=40 * PRICE_PRECISION).fill_allowed

    def test_default_guard_rails(self, gate: FillGate) -> None:
        """Guard rails по умолчанию"""
        assert gate.guard_rails == OracleGuardRails()

    @pytest.mark.parametrize(
        "status,oracle_price_data,mark",
        [
            (MarketStatus.ACTIVE, reading(), PRICE),
            (MarketStatus.ACTIVE, reading(delay=500), PRICE),
            (MarketStatus.ACTIVE, reading(), 45 * PRICE_PRECISION),
            (MarketStatus.FILLS_PAUSED, reading(), PRICE),
            (MarketStatus.REDUCE_ONLY, reading(), None),
        ],
    )
    def test_agrees_with_block_action(
        self,
        gate: FillGate,
        market: Market,
        status: MarketStatus,
        oracle_price_data: OraclePriceData,
        mark,
    ) -> None:
        """Решение совпадает с block_operation для FILL_ORDER"""
        m = market.model_copy(update={"status": status})
        result = gate.evaluate(m, oracle_price_data, last_mark_price=mark)
        blocked = block_action(
            m, oracle_price_data, gate.guard_rails, mark, m.historical_oracle_data
        )
        assert result.fill_allowed is not blocked
