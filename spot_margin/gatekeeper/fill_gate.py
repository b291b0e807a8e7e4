"""Fill Gate — допуск fill'а ордера на рынке.

Диагностическая форма block_action: вместо bool возвращает причину
блокировки и статус оракула.

Порядок проверок:
1. Рынок в FillsPaused → блокировка
2. Оракул невалиден для FILL_ORDER → блокировка
3. Mark price слишком далеко от twap_5min → блокировка
"""

from dataclasses import dataclass
from typing import Optional

from spot_margin.core.domain.guard_rails import OracleGuardRails
from spot_margin.core.domain.market import Market
from spot_margin.core.domain.oracle import OraclePriceData
from spot_margin.logging import get_gating_logger, log_gate_decision
from spot_margin.oracle.validity import (
    Action,
    OracleStatus,
    get_oracle_status,
    is_oracle_valid_for_action,
)

logger = get_gating_logger(__name__)

GATE_NAME = "fill_gate"


@dataclass(frozen=True)
class FillGateResult:
    """Результат Fill Gate."""

    fill_allowed: bool
    block_reason: str

    # Статус оракула для диагностики
    oracle_status: OracleStatus

    # Детали
    details: str


class FillGate:
    """Fill Gate: статус рынка, валидность оракула, расхождение mark/oracle."""

    def __init__(self, guard_rails: Optional[OracleGuardRails] = None):
        """
        Args:
            guard_rails: Guard rails оракула (по умолчанию — протокольные значения)
        """
        self.guard_rails = guard_rails or OracleGuardRails()

    def evaluate(
        self,
        market: Market,
        oracle_price_data: OraclePriceData,
        last_mark_price: Optional[int] = None,
    ) -> FillGateResult:
        """Оценка допуска fill'а.

        Args:
            market: Снимок рынка (статус и история оракула)
            oracle_price_data: Текущее показание оракула
            last_mark_price: Последняя допустимая mark price

        Returns:
            FillGateResult с решением
        """
        oracle_status = get_oracle_status(
            oracle_price_data,
            self.guard_rails,
            market.historical_oracle_data,
            last_mark_price,
        )

        # 1. Административная пауза (высший приоритет)
        if not market.are_fills_enabled():
            return self._block(
                market,
                oracle_status,
                "fills_paused",
                f"Market {market.market_index} is in {market.status.value} status",
            )

        # 2. Валидность оракула
        if not is_oracle_valid_for_action(Action.FILL_ORDER, oracle_status.oracle_validity):
            return self._block(
                market,
                oracle_status,
                "oracle_invalid_for_fill",
                f"Oracle validity {oracle_status.oracle_validity.name} not accepted for fills",
            )

        # 3. Расхождение mark/oracle
        if oracle_status.is_mark_price_too_divergent:
            return self._block(
                market,
                oracle_status,
                "mark_price_too_divergent",
                f"Mark/oracle twap_5min spread {oracle_status.oracle_mark_spread_pct} exceeds "
                f"{self.guard_rails.price_divergence.effective_oracle_mark_pct_divergence()}",
            )

        log_gate_decision(logger, GATE_NAME, True, market.market_index, "ok")
        return FillGateResult(
            fill_allowed=True,
            block_reason="",
            oracle_status=oracle_status,
            details="Fill allowed",
        )

    def _block(
        self,
        market: Market,
        oracle_status: OracleStatus,
        block_reason: str,
        details: str,
    ) -> FillGateResult:
        log_gate_decision(
            logger,
            GATE_NAME,
            False,
            market.market_index,
            block_reason,
            context={
                "oracle_validity": oracle_status.oracle_validity.name,
                "oracle_mark_spread_pct": oracle_status.oracle_mark_spread_pct,
            },
        )
        return FillGateResult(
            fill_allowed=False,
            block_reason=block_reason,
            oracle_status=oracle_status,
            details=details,
        )
