"""
Market — снимок состояния spot-рынка.

Единственная сущность ядра, чьё состояние живёт между вызовами. Модель
неизменяемая: начисление процентов и обновление TWAP возвращают новый
экземпляр (model_copy), вызывающая сторона сохраняет его сама.

Единицы:
- deposit_balance / borrow_balance — scaled balance (SPOT_BALANCE_PRECISION)
- cumulative_*_interest — SPOT_CUMULATIVE_INTEREST_PRECISION (1e10 = 1.0)
- optimal_utilization — SPOT_UTILIZATION_PRECISION (1e6 = 100%)
- optimal_borrow_rate / max_borrow_rate — SPOT_RATE_PRECISION (1e6 = 100% годовых)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. optimal_utilization < SPOT_UTILIZATION_PRECISION
2. optimal_borrow_rate <= max_borrow_rate
3. cumulative_*_interest не убывают (обеспечивается функциями начисления)
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from spot_margin.core.domain.oracle import HistoricalIndexData, HistoricalPriceData
from spot_margin.core.math.constants import (
    SPOT_CUMULATIVE_INTEREST_PRECISION,
    SPOT_UTILIZATION_PRECISION,
)
from spot_margin.core.math.int_types import I64, U128, U16, U32, U64


# =============================================================================
# ENUMS
# =============================================================================


class SpotBalanceType(str, Enum):
    """Тип баланса: определяет правило округления и знак."""

    DEPOSITS = "deposits"
    BORROWS = "borrows"


class MarketStatus(str, Enum):
    """Административный статус рынка."""

    INITIALIZED = "initialized"
    ACTIVE = "active"
    FILLS_PAUSED = "fills_paused"
    WITHDRAW_PAUSED = "withdraw_paused"
    REDUCE_ONLY = "reduce_only"
    SETTLEMENT = "settlement"
    DELISTED = "delisted"


# =============================================================================
# MARKET MODEL
# =============================================================================


class Market(BaseModel):
    """
    Снимок конфигурации и состояния spot-рынка.
    """

    # Идентификация
    market_index: int = Field(default=0, ge=0, le=U16.max_value)
    name: str = Field(default="", max_length=32)
    status: MarketStatus = Field(default=MarketStatus.INITIALIZED)

    # Токен
    decimals: int = Field(..., ge=0, le=U32.max_value, description="Десятичные знаки токена")

    # Кумулятивные множители процентов
    cumulative_deposit_interest: int = Field(
        default=SPOT_CUMULATIVE_INTEREST_PRECISION, ge=0, le=U128.max_value
    )
    cumulative_borrow_interest: int = Field(
        default=SPOT_CUMULATIVE_INTEREST_PRECISION, ge=0, le=U128.max_value
    )

    # Агрегированные scaled balances
    deposit_balance: int = Field(default=0, ge=0, le=U128.max_value)
    borrow_balance: int = Field(default=0, ge=0, le=U128.max_value)

    # Кривая ставки
    optimal_utilization: int = Field(..., ge=0, le=U32.max_value)
    optimal_borrow_rate: int = Field(..., ge=0, le=U32.max_value)
    max_borrow_rate: int = Field(..., ge=0, le=U32.max_value)
    last_interest_ts: int = Field(default=0, ge=0, le=U64.max_value)

    # TWAP рыночной статистики
    token_deposit_twap: int = Field(default=0, ge=0, le=U128.max_value)
    token_borrow_twap: int = Field(default=0, ge=0, le=U128.max_value)
    utilization_twap: int = Field(default=0, ge=0, le=U128.max_value)
    last_twap_ts: int = Field(default=0, ge=0, le=U64.max_value)

    # Ордера
    expiry_ts: int = Field(default=0, ge=I64.min_value, le=I64.max_value)
    order_step_size: int = Field(default=1, ge=0, le=U64.max_value)
    order_tick_size: int = Field(default=0, ge=0, le=U64.max_value)
    min_order_size: int = Field(default=0, ge=0, le=U64.max_value)

    # История цен
    historical_oracle_data: HistoricalPriceData = Field(default_factory=HistoricalPriceData)
    historical_index_data: HistoricalIndexData = Field(default_factory=HistoricalIndexData)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_rate_curve(self) -> "Market":
        """
        Валидация параметров кривой ставки.

        Raises:
            ValueError: Если kink >= 100% или optimal_borrow_rate > max_borrow_rate
        """
        if self.optimal_utilization >= SPOT_UTILIZATION_PRECISION:
            raise ValueError(
                f"optimal_utilization must be < {SPOT_UTILIZATION_PRECISION}, "
                f"got {self.optimal_utilization}"
            )
        if self.optimal_borrow_rate > self.max_borrow_rate:
            raise ValueError(
                f"optimal_borrow_rate ({self.optimal_borrow_rate}) must not exceed "
                f"max_borrow_rate ({self.max_borrow_rate})"
            )
        return self

    def cumulative_interest(self, balance_type: SpotBalanceType) -> int:
        """Кумулятивный множитель процентов для типа баланса."""
        if balance_type == SpotBalanceType.DEPOSITS:
            return self.cumulative_deposit_interest
        return self.cumulative_borrow_interest

    def is_market_active(self, now: int) -> bool:
        """
        Рынок активен, если он не в Settlement/Delisted и не истёк.

        expiry_ts == 0 означает бессрочный рынок.
        """
        status_active = self.status not in (MarketStatus.SETTLEMENT, MarketStatus.DELISTED)
        not_expired = self.expiry_ts == 0 or now < self.expiry_ts
        return status_active and not_expired

    def market_in_reduce_only_mode(self) -> bool:
        return self.status == MarketStatus.REDUCE_ONLY

    def are_fills_enabled(self) -> bool:
        """Fill'ы запрещены только в статусе FillsPaused."""
        return self.status != MarketStatus.FILLS_PAUSED
