"""
Guard rails — пороги, ограничивающие доверие к оракулу.

Неизменяемая (на эпоху) конфигурация протокола. Загружается вызывающей
стороной и явно передаётся в каждую функцию ядра; глобального состояния нет.

Проценты в PERCENTAGE_PRECISION (1e6): 100_000 = 10%.
"""

from pydantic import BaseModel, Field

from spot_margin.core.math.constants import (
    MIN_ORACLE_MARK_PCT_DIVERGENCE,
    MIN_ORACLE_TWAP_5MIN_PCT_DIVERGENCE,
)
from spot_margin.core.math.int_types import I64, U64


class ValidityGuardRails(BaseModel):
    """Пороги классификации валидности оракула."""

    slots_before_stale_for_margin: int = Field(
        default=120,
        ge=0,
        le=I64.max_value,
        description="Задержка (слоты), после которой цена устарела для маржи",
    )
    confidence_interval_max_accepted_divergence: int = Field(
        default=20_000,
        ge=0,
        le=U64.max_value,
        description="Максимальный confidence / price (BID_ASK_SPREAD_PRECISION), 2%",
    )
    max_volatility_ratio: int = Field(
        default=5,
        ge=0,
        le=I64.max_value,
        description="Максимальное отношение max(price, twap) / min(price, twap)",
    )

    model_config = {"frozen": True}


class PriceDivergenceGuardRails(BaseModel):
    """Пороги расхождения mark/oracle и oracle/twap_5min."""

    oracle_mark_pct_divergence: int = Field(
        default=100_000, ge=0, le=U64.max_value, description="mark vs oracle twap_5min, 10%"
    )
    oracle_twap_5min_pct_divergence: int = Field(
        default=500_000, ge=0, le=U64.max_value, description="oracle vs twap_5min, 50%"
    )

    model_config = {"frozen": True}

    def effective_oracle_mark_pct_divergence(self) -> int:
        """
        Фактический порог mark/oracle: не строже 10%.

        Неверно сконфигурированный слишком малый порог не должен блокировать
        все fill'ы.
        """
        return max(self.oracle_mark_pct_divergence, MIN_ORACLE_MARK_PCT_DIVERGENCE)


class OracleGuardRails(BaseModel):
    """Полный набор guard rails оракула."""

    price_divergence: PriceDivergenceGuardRails = Field(default_factory=PriceDivergenceGuardRails)
    validity: ValidityGuardRails = Field(default_factory=ValidityGuardRails)

    model_config = {"frozen": True}

    def max_oracle_twap_5min_oracle_pct_divergence(self) -> int:
        """Допустимое расхождение oracle/twap_5min, не строже 50%."""
        return max(
            self.price_divergence.oracle_twap_5min_pct_divergence,
            MIN_ORACLE_TWAP_5MIN_PCT_DIVERGENCE,
        )
