"""
Oracle TWAP Updater — обновление HistoricalPriceData новым показанием.

Показание принимается, только если оно допустимо для Action.UPDATE_TWAP.
Цена, подаваемая в TWAP, ограничена полосой

    last_twap ± last_twap / price_band_denominator

чтобы единичный выброс не сдвигал TWAP больше чем на треть.

Пустая история (last_oracle_twap <= 0) засевается первым допустимым показанием.
"""

from dataclasses import dataclass
from typing import Optional

from spot_margin.core.domain.guard_rails import ValidityGuardRails
from spot_margin.core.domain.oracle import HistoricalPriceData, OraclePriceData
from spot_margin.core.math.constants import (
    DEFAULT_MAX_TWAP_UPDATE_PRICE_BAND_DENOMINATOR,
    FIVE_MINUTE,
    ONE_HOUR,
)
from spot_margin.core.math.int_types import I64
from spot_margin.core.math.safe_math import safe_add, safe_div, safe_sub
from spot_margin.core.math.twap import calculate_twap
from spot_margin.logging import get_oracle_logger
from spot_margin.oracle.validity import Action, is_oracle_valid_for_action, oracle_validity

logger = get_oracle_logger(__name__)


@dataclass(frozen=True)
class OracleTwapConfig:
    """Конфигурация обновления TWAP оракула."""

    twap_period: int = ONE_HOUR
    twap_5min_period: int = FIVE_MINUTE
    price_band_denominator: int = DEFAULT_MAX_TWAP_UPDATE_PRICE_BAND_DENOMINATOR

    def __post_init__(self):
        if self.twap_period <= 0 or self.twap_5min_period <= 0:
            raise ValueError("TWAP periods must be positive")
        if self.price_band_denominator <= 0:
            raise ValueError(
                f"price_band_denominator must be positive, got {self.price_band_denominator}"
            )


class OracleTwapUpdater:
    """
    Обновление 1h и 5min TWAP оракула.

    Stateless: вся история передаётся и возвращается как HistoricalPriceData.
    """

    def __init__(self, config: Optional[OracleTwapConfig] = None):
        self.config = config or OracleTwapConfig()

    def clamp_to_band(self, price: int, last_twap: int) -> int:
        """
        Ограничение цены полосой вокруг прошлого TWAP.

        Examples:
            >>> OracleTwapUpdater().clamp_to_band(200, 90)
            120
        """
        if last_twap <= 0:
            return price
        band = safe_div(last_twap, self.config.price_band_denominator, I64)
        lower = safe_sub(last_twap, band, I64)
        upper = safe_add(last_twap, band, I64)
        return min(max(price, lower), upper)

    def update(
        self,
        historical: HistoricalPriceData,
        oracle_price_data: OraclePriceData,
        now: int,
        guard_rails: ValidityGuardRails,
    ) -> HistoricalPriceData:
        """
        Новая история оракула после показания oracle_price_data в момент now.

        Returns:
            Обновлённая HistoricalPriceData, либо исходная, если показание
            недопустимо для UPDATE_TWAP

        Raises:
            MathError: Переполнение i64 при расчёте TWAP
        """
        price = oracle_price_data.price
        is_seed = historical.last_oracle_twap <= 0
        reference_twap = price if is_seed else historical.last_oracle_twap

        validity = oracle_validity(reference_twap, oracle_price_data, guard_rails)
        if not is_oracle_valid_for_action(Action.UPDATE_TWAP, validity):
            logger.info("oracle_twap_update_skipped", validity=validity.name, price=price)
            return historical

        if is_seed:
            return HistoricalPriceData.default_with_current_oracle(oracle_price_data).model_copy(
                update={"last_oracle_twap_time_stamp": now}
            )

        last_ts = historical.last_oracle_twap_time_stamp
        twap = calculate_twap(
            self.clamp_to_band(price, historical.last_oracle_twap),
            now,
            historical.last_oracle_twap,
            last_ts,
            self.config.twap_period,
        )

        last_twap_5min = historical.last_oracle_twap_5min or historical.last_oracle_twap
        twap_5min = calculate_twap(
            self.clamp_to_band(price, last_twap_5min),
            now,
            last_twap_5min,
            last_ts,
            self.config.twap_5min_period,
        )

        update = {
            "last_oracle_twap": twap,
            "last_oracle_twap_5min": twap_5min,
            "last_oracle_twap_time_stamp": max(now, last_ts),
        }
        # Показание старше истории не заменяет последнее показание
        if now >= last_ts:
            update.update(
                {
                    "last_oracle_price_data": price,
                    "last_oracle_conf": oracle_price_data.confidence,
                    "last_oracle_delay": oracle_price_data.delay,
                }
            )
        return historical.model_copy(update=update)
