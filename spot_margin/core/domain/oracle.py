"""
Oracle snapshots — OraclePriceData, HistoricalPriceData, HistoricalIndexData.

Все цены в PRICE_PRECISION (1e6): 34.00 USD → 34_000_000.

OraclePriceData эфемерна: строится вызывающей стороной на каждый вызов из
нормализованного показания оракула и ядром не сохраняется.
HistoricalPriceData / HistoricalIndexData принадлежат Market и меняются
только через функции обновления TWAP.
"""

from pydantic import BaseModel, Field

from spot_margin.core.math.casting import cast_to_u64
from spot_margin.core.math.constants import PRICE_PRECISION
from spot_margin.core.math.int_types import I64, U64


# =============================================================================
# ORACLE PRICE DATA
# =============================================================================


class OraclePriceData(BaseModel):
    """
    Нормализованное показание оракула.

    Цена знаковая: ноль и отрицательные значения допустимы на входе и
    отвергаются классификатором валидности (OracleValidity.INVALID).
    """

    price: int = Field(..., ge=I64.min_value, le=I64.max_value, description="Цена (PRICE_PRECISION)")
    confidence: int = Field(
        ..., ge=0, le=U64.max_value, description="Доверительный интервал (PRICE_PRECISION)"
    )
    delay: int = Field(
        ..., ge=I64.min_value, le=I64.max_value, description="Слотов с момента публикации"
    )
    has_sufficient_data_points: bool = Field(
        ..., description="Достаточно ли точек данных у источника"
    )

    model_config = {"frozen": True}

    @classmethod
    def default_usd(cls) -> "OraclePriceData":
        """Показание quote-актива: ровно 1.0 USD, confidence 1, без задержки."""
        return cls(price=PRICE_PRECISION, confidence=1, delay=0, has_sufficient_data_points=True)


# =============================================================================
# HISTORICAL PRICE DATA
# =============================================================================


class HistoricalPriceData(BaseModel):
    """
    История оракула рынка: последнее показание и его TWAP (1h и 5min).
    """

    last_oracle_price_data: int = Field(default=0, ge=I64.min_value, le=I64.max_value)
    last_oracle_conf: int = Field(default=0, ge=0, le=U64.max_value)
    last_oracle_delay: int = Field(default=0, ge=I64.min_value, le=I64.max_value)
    last_oracle_twap: int = Field(
        default=0, ge=I64.min_value, le=I64.max_value, description="TWAP оракула (1h окно)"
    )
    last_oracle_twap_5min: int = Field(
        default=0, ge=I64.min_value, le=I64.max_value, description="TWAP оракула (5min окно)"
    )
    last_oracle_twap_time_stamp: int = Field(default=0, ge=I64.min_value, le=I64.max_value)

    model_config = {"frozen": True}

    @classmethod
    def default_quote_oracle(cls) -> "HistoricalPriceData":
        return cls.default_price(PRICE_PRECISION)

    @classmethod
    def default_price(cls, price: int) -> "HistoricalPriceData":
        """История, в которой цена и оба TWAP равны price."""
        return cls(
            last_oracle_price_data=price,
            last_oracle_twap=price,
            last_oracle_twap_5min=price,
        )

    @classmethod
    def default_with_current_oracle(cls, oracle_price_data: OraclePriceData) -> "HistoricalPriceData":
        return cls(
            last_oracle_price_data=oracle_price_data.price,
            last_oracle_conf=oracle_price_data.confidence,
            last_oracle_delay=oracle_price_data.delay,
            last_oracle_twap=oracle_price_data.price,
            last_oracle_twap_5min=oracle_price_data.price,
        )


# =============================================================================
# HISTORICAL INDEX DATA
# =============================================================================


class HistoricalIndexData(BaseModel):
    """
    История индексной цены рынка (bid/ask книги и их TWAP).
    """

    last_index_bid_price: int = Field(default=0, ge=0, le=U64.max_value)
    last_index_ask_price: int = Field(default=0, ge=0, le=U64.max_value)
    last_index_price_twap: int = Field(default=0, ge=0, le=U64.max_value)
    last_index_price_twap_5min: int = Field(default=0, ge=0, le=U64.max_value)
    last_index_price_twap_time_stamp: int = Field(default=0, ge=I64.min_value, le=I64.max_value)

    model_config = {"frozen": True}

    @classmethod
    def default_quote_oracle(cls) -> "HistoricalIndexData":
        return cls(
            last_index_bid_price=PRICE_PRECISION,
            last_index_ask_price=PRICE_PRECISION,
            last_index_price_twap=PRICE_PRECISION,
            last_index_price_twap_5min=PRICE_PRECISION,
        )

    @classmethod
    def default_with_current_oracle(cls, oracle_price_data: OraclePriceData) -> "HistoricalIndexData":
        """
        Raises:
            CastingFailure: Если цена оракула отрицательна
        """
        price = cast_to_u64(oracle_price_data.price)
        return cls(
            last_index_bid_price=price,
            last_index_ask_price=price,
            last_index_price_twap=price,
            last_index_price_twap_5min=price,
        )
