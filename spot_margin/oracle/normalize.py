"""
Нормализация показаний price feed в OraclePriceData.

Транспорт оракула (чтение аккаунтов, wire format) вне ядра: сюда приходят
уже извлечённые сырые поля (цена, confidence, экспонента, слот публикации).
Функции переводят их в PRICE_PRECISION и считают задержку в слотах.

Источники:
- FEED          — цена в 10^exponent
- FEED_1K       — цена за 1000 единиц токена (multiple = 1_000)
- FEED_1M       — цена за 1_000_000 единиц токена (multiple = 1_000_000)
- FEED_STABLE   — стейблкоин: цена, близкая к 1.0, прижимается к ровно 1.0
- QUOTE_ASSET   — quote-актив, всегда 1.0
"""

from enum import Enum

from spot_margin.core.domain.oracle import OraclePriceData
from spot_margin.core.errors import InvalidOracle
from spot_margin.core.math.casting import cast_to_i64, cast_to_u64
from spot_margin.core.math.constants import PRICE_PRECISION, TEN_BPS
from spot_margin.core.math.int_types import I128, I64, U128
from spot_margin.core.math.safe_math import safe_div, safe_mul, safe_pow, safe_sub


class OracleSource(str, Enum):
    """Тип источника цены рынка."""

    FEED = "feed"
    FEED_1K = "feed_1k"
    FEED_1M = "feed_1m"
    FEED_STABLE = "feed_stable"
    QUOTE_ASSET = "quote_asset"


_SOURCE_MULTIPLE = {
    OracleSource.FEED: 1,
    OracleSource.FEED_1K: 1_000,
    OracleSource.FEED_1M: 1_000_000,
    OracleSource.FEED_STABLE: 1,
}


def scale_feed_price(
    price: int,
    confidence: int,
    exponent: int,
    publish_slot: int,
    clock_slot: int,
    multiple: int = 1,
) -> OraclePriceData:
    """
    Перевод сырой цены feed в PRICE_PRECISION.

    oracle_precision = 10^|exponent| / multiple; цена и confidence
    домножаются или делятся так, чтобы точность стала PRICE_PRECISION.

    Args:
        price: Сырая цена (i64, в 10^exponent)
        confidence: Сырой доверительный интервал (u64)
        exponent: Экспонента feed (обычно отрицательная)
        publish_slot: Слот публикации цены
        clock_slot: Текущий слот
        multiple: Количество единиц токена, к которому относится цена

    Raises:
        InvalidOracle: 10^|exponent| <= multiple
        MathError, CastingFailure: Переполнение при масштабировании

    Examples:
        >>> scale_feed_price(3_400_000_000, 1_000_000, -8, 100, 101).price
        34000000
    """
    oracle_precision = safe_pow(10, abs(exponent), U128)
    if oracle_precision <= multiple:
        raise InvalidOracle(
            f"oracle precision 10^{abs(exponent)} must exceed multiple {multiple}"
        )
    oracle_precision = safe_div(oracle_precision, multiple, U128)

    scale_div = 1
    scale_mul = 1
    if oracle_precision > PRICE_PRECISION:
        scale_div = safe_div(oracle_precision, PRICE_PRECISION, U128)
    else:
        scale_mul = safe_div(PRICE_PRECISION, oracle_precision, U128)

    scaled_price = cast_to_i64(safe_div(safe_mul(price, scale_mul, I128), scale_div, I128))
    scaled_confidence = cast_to_u64(safe_div(safe_mul(confidence, scale_mul, U128), scale_div, U128))
    delay = safe_sub(cast_to_i64(clock_slot), cast_to_i64(publish_slot), I64)

    return OraclePriceData(
        price=scaled_price,
        confidence=scaled_confidence,
        delay=delay,
        has_sufficient_data_points=True,
    )


def normalize_stablecoin_price(oracle_price_data: OraclePriceData) -> OraclePriceData:
    """
    Прижатие цены стейблкоина к 1.0.

    Если |price - 1.0| <= min(5 bps, confidence), цена заменяется ровно на
    PRICE_PRECISION.
    """
    five_bps = TEN_BPS // 2
    deviation = abs(safe_sub(oracle_price_data.price, PRICE_PRECISION, I64))
    if deviation <= min(five_bps, oracle_price_data.confidence):
        return oracle_price_data.model_copy(update={"price": PRICE_PRECISION})
    return oracle_price_data


def get_oracle_price_data(
    source: OracleSource,
    price: int = 0,
    confidence: int = 0,
    exponent: int = 0,
    publish_slot: int = 0,
    clock_slot: int = 0,
) -> OraclePriceData:
    """
    Нормализованное показание для типа источника.

    Для QUOTE_ASSET сырые поля игнорируются.
    """
    if source == OracleSource.QUOTE_ASSET:
        return OraclePriceData.default_usd()

    oracle_price_data = scale_feed_price(
        price,
        confidence,
        exponent,
        publish_slot,
        clock_slot,
        multiple=_SOURCE_MULTIPLE[source],
    )
    if source == OracleSource.FEED_STABLE:
        return normalize_stablecoin_price(oracle_price_data)
    return oracle_price_data
