"""
Oracle Validity Engine — классификация доверия к показанию оракула.

Проверки в порядке приоритета (первая сработавшая определяет результат):

    1. price <= 0                                            → INVALID
    2. max(price, twap) / max(1, min(price, twap)) > ratio   → VOLATILE
    3. max(1, conf) * BID_ASK_SPREAD_PRECISION / price > ci  → UNCERTAIN
    4. delay > slots_before_stale_for_margin                 → STALE_FOR_MARGIN
    5. not has_sufficient_data_points                        → INSUFFICIENT_DATA_POINTS
    6. иначе                                                 → VALID

Допустимость классификации для действия задаётся замкнутой таблицей
ORACLE_VALIDITY_ACCEPTANCE (Action × OracleValidity).

Два режима:
- oracle_validity() — возвращает классификацию, не поднимая исключений
  для отвергнутого показания
- validate_oracle() — строгий режим, поднимает InvalidOracle-подкласс

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. price <= 0 → INVALID независимо от остальных полей
2. confidence == 0 трактуется как 1 (деления на литеральный ноль нет)
3. Без действия (action=None) допустим только VALID
4. Любое из трёх условий блокирует fill: оракул невалиден для FILL_ORDER,
   mark слишком далеко от twap_5min, рынок в FillsPaused
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Optional

from spot_margin.core.domain.guard_rails import (
    OracleGuardRails,
    PriceDivergenceGuardRails,
    ValidityGuardRails,
)
from spot_margin.core.domain.market import Market
from spot_margin.core.domain.oracle import HistoricalPriceData, OraclePriceData
from spot_margin.core.errors import (
    OracleConfidenceTooWide,
    OracleNegativeError,
    OraclePriceStaleForMargin,
    OracleTooVolatile,
)
from spot_margin.core.math.casting import cast_to_i64
from spot_margin.core.math.constants import BID_ASK_SPREAD_PRECISION
from spot_margin.core.math.int_types import I128, I64, U64
from spot_margin.core.math.safe_math import safe_div, safe_mul, safe_sub
from spot_margin.logging import get_oracle_logger

logger = get_oracle_logger(__name__)


# =============================================================================
# ENUMS
# =============================================================================


class OracleValidity(IntEnum):
    """Классификация показания оракула, упорядоченная по строгости (INVALID — худшая)."""

    INVALID = 0
    VOLATILE = 1
    UNCERTAIN = 2
    STALE_FOR_MARGIN = 3
    INSUFFICIENT_DATA_POINTS = 4
    VALID = 5


class Action(str, Enum):
    """Действие протокола, для которого проверяется оракул."""

    PNL_SETTLEMENT = "pnl_settlement"
    ORDER_ADDED = "order_added"
    FILL_ORDER = "fill_order"
    LIQUIDATE = "liquidate"
    MARGIN_CALCULATION = "margin_calculation"
    UPDATE_TWAP = "update_twap"


# =============================================================================
# ACCEPTANCE TABLE
# =============================================================================

_ONLY_VALID: FrozenSet[OracleValidity] = frozenset({OracleValidity.VALID})

# Допускают устаревшую цену и нехватку точек данных
_TOLERATE_STALE_AND_SPARSE: FrozenSet[OracleValidity] = frozenset(
    {
        OracleValidity.STALE_FOR_MARGIN,
        OracleValidity.INSUFFICIENT_DATA_POINTS,
        OracleValidity.VALID,
    }
)

# Допускают только устаревшую цену
_TOLERATE_STALE: FrozenSet[OracleValidity] = frozenset(
    {OracleValidity.STALE_FOR_MARGIN, OracleValidity.VALID}
)

ORACLE_VALIDITY_ACCEPTANCE: Dict[Action, FrozenSet[OracleValidity]] = {
    Action.FILL_ORDER: _ONLY_VALID,
    Action.MARGIN_CALCULATION: _ONLY_VALID,
    Action.ORDER_ADDED: _TOLERATE_STALE_AND_SPARSE,
    Action.PNL_SETTLEMENT: _TOLERATE_STALE_AND_SPARSE,
    Action.UPDATE_TWAP: _TOLERATE_STALE,
    Action.LIQUIDATE: _TOLERATE_STALE,
}


def is_oracle_valid_for_action(action: Optional[Action], validity: OracleValidity) -> bool:
    """
    Допустима ли классификация для действия.

    Examples:
        >>> is_oracle_valid_for_action(Action.LIQUIDATE, OracleValidity.STALE_FOR_MARGIN)
        True
        >>> is_oracle_valid_for_action(None, OracleValidity.INSUFFICIENT_DATA_POINTS)
        False
    """
    if action is None:
        return validity == OracleValidity.VALID
    return validity in ORACLE_VALIDITY_ACCEPTANCE[action]


# =============================================================================
# CLASSIFICATION
# =============================================================================


@dataclass(frozen=True)
class _ValidityChecks:
    is_price_non_positive: bool
    is_too_volatile: bool
    is_confidence_too_wide: bool
    is_stale_for_margin: bool
    has_sufficient_data_points: bool


def _run_checks(
    last_oracle_twap: int,
    oracle_price_data: OraclePriceData,
    guard_rails: ValidityGuardRails,
) -> _ValidityChecks:
    price = oracle_price_data.price

    if price <= 0:
        return _ValidityChecks(True, False, False, False, oracle_price_data.has_sufficient_data_points)

    volatility_ratio = safe_div(
        max(price, last_oracle_twap), max(1, min(price, last_oracle_twap)), I64
    )
    is_too_volatile = volatility_ratio > guard_rails.max_volatility_ratio

    confidence_pct = safe_div(
        safe_mul(max(1, oracle_price_data.confidence), BID_ASK_SPREAD_PRECISION, U64),
        price,
        U64,
    )
    is_confidence_too_wide = confidence_pct > guard_rails.confidence_interval_max_accepted_divergence

    is_stale = oracle_price_data.delay > guard_rails.slots_before_stale_for_margin

    return _ValidityChecks(
        is_price_non_positive=False,
        is_too_volatile=is_too_volatile,
        is_confidence_too_wide=is_confidence_too_wide,
        is_stale_for_margin=is_stale,
        has_sufficient_data_points=oracle_price_data.has_sufficient_data_points,
    )


def oracle_validity(
    last_oracle_twap: int,
    oracle_price_data: OraclePriceData,
    guard_rails: ValidityGuardRails,
) -> OracleValidity:
    """
    Классификация показания оракула.

    Args:
        last_oracle_twap: Последний TWAP оракула (PRICE_PRECISION)
        oracle_price_data: Показание оракула
        guard_rails: Пороги валидности

    Returns:
        OracleValidity — первая сработавшая проверка по приоритету

    Raises:
        MathError: Переполнение при расчёте confidence
    """
    checks = _run_checks(last_oracle_twap, oracle_price_data, guard_rails)

    if checks.is_price_non_positive:
        validity = OracleValidity.INVALID
    elif checks.is_too_volatile:
        validity = OracleValidity.VOLATILE
    elif checks.is_confidence_too_wide:
        validity = OracleValidity.UNCERTAIN
    elif checks.is_stale_for_margin:
        validity = OracleValidity.STALE_FOR_MARGIN
    elif not checks.has_sufficient_data_points:
        validity = OracleValidity.INSUFFICIENT_DATA_POINTS
    else:
        validity = OracleValidity.VALID

    if validity != OracleValidity.VALID:
        logger.debug(
            "oracle_not_valid",
            validity=validity.name,
            price=oracle_price_data.price,
            confidence=oracle_price_data.confidence,
            delay=oracle_price_data.delay,
            last_oracle_twap=last_oracle_twap,
        )
    return validity


def validate_oracle(
    last_oracle_twap: int,
    oracle_price_data: OraclePriceData,
    guard_rails: ValidityGuardRails,
) -> OracleValidity:
    """
    Строгая проверка оракула: отвергнутое показание — исключение.

    Returns:
        VALID или INSUFFICIENT_DATA_POINTS

    Raises:
        OracleNegativeError: price <= 0
        OracleTooVolatile: Превышен max_volatility_ratio
        OracleConfidenceTooWide: Слишком широкий доверительный интервал
        OraclePriceStaleForMargin: Задержка больше slots_before_stale_for_margin
    """
    checks = _run_checks(last_oracle_twap, oracle_price_data, guard_rails)
    price = oracle_price_data.price

    if checks.is_price_non_positive:
        raise OracleNegativeError(f"oracle price must be positive, got {price}")
    if checks.is_too_volatile:
        raise OracleTooVolatile(
            f"oracle price {price} too volatile against twap {last_oracle_twap}"
        )
    if checks.is_confidence_too_wide:
        raise OracleConfidenceTooWide(
            f"oracle confidence {oracle_price_data.confidence} too wide for price {price}"
        )
    if checks.is_stale_for_margin:
        raise OraclePriceStaleForMargin(
            f"oracle delay {oracle_price_data.delay} exceeds "
            f"{guard_rails.slots_before_stale_for_margin}"
        )
    if not checks.has_sufficient_data_points:
        return OracleValidity.INSUFFICIENT_DATA_POINTS
    return OracleValidity.VALID


# =============================================================================
# MARK / ORACLE DIVERGENCE
# =============================================================================


def calculate_oracle_twap_5min_mark_spread_pct(
    last_mark_price: Optional[int],
    historical_oracle_data: HistoricalPriceData,
) -> int:
    """
    Расхождение mark price и 5-минутного TWAP оракула.

    (mark - twap_5min) * BID_ASK_SPREAD_PRECISION / mark

    Args:
        last_mark_price: Последняя допустимая mark price (u64) или None
        historical_oracle_data: История оракула

    Returns:
        Расхождение (i64, BID_ASK_SPREAD_PRECISION). Для отсутствующей или
        нулевой mark price — 0.
    """
    if not last_mark_price:
        return 0

    spread = safe_sub(
        cast_to_i64(last_mark_price), historical_oracle_data.last_oracle_twap_5min, I64
    )
    spread_pct = safe_div(safe_mul(spread, BID_ASK_SPREAD_PRECISION, I128), last_mark_price, I128)
    return cast_to_i64(spread_pct)


def is_oracle_mark_too_divergent(
    spread_pct: int,
    guard_rails: PriceDivergenceGuardRails,
) -> bool:
    """|spread_pct| > max(oracle_mark_pct_divergence, 10%)."""
    return abs(spread_pct) > guard_rails.effective_oracle_mark_pct_divergence()


# =============================================================================
# ORACLE STATUS
# =============================================================================


@dataclass(frozen=True)
class OracleStatus:
    """
    Сводный статус оракула для одного вызова.

    Attributes:
        price_data: Исходное показание
        oracle_mark_spread_pct: Расхождение mark/twap_5min (BID_ASK_SPREAD_PRECISION)
        is_mark_price_too_divergent: Превышен ли порог расхождения
        oracle_validity: Классификация показания
    """

    price_data: OraclePriceData
    oracle_mark_spread_pct: int
    is_mark_price_too_divergent: bool
    oracle_validity: OracleValidity


def get_oracle_status(
    oracle_price_data: OraclePriceData,
    guard_rails: OracleGuardRails,
    historical_oracle_data: HistoricalPriceData,
    last_mark_price: Optional[int] = None,
) -> OracleStatus:
    """Классификация и расхождение mark/oracle одним вызовом."""
    validity = oracle_validity(
        historical_oracle_data.last_oracle_twap, oracle_price_data, guard_rails.validity
    )
    spread_pct = calculate_oracle_twap_5min_mark_spread_pct(last_mark_price, historical_oracle_data)
    return OracleStatus(
        price_data=oracle_price_data,
        oracle_mark_spread_pct=spread_pct,
        is_mark_price_too_divergent=is_oracle_mark_too_divergent(
            spread_pct, guard_rails.price_divergence
        ),
        oracle_validity=validity,
    )


def block_action(
    market: Market,
    oracle_price_data: OraclePriceData,
    guard_rails: OracleGuardRails,
    last_mark_price: Optional[int],
    historical_oracle_data: HistoricalPriceData,
) -> bool:
    """
    Блокировать ли fill на рынке.

    Returns:
        True, если оракул невалиден для FILL_ORDER, mark слишком далеко от
        twap_5min или fill'ы на рынке приостановлены
    """
    status = get_oracle_status(oracle_price_data, guard_rails, historical_oracle_data, last_mark_price)
    is_valid = is_oracle_valid_for_action(Action.FILL_ORDER, status.oracle_validity)
    return not is_valid or status.is_mark_price_too_divergent or not market.are_fills_enabled()
