"""
Константы точности и времени.

Все денежные величины ядра — целые числа с фиксированной десятичной
точностью; float не используется нигде.
"""

from typing import Final

# =============================================================================
# ТОЧНОСТЬ ЦЕН И КОЛИЧЕСТВ
# =============================================================================

PRICE_PRECISION: Final[int] = 10**6
QUOTE_PRECISION: Final[int] = 10**6
BASE_PRECISION: Final[int] = 10**9

# Scaled balance хранится в 1e9, cumulative interest — в 1e10.
# Отсюда множитель 10^(19 - decimals) при конвертации token <-> balance.
SPOT_BALANCE_PRECISION: Final[int] = 10**9
SPOT_CUMULATIVE_INTEREST_PRECISION: Final[int] = 10**10
SPOT_BALANCE_SCALE_EXPONENT: Final[int] = 19

# =============================================================================
# ПРОЦЕНТЫ И СТАВКИ
# =============================================================================

PERCENTAGE_PRECISION: Final[int] = 10**6
BID_ASK_SPREAD_PRECISION: Final[int] = 10**6
SPOT_UTILIZATION_PRECISION: Final[int] = 10**6
SPOT_RATE_PRECISION: Final[int] = 10**6

TEN_BPS: Final[int] = PERCENTAGE_PRECISION // 1000

# =============================================================================
# ВРЕМЯ (секунды)
# =============================================================================

ONE_MINUTE: Final[int] = 60
FIVE_MINUTE: Final[int] = 5 * ONE_MINUTE
ONE_HOUR: Final[int] = 60 * ONE_MINUTE
TWENTY_FOUR_HOUR: Final[int] = 24 * ONE_HOUR
ONE_YEAR: Final[int] = 365 * TWENTY_FOUR_HOUR

SPOT_MARKET_TOKEN_TWAP_WINDOW: Final[int] = TWENTY_FOUR_HOUR

# =============================================================================
# ORACLE / TWAP
# =============================================================================

# Цена, подаваемая в TWAP, ограничена полосой last_twap ± last_twap / 3
DEFAULT_MAX_TWAP_UPDATE_PRICE_BAND_DENOMINATOR: Final[int] = 3

# Нижняя граница допустимого расхождения mark/oracle (10%)
MIN_ORACLE_MARK_PCT_DIVERGENCE: Final[int] = PERCENTAGE_PRECISION // 10

# Нижняя граница допустимого расхождения oracle/twap_5min (50%)
MIN_ORACLE_TWAP_5MIN_PCT_DIVERGENCE: Final[int] = PERCENTAGE_PRECISION // 2
