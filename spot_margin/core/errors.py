"""
Таксономия ошибок ядра spot_margin.

Каждая ошибка несёт стабильный строковый код (атрибут code), по которому
вызывающая сторона решает, прерывать ли операцию. Ядро ошибки не
перехватывает: любой отказ немедленно пробрасывается наверх, частичного
применения результата не бывает.

Иерархия:
    SpotMarginError
    ├── MathError                  — overflow / underflow / деление на ноль
    ├── CastingFailure             — сужающее приведение теряет информацию
    ├── BigNumberConversionError   — U192/U256 не помещается в u64/u128
    ├── UnableToCastUnixTimestamp  — отрицательный/слишком большой timestamp
    ├── InvalidOracle              — цена оракула отвергнута
    │   ├── OracleNegativeError
    │   ├── OracleTooVolatile
    │   ├── OracleConfidenceTooWide
    │   └── OraclePriceStaleForMargin
    ├── OracleNotFound             — oracle-offset ордер без цены оракула
    ├── InvalidOracleSpreadLimitPrice
    └── UnableToGetLimitPrice
"""


class SpotMarginError(Exception):
    """Базовая ошибка ядра."""

    code: str = "SpotMarginError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class MathError(SpotMarginError):
    """Checked-арифметика: переполнение, underflow или деление на ноль."""

    code = "MathError"


class CastingFailure(SpotMarginError):
    """Приведение к целевому типу невозможно без потери значения (включая знак)."""

    code = "CastingFailure"


class BigNumberConversionError(SpotMarginError):
    """Значение U192/U256 не помещается в u64/u128 или буфер байтов слишком короткий."""

    code = "BigNumberConversionError"


class UnableToCastUnixTimestamp(SpotMarginError):
    """Unix timestamp не приводится к u64."""

    code = "UnableToCastUnixTimestamp"


class InvalidOracle(SpotMarginError):
    """Цена оракула отвергнута."""

    code = "InvalidOracle"


class OracleNegativeError(InvalidOracle):
    """Цена оракула <= 0."""

    code = "OracleNegativeError"


class OracleTooVolatile(InvalidOracle):
    """Отношение цены к TWAP превышает max_volatility_ratio."""

    code = "OracleTooVolatile"


class OracleConfidenceTooWide(InvalidOracle):
    """Доверительный интервал шире допустимого."""

    code = "OracleConfidenceTooWide"


class OraclePriceStaleForMargin(InvalidOracle):
    """Цена устарела для маржинальных расчётов."""

    code = "OraclePriceStaleForMargin"


class OracleNotFound(SpotMarginError):
    """Для oracle-offset ордера нет цены оракула."""

    code = "OracleNotFound"


class InvalidOracleSpreadLimitPrice(SpotMarginError):
    """oracle + spread дают неположительную лимитную цену."""

    code = "InvalidOracleSpreadLimitPrice"


class UnableToGetLimitPrice(SpotMarginError):
    """Лимитную цену ордера определить невозможно."""

    code = "UnableToGetLimitPrice"
