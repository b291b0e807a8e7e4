"""
Safe Math — checked-арифметика над целыми фиксированной ширины.

Каждая операция принимает два операнда одного IntType и возвращает точный
математический результат либо поднимает MathError. Молчаливого
переполнения, обрезания или wraparound не бывает.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Результат всегда лежит в диапазоне int_type, иначе MathError
2. Деление на ноль → MathError (для div, ceil_div, floor_div, rem_euclid)
3. safe_div усекает к нулю (-7 / 2 = -3)
4. safe_floor_div округляет к -∞ (-3 / 2 = -2)
5. safe_ceil_div округляет к +∞ (7 / 2 = 4)
"""

import operator

from spot_margin.core.errors import MathError
from spot_margin.core.math.int_types import U128, U32, IntType
from spot_margin.logging import get_math_logger

logger = get_math_logger(__name__)


# =============================================================================
# ВНУТРЕННИЕ ПРОВЕРКИ
# =============================================================================


def _as_int(value) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not a valid integer operand")
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(f"integer operand expected, got {type(value).__name__}") from None


def _math_error(op: str, int_type: IntType, lhs: int, rhs: int, reason: str) -> MathError:
    logger.debug("math_error", op=op, int_type=int_type.name, lhs=lhs, rhs=rhs, reason=reason)
    return MathError(f"{op}({lhs}, {rhs}) as {int_type.name}: {reason}")


def _operands(op: str, lhs, rhs, int_type: IntType) -> tuple[int, int]:
    a = _as_int(lhs)
    b = _as_int(rhs)
    for v in (a, b):
        if not int_type.contains(v):
            raise _math_error(op, int_type, a, b, f"operand {v} out of range")
    return a, b


def _checked(op: str, int_type: IntType, lhs: int, rhs: int, result: int) -> int:
    if not int_type.contains(result):
        reason = "overflow" if result > int_type.max_value else "underflow"
        raise _math_error(op, int_type, lhs, rhs, reason)
    return result


def _nonzero_divisor(op: str, int_type: IntType, lhs: int, rhs: int) -> None:
    if rhs == 0:
        raise _math_error(op, int_type, lhs, rhs, "division by zero")


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


# =============================================================================
# CHECKED ОПЕРАЦИИ
# =============================================================================


def safe_add(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """
    Checked сложение.

    Examples:
        >>> safe_add(1, 2)
        3
        >>> safe_add(U128.max_value, 1)
        Traceback (most recent call last):
        ...
        spot_margin.core.errors.MathError: ...
    """
    a, b = _operands("safe_add", lhs, rhs, int_type)
    return _checked("safe_add", int_type, a, b, a + b)


def safe_sub(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """Checked вычитание. Для беззнаковых типов 0 - 1 → MathError."""
    a, b = _operands("safe_sub", lhs, rhs, int_type)
    return _checked("safe_sub", int_type, a, b, a - b)


def safe_mul(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """Checked умножение."""
    a, b = _operands("safe_mul", lhs, rhs, int_type)
    return _checked("safe_mul", int_type, a, b, a * b)


def safe_div(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """
    Checked деление с усечением к нулю.

    Для знаковых типов I128.min / -1 не помещается в тип → MathError.

    Examples:
        >>> safe_div(7, 2)
        3
        >>> safe_div(-7, 2, I64)
        -3
    """
    a, b = _operands("safe_div", lhs, rhs, int_type)
    _nonzero_divisor("safe_div", int_type, a, b)
    return _checked("safe_div", int_type, a, b, _trunc_div(a, b))


def safe_ceil_div(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """
    Checked деление с округлением вверх (к +∞).

    Любой ненулевой остаток увеличивает частное на единицу.

    Examples:
        >>> safe_ceil_div(7, 2)
        4
        >>> safe_ceil_div(8, 2)
        4
    """
    a, b = _operands("safe_ceil_div", lhs, rhs, int_type)
    _nonzero_divisor("safe_ceil_div", int_type, a, b)
    return _checked("safe_ceil_div", int_type, a, b, -((-a) // b))


def safe_floor_div(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """
    Checked деление с округлением вниз (к -∞).

    Для беззнаковых типов совпадает с safe_div.

    Examples:
        >>> safe_floor_div(-3, 2, I128)
        -2
        >>> safe_floor_div(3, 2, I128)
        1
    """
    a, b = _operands("safe_floor_div", lhs, rhs, int_type)
    _nonzero_divisor("safe_floor_div", int_type, a, b)
    return _checked("safe_floor_div", int_type, a, b, a // b)


def safe_rem_euclid(lhs: int, rhs: int, int_type: IntType = U128) -> int:
    """
    Евклидов остаток: 0 <= r < |rhs| при любых знаках операндов.

    Examples:
        >>> safe_rem_euclid(-7, 3, I64)
        2
    """
    a, b = _operands("safe_rem_euclid", lhs, rhs, int_type)
    _nonzero_divisor("safe_rem_euclid", int_type, a, b)
    return _checked("safe_rem_euclid", int_type, a, b, a % abs(b))


def safe_pow(base: int, exp: int, int_type: IntType = U128) -> int:
    """
    Checked возведение в степень (exp в диапазоне u32).

    Examples:
        >>> safe_pow(10, 13)
        10000000000000
    """
    a = _as_int(base)
    e = _as_int(exp)
    if not int_type.contains(a):
        raise _math_error("safe_pow", int_type, a, e, f"operand {a} out of range")
    if not U32.contains(e):
        raise _math_error("safe_pow", int_type, a, e, "exponent out of u32 range")
    # Ранний выход до вычисления огромной степени
    if abs(a) > 1 and e >= int_type.bits:
        raise _math_error("safe_pow", int_type, a, e, "overflow")
    return _checked("safe_pow", int_type, a, e, a**e)
