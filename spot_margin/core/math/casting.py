"""
Casting — приведение между целыми фиксированной ширины.

Приведение либо возвращает значение без изменений (оно представимо в целевом
типе), либо поднимает CastingFailure. Обрезания и потери знака не бывает.
"""

import operator
from typing import Optional

from spot_margin.core.errors import CastingFailure
from spot_margin.core.math.int_types import I128, I64, U128, U64, U32, IntType
from spot_margin.logging import get_math_logger

logger = get_math_logger(__name__)


def try_cast(value: int, to: IntType) -> Optional[int]:
    """
    Приведение без исключения.

    Returns:
        value если оно представимо в to, иначе None
    """
    v = operator.index(value)
    return v if to.contains(v) else None


def cast(value: int, to: IntType) -> int:
    """
    Checked приведение к типу to.

    Raises:
        CastingFailure: Если to не может точно представить value

    Examples:
        >>> cast(255, U8)
        255
        >>> cast(-1, U64)
        Traceback (most recent call last):
        ...
        spot_margin.core.errors.CastingFailure: ...
    """
    result = try_cast(value, to)
    if result is None:
        logger.debug("casting_failure", value=value, to=to.name)
        raise CastingFailure(f"cannot cast {value} to {to.name}")
    return result


def cast_to_u32(value: int) -> int:
    return cast(value, U32)


def cast_to_u64(value: int) -> int:
    return cast(value, U64)


def cast_to_i64(value: int) -> int:
    return cast(value, I64)


def cast_to_u128(value: int) -> int:
    return cast(value, U128)


def cast_to_i128(value: int) -> int:
    return cast(value, I128)
