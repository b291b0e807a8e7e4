"""
Wide Integers — беззнаковые U192 и U256.

Используются там, где произведение двух u128 не помещается в 128 бит.
Значение хранится массивом 64-битных слов (little-endian), что фиксирует
байтовую раскладку для сериализации. Арифметика проходит через
checked-примитивы safe_math с диапазоном соответствующего типа.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Значение всегда в [0, 2^bits() - 1], иначе MathError
2. to_le_bytes() возвращает ровно byte_width() байт
3. from_le_bytes(x.to_le_bytes()) == x
4. Буфер короче byte_width() → BigNumberConversionError
5. Сужение к u64/u128 никогда не обрезает значение
"""

import operator
from functools import total_ordering
from typing import ClassVar, Optional, Tuple, TypeVar

from spot_margin.core.errors import BigNumberConversionError, MathError
from spot_margin.core.math import int_types
from spot_margin.core.math.int_types import U128, U64, IntType
from spot_margin.core.math.safe_math import (
    safe_add,
    safe_ceil_div,
    safe_div,
    safe_mul,
    safe_rem_euclid,
    safe_sub,
)

WORD_BITS = 64
_WORD_MASK = (1 << WORD_BITS) - 1

W = TypeVar("W", bound="WideUInt")


@total_ordering
class WideUInt:
    """
    Базовый класс беззнакового целого фиксированной ширины из N 64-битных слов.

    Подклассы задают только WORDS и INT_TYPE.
    """

    WORDS: ClassVar[int] = 0
    INT_TYPE: ClassVar[IntType]

    __slots__ = ("_words",)

    def __init__(self, value: int = 0):
        v = _operand(value)
        if not self.INT_TYPE.contains(v):
            raise MathError(f"{v} out of range for {self.INT_TYPE.name}")
        self._words: Tuple[int, ...] = tuple(
            (v >> (WORD_BITS * i)) & _WORD_MASK for i in range(self.WORDS)
        )

    # -------------------------------------------------------------------------
    # Конструкторы и свойства
    # -------------------------------------------------------------------------

    @classmethod
    def bits(cls) -> int:
        return cls.WORDS * WORD_BITS

    @classmethod
    def byte_width(cls) -> int:
        return cls.WORDS * WORD_BITS // 8

    @classmethod
    def zero(cls: type[W]) -> W:
        return cls(0)

    @classmethod
    def max_value(cls: type[W]) -> W:
        return cls(cls.INT_TYPE.max_value)

    @classmethod
    def from_words(cls: type[W], words: Tuple[int, ...]) -> W:
        """Построение из little-endian 64-битных слов."""
        if len(words) != cls.WORDS:
            raise ValueError(f"{cls.__name__} requires {cls.WORDS} words, got {len(words)}")
        value = 0
        for i, word in enumerate(words):
            if not 0 <= word <= _WORD_MASK:
                raise ValueError(f"word {i} out of u64 range: {word}")
            value |= word << (WORD_BITS * i)
        return cls(value)

    @property
    def words(self) -> Tuple[int, ...]:
        """Little-endian 64-битные слова."""
        return self._words

    def __int__(self) -> int:
        value = 0
        for i, word in enumerate(self._words):
            value |= word << (WORD_BITS * i)
        return value

    __index__ = __int__

    def is_zero(self) -> bool:
        return not any(self._words)

    # -------------------------------------------------------------------------
    # Байтовое представление
    # -------------------------------------------------------------------------

    def to_le_bytes(self) -> bytes:
        """Ровно byte_width() байт, little-endian."""
        return b"".join(word.to_bytes(WORD_BITS // 8, "little") for word in self._words)

    @classmethod
    def from_le_bytes(cls: type[W], buf: bytes) -> W:
        """
        Чтение значения из первых byte_width() байт буфера.

        Raises:
            BigNumberConversionError: Если буфер короче byte_width()
        """
        value, _ = cls.deserialize(buf)
        return value

    @classmethod
    def deserialize(cls: type[W], buf: bytes) -> Tuple[W, bytes]:
        """
        Чтение значения из начала буфера.

        Returns:
            (значение, непрочитанный остаток буфера)

        Raises:
            BigNumberConversionError: Если буфер короче byte_width()
        """
        size = cls.byte_width()
        if len(buf) < size:
            raise BigNumberConversionError(
                f"{cls.__name__} requires {size} bytes, got {len(buf)}"
            )
        word_size = WORD_BITS // 8
        words = tuple(
            int.from_bytes(buf[i * word_size:(i + 1) * word_size], "little")
            for i in range(cls.WORDS)
        )
        return cls.from_words(words), bytes(buf[size:])

    # -------------------------------------------------------------------------
    # Сужающие приведения
    # -------------------------------------------------------------------------

    def to_u64(self) -> Optional[int]:
        """u64 или None, если значение не помещается."""
        v = int(self)
        return v if U64.contains(v) else None

    def to_u128(self) -> Optional[int]:
        """u128 или None, если значение не помещается."""
        v = int(self)
        return v if U128.contains(v) else None

    def try_to_u64(self) -> int:
        v = self.to_u64()
        if v is None:
            raise BigNumberConversionError(f"{self!r} does not fit in u64")
        return v

    def try_to_u128(self) -> int:
        v = self.to_u128()
        if v is None:
            raise BigNumberConversionError(f"{self!r} does not fit in u128")
        return v

    # -------------------------------------------------------------------------
    # Checked арифметика
    # -------------------------------------------------------------------------

    def _wrap(self: W, value: int) -> W:
        return type(self)(value)

    def __add__(self: W, other) -> W:
        return self._wrap(safe_add(int(self), _operand(other), self.INT_TYPE))

    def __radd__(self: W, other) -> W:
        return self._wrap(safe_add(_operand(other), int(self), self.INT_TYPE))

    def __sub__(self: W, other) -> W:
        return self._wrap(safe_sub(int(self), _operand(other), self.INT_TYPE))

    def __rsub__(self: W, other) -> W:
        return self._wrap(safe_sub(_operand(other), int(self), self.INT_TYPE))

    def __mul__(self: W, other) -> W:
        return self._wrap(safe_mul(int(self), _operand(other), self.INT_TYPE))

    def __rmul__(self: W, other) -> W:
        return self._wrap(safe_mul(_operand(other), int(self), self.INT_TYPE))

    def __floordiv__(self: W, other) -> W:
        return self._wrap(safe_div(int(self), _operand(other), self.INT_TYPE))

    def __rfloordiv__(self: W, other) -> W:
        return self._wrap(safe_div(_operand(other), int(self), self.INT_TYPE))

    def __mod__(self: W, other) -> W:
        return self._wrap(safe_rem_euclid(int(self), _operand(other), self.INT_TYPE))

    def ceil_div(self: W, other) -> W:
        return self._wrap(safe_ceil_div(int(self), _operand(other), self.INT_TYPE))

    def checked_add(self: W, other) -> Optional[W]:
        return _or_none(self.__add__, other)

    def checked_sub(self: W, other) -> Optional[W]:
        return _or_none(self.__sub__, other)

    def checked_mul(self: W, other) -> Optional[W]:
        return _or_none(self.__mul__, other)

    def checked_div(self: W, other) -> Optional[W]:
        return _or_none(self.__floordiv__, other)

    def checked_ceil_div(self: W, other) -> Optional[W]:
        return _or_none(self.ceil_div, other)

    # -------------------------------------------------------------------------
    # Сравнения
    # -------------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        try:
            return int(self) == _operand(other)
        except TypeError:
            return NotImplemented

    def __lt__(self, other) -> bool:
        try:
            return int(self) < _operand(other)
        except TypeError:
            return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._words))

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class U192(WideUInt):
    """Беззнаковое 192-битное целое (3 слова)."""

    WORDS = 3
    INT_TYPE = int_types.U192
    __slots__ = ()


class U256(WideUInt):
    """Беззнаковое 256-битное целое (4 слова)."""

    WORDS = 4
    INT_TYPE = int_types.U256
    __slots__ = ()


def _operand(value) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not a valid integer operand")
    return operator.index(value)


def _or_none(op, other):
    try:
        return op(other)
    except MathError:
        return None
