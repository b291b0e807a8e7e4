"""
Целочисленные типы фиксированной ширины.

Python int не ограничен по размеру, поэтому ширина каждой величины модели
(u8..u256, i8..i128) задаётся явным дескриптором IntType. Checked-арифметика
и приведения проверяют результат против диапазона дескриптора.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class IntType:
    """
    Дескриптор целочисленного типа фиксированной ширины.

    Attributes:
        name: Имя типа ('u64', 'i128', ...)
        bits: Ширина в битах
        signed: Знаковый ли тип (two's complement диапазон)
    """

    name: str
    bits: int
    signed: bool

    def __post_init__(self):
        if self.bits <= 0 or self.bits % 8 != 0:
            raise ValueError(f"bits must be a positive multiple of 8, got {self.bits}")

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    @property
    def byte_width(self) -> int:
        return self.bits // 8

    def contains(self, value: int) -> bool:
        """Представимо ли value в этом типе без потерь."""
        return self.min_value <= value <= self.max_value

    def __str__(self) -> str:
        return self.name


U8 = IntType("u8", 8, False)
U16 = IntType("u16", 16, False)
U32 = IntType("u32", 32, False)
U64 = IntType("u64", 64, False)
U128 = IntType("u128", 128, False)
U192 = IntType("u192", 192, False)
U256 = IntType("u256", 256, False)

I8 = IntType("i8", 8, True)
I16 = IntType("i16", 16, True)
I32 = IntType("i32", 32, True)
I64 = IntType("i64", 64, True)
I128 = IntType("i128", 128, True)

ALL_INT_TYPES: tuple[IntType, ...] = (U8, U16, U32, U64, U128, U192, U256, I8, I16, I32, I64, I128)
