"""
Тесты для модуля Wide Integers (U192, U256)

Проверяет:
1. Round-trip через little-endian байты фиксированного размера
2. Короткий буфер → BigNumberConversionError
3. Checked арифметику и сравнения
4. Сужение к u64/u128 без обрезания
"""

import pytest

from spot_margin.core.errors import BigNumberConversionError, MathError
from spot_margin.core.math.bignumber import U192, U256

# =============================================================================
# BYTE ROUND-TRIP
# =============================================================================


class TestByteRoundTrip:
    """Тесты для to_le_bytes / from_le_bytes / deserialize"""

    @pytest.mark.parametrize("wide", [U192, U256], ids=["U192", "U256"])
    def test_buffer_size_matches_bit_width(self, wide) -> None:
        """Размер буфера равен разрядности / 8"""
        assert len(wide(0).to_le_bytes()) == wide.bits() // 8
        assert wide.byte_width() == wide.bits() // 8

    @pytest.mark.parametrize(
        "wide,value",
        [
            (U192, 0),
            (U192, 1),
            (U192, 2**192 - 1),
            (U192, 0x1234_5678_9ABC_DEF0_0FED_CBA9_8765_4321_DEAD_BEEF),
            (U256, 0),
            (U256, 1),
            (U256, 2**256 - 1),
            (U256, 0x0123_4567_89AB_CDEF_FEDC_BA98_7654_3210_CAFE_BABE_8BAD_F00D),
        ],
    )
    def test_round_trip(self, wide, value: int) -> None:
        """decode(encode(x)) == x для 0, 1, max и середины диапазона"""
        original = wide(value)
        assert wide.from_le_bytes(original.to_le_bytes()) == original
        assert int(wide.from_le_bytes(original.to_le_bytes())) == value

    def test_little_endian_layout(self) -> None:
        """Младшее слово и младший байт идут первыми"""
        assert U192(1).to_le_bytes() == b"\x01" + b"\x00" * 23
        assert U256(1 << 64).words == (0, 1, 0, 0)

    def test_short_buffer_fails(self) -> None:
        """Буфер короче ширины типа → BigNumberConversionError"""
        with pytest.raises(BigNumberConversionError):
            U256.from_le_bytes(b"\x00" * 31)
        with pytest.raises(BigNumberConversionError):
            U192.from_le_bytes(b"")

    def test_deserialize_leaves_remaining_bytes(self) -> None:
        """deserialize возвращает значение и непрочитанный хвост"""
        buf = U192(42).to_le_bytes() + b"\xff\xee"
        value, rest = U192.deserialize(buf)
        assert value == 42
        assert rest == b"\xff\xee"

    def test_from_words(self) -> None:
        """Сборка из 64-битных слов с проверкой их количества"""
        assert U192.from_words((1, 0, 1)) == 1 + (1 << 128)
        with pytest.raises(ValueError):
            U192.from_words((1, 2))


# =============================================================================
# ARITHMETIC
# =============================================================================


class TestWideArithmetic:
    """Тесты для checked арифметики U192/U256"""

    def test_product_of_two_u128_fits_u256(self) -> None:
        """Произведение двух u128 помещается в U256"""
        a = U256(2**128 - 1)
        assert a * (2**128 - 1) == (2**128 - 1) ** 2

    def test_add_overflow(self) -> None:
        """Переполнение при сложении → MathError"""
        with pytest.raises(MathError):
            U192.max_value() + 1

    def test_sub_underflow(self) -> None:
        """Вычитание ниже нуля → MathError"""
        with pytest.raises(MathError):
            U256(0) - 1

    def test_division_by_zero(self) -> None:
        """Деление на ноль → MathError"""
        with pytest.raises(MathError):
            U256(10) // 0

    def test_div_mod_and_ceil_div(self) -> None:
        """Деление, остаток и деление с округлением вверх"""
        assert U192(7) // 2 == 3
        assert U192(7) % 2 == 1
        assert U192(7).ceil_div(2) == 4

    def test_checked_variants_return_none(self) -> None:
        """checked_* возвращают None вместо исключения"""
        assert U256.max_value().checked_add(1) is None
        assert U256(0).checked_sub(1) is None
        assert U256(5).checked_div(0) is None
        assert U256(5).checked_mul(2) == 10

    def test_result_keeps_type(self) -> None:
        """Результат арифметики сохраняет тип операнда"""
        assert isinstance(U192(1) + 1, U192)
        assert isinstance(3 * U256(2), U256)

    def test_comparisons(self) -> None:
        """Сравнение с wide-значениями и int"""
        assert U192(1) < U192(2)
        assert U256(5) >= 5
        assert U256(5) != U256(6)
        assert not U192(0)

    def test_negative_value_rejected(self) -> None:
        """Отрицательное значение не конструируется"""
        with pytest.raises(MathError):
            U192(-1)


# =============================================================================
# NARROWING
# =============================================================================


class TestNarrowing:
    """Тесты для to_u64 / to_u128 / try_to_*"""

    def test_fits(self) -> None:
        """Значение в диапазоне сужается без потерь"""
        assert U256(2**64 - 1).to_u64() == 2**64 - 1
        assert U192(2**128 - 1).try_to_u128() == 2**128 - 1

    def test_does_not_fit_returns_none(self) -> None:
        """Значение вне диапазона → None"""
        assert U256(2**64).to_u64() is None
        assert U256(2**128).to_u128() is None

    def test_try_raises(self) -> None:
        """try_to_* поднимают BigNumberConversionError"""
        with pytest.raises(BigNumberConversionError):
            U192(2**64).try_to_u64()
        with pytest.raises(BigNumberConversionError):
            U256(2**200).try_to_u128()
