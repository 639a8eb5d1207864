"""
Fixed-Width Unsigned Integer Base

Implements the arithmetic shared by every two-limb unsigned integer type:
- Addition / subtraction with carry and borrow propagation
- Schoolbook multiplication (wrapping and full-width)
- Binary long division aligned on leading-zero counts
- Bitwise operators and limb-crossing shifts
- Decimal / hexadecimal parsing and rendering

A W-bit value is stored as two W/2-bit limbs: value = high * 2^(W/2) + low.
Every arithmetic result is reduced modulo 2^W, so overflow wraps around
silently exactly like a native machine word.

Subclasses only describe their limb type through the ``_limb_*`` hooks;
all algorithms below are written once against those hooks.
"""

import operator
from typing import Optional, Tuple


# ============================================================================
# Constants
# ============================================================================

# Largest power of ten that fits in 64 bits, used to render decimals in chunks
DECIMAL_CHUNK = 10 ** 19
DECIMAL_CHUNK_DIGITS = 19

_DECIMAL_DIGITS = {c: i for i, c in enumerate("0123456789")}
_HEX_DIGITS = {c: i for i, c in enumerate("0123456789abcdef")}
_HEX_DIGITS.update({c: i for i, c in enumerate("ABCDEF", start=10)})


# ============================================================================
# Errors
# ============================================================================

class DivideByZeroError(ZeroDivisionError):
    """Division or remainder with a zero divisor."""


class InvalidDigitError(ValueError):
    """A string constructor received a character outside its digit set."""

    def __init__(self, text: str, position: int, base: int):
        self.text = text
        self.position = position
        self.base = base
        if position < len(text):
            detail = f"invalid base-{base} digit {text[position]!r} at position {position}"
        else:
            detail = f"no base-{base} digits in {text!r}"
        super().__init__(detail)


# ============================================================================
# Generic two-limb integer
# ============================================================================

class FixedWidthUInt:
    """
    Unsigned integer of ``BITS`` bits made of two ``HALF_BITS``-bit limbs.

    Instances are immutable values. Operators accept another instance of the
    same type, a narrower fixed-width value (zero-extended) or a non-negative
    Python int that fits in ``BITS`` bits.
    """

    __slots__ = ('_high', '_low')

    BITS = 0
    HALF_BITS = 0

    # Set by subclasses once the limb type exists
    _LIMB_ZERO = None
    _LIMB_ONE = None

    # ------------------------------------------------------------------
    # Limb hooks
    # ------------------------------------------------------------------

    @staticmethod
    def _limb_from_int(value: int):
        raise NotImplementedError

    @staticmethod
    def _limb_adc(a, b, carry):
        """Return (a + b + carry) mod 2^(W/2) and the carry out."""
        raise NotImplementedError

    @staticmethod
    def _limb_sbb(a, b, borrow):
        """Return (a - b - borrow) mod 2^(W/2) and the borrow out."""
        raise NotImplementedError

    @staticmethod
    def _limb_mul(a, b):
        raise NotImplementedError

    @staticmethod
    def _limb_mul_wide(a, b):
        raise NotImplementedError

    @staticmethod
    def _limb_shl(a, n: int):
        raise NotImplementedError

    @staticmethod
    def _limb_shr(a, n: int):
        raise NotImplementedError

    @staticmethod
    def _limb_not(a):
        raise NotImplementedError

    @staticmethod
    def _limb_clz(a) -> int:
        raise NotImplementedError

    @staticmethod
    def _limb_ctz(a) -> int:
        raise NotImplementedError

    @staticmethod
    def _limb_hex(a) -> str:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(self, value=0):
        """
        Build a value from an int, a string or another fixed-width integer.

        Strings starting with ``0x`` are parsed as hexadecimal, anything else
        as decimal.
        """
        if isinstance(value, str):
            other = self.from_string(value)
        else:
            other = self._coerce(value)
            if other is None:
                raise TypeError(
                    f"cannot build {type(self).__name__} from {type(value).__name__}"
                )
        self._high = other._high
        self._low = other._low

    @classmethod
    def _make(cls, high, low) -> 'FixedWidthUInt':
        obj = object.__new__(cls)
        obj._high = high
        obj._low = low
        return obj

    @classmethod
    def zero(cls) -> 'FixedWidthUInt':
        return cls._make(cls._LIMB_ZERO, cls._LIMB_ZERO)

    @classmethod
    def one(cls) -> 'FixedWidthUInt':
        return cls._make(cls._LIMB_ZERO, cls._LIMB_ONE)

    @classmethod
    def max_value(cls) -> 'FixedWidthUInt':
        full = cls._limb_not(cls._LIMB_ZERO)
        return cls._make(full, full)

    @classmethod
    def from_int(cls, value: int) -> 'FixedWidthUInt':
        """
        Build from a Python int in [0, 2^BITS).

        Raises:
            ValueError: If value is negative
            OverflowError: If value does not fit in BITS bits
        """
        value = operator.index(value)
        if value < 0:
            raise ValueError(f"{cls.__name__} cannot hold negative value {value}")
        if value >> cls.BITS:
            raise OverflowError(f"{value} does not fit in {cls.BITS} bits")
        half_mask = (1 << cls.HALF_BITS) - 1
        return cls._make(
            cls._limb_from_int(value >> cls.HALF_BITS),
            cls._limb_from_int(value & half_mask),
        )

    @classmethod
    def from_u64(cls, value: int) -> 'FixedWidthUInt':
        """Zero-extend a native 64-bit unsigned value into the low limb."""
        value = operator.index(value)
        if not 0 <= value < (1 << 64):
            raise OverflowError(f"{value} is not a 64-bit unsigned value")
        return cls.from_int(value)

    @classmethod
    def from_parts(cls, high, low) -> 'FixedWidthUInt':
        """Build from an explicit (high, low) limb pair."""
        return cls._make(cls._as_limb(high), cls._as_limb(low))

    @classmethod
    def _as_limb(cls, value):
        if isinstance(value, int):
            if not 0 <= value < (1 << cls.HALF_BITS):
                raise OverflowError(f"{value} does not fit in a {cls.HALF_BITS}-bit limb")
            return cls._limb_from_int(value)
        if isinstance(value, type(cls._LIMB_ZERO)):
            return value
        raise TypeError(f"invalid limb type {type(value).__name__}")

    @classmethod
    def from_decimal_string(cls, text: str) -> 'FixedWidthUInt':
        """
        Parse a decimal string by repeated ``value = value * 10 + digit``.

        Digits beyond the width wrap around like every other operation.

        Raises:
            InvalidDigitError: On an empty string or a non-decimal character
        """
        if not text:
            raise InvalidDigitError(text, 0, 10)
        ten = cls.from_int(10)
        value = cls.zero()
        for position, char in enumerate(text):
            digit = _DECIMAL_DIGITS.get(char)
            if digit is None:
                raise InvalidDigitError(text, position, 10)
            value = value * ten + digit
        return value

    @classmethod
    def from_hex_string(cls, text: str) -> 'FixedWidthUInt':
        """
        Parse a hexadecimal string, with or without a ``0x`` prefix.

        Raises:
            InvalidDigitError: On an empty body or a non-hex character
        """
        start = 2 if text[:2] in ('0x', '0X') else 0
        if len(text) == start:
            raise InvalidDigitError(text, start, 16)
        sixteen = cls.from_int(16)
        value = cls.zero()
        for position in range(start, len(text)):
            digit = _HEX_DIGITS.get(text[position])
            if digit is None:
                raise InvalidDigitError(text, position, 16)
            value = value * sixteen + digit
        return value

    @classmethod
    def from_string(cls, text: str) -> 'FixedWidthUInt':
        if text[:2] in ('0x', '0X'):
            return cls.from_hex_string(text)
        return cls.from_decimal_string(text)

    @classmethod
    def _coerce(cls, value) -> Optional['FixedWidthUInt']:
        """Convert an operand to this type, or None if it is not numeric."""
        if type(value) is cls:
            return value
        if isinstance(value, FixedWidthUInt):
            if value.BITS > cls.BITS:
                return None
            return cls.from_int(int(value))
        if isinstance(value, int):
            return cls.from_int(value)
        return None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def high(self):
        return self._high

    @property
    def low(self):
        return self._low

    def high_half(self):
        """Upper limb."""
        return self._high

    def low_half(self):
        """Lower limb."""
        return self._low

    # ------------------------------------------------------------------
    # Addition / subtraction
    # ------------------------------------------------------------------

    def carrying_add(self, other, carry=0) -> Tuple['FixedWidthUInt', int]:
        """
        Add with an incoming carry.

        Returns:
            (sum mod 2^BITS, carry out of the high limb)
        """
        other = self._coerce(other)
        low, carry = self._limb_adc(self._low, other._low, carry)
        high, carry = self._limb_adc(self._high, other._high, carry)
        return self._make(high, low), carry

    def borrowing_sub(self, other, borrow=0) -> Tuple['FixedWidthUInt', int]:
        """
        Subtract with an incoming borrow.

        Returns:
            (difference mod 2^BITS, borrow out of the high limb)
        """
        other = self._coerce(other)
        low, borrow = self._limb_sbb(self._low, other._low, borrow)
        high, borrow = self._limb_sbb(self._high, other._high, borrow)
        return self._make(high, low), borrow

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        low, carry = self._limb_adc(self._low, other._low, 0)
        high, _ = self._limb_adc(self._high, other._high, carry)
        return self._make(high, low)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        low, borrow = self._limb_sbb(self._low, other._low, 0)
        high, _ = self._limb_sbb(self._high, other._high, borrow)
        return self._make(high, low)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other.__sub__(self)

    def __neg__(self):
        return (~self) + 1

    # ------------------------------------------------------------------
    # Multiplication
    # ------------------------------------------------------------------

    def __mul__(self, other):
        """
        Wrapping product: low BITS bits of the true product.

        Only low*low needs the full double-width limb product; the cross
        terms land entirely in the high limb, where their own overflow is
        discarded.
        """
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        high, low = self._limb_mul_wide(self._low, other._low)
        high, _ = self._limb_adc(high, self._limb_mul(self._low, other._high), 0)
        high, _ = self._limb_adc(high, self._limb_mul(self._high, other._low), 0)
        return self._make(high, low)

    def __rmul__(self, other):
        return self.__mul__(other)

    def widening_mul(self, other) -> Tuple['FixedWidthUInt', 'FixedWidthUInt']:
        """
        Full 2*BITS-bit product.

        Returns:
            (high, low) such that self * other == high * 2^BITS + low
        """
        other = self._coerce(other)
        adc = self._limb_adc
        zero = self._LIMB_ZERO

        p0_hi, p0_lo = self._limb_mul_wide(self._low, other._low)
        p1_hi, p1_lo = self._limb_mul_wide(self._low, other._high)
        p2_hi, p2_lo = self._limb_mul_wide(self._high, other._low)
        p3_hi, p3_lo = self._limb_mul_wide(self._high, other._high)

        w1, c1 = adc(p0_hi, p1_lo, 0)
        w1, c2 = adc(w1, p2_lo, 0)
        w2, d1 = adc(p1_hi, p2_hi, c1)
        w2, d2 = adc(w2, p3_lo, c2)
        # column 3 cannot overflow: the product fits in 2*BITS bits
        w3, _ = adc(p3_hi, zero, d1)
        w3, _ = adc(w3, zero, d2)

        return self._make(w3, w2), self._make(w1, p0_lo)

    # ------------------------------------------------------------------
    # Division
    # ------------------------------------------------------------------

    def div_rem(self, other) -> Tuple['FixedWidthUInt', 'FixedWidthUInt']:
        """
        Binary long division.

        The divisor is shifted left until its leading bit lines up with the
        dividend's, then one quotient bit is produced per shift back down.

        Returns:
            (quotient, remainder)

        Raises:
            DivideByZeroError: If other is zero
        """
        divisor = self._coerce(other)
        if divisor is None:
            raise TypeError(f"cannot divide by {type(other).__name__}")
        if not divisor:
            raise DivideByZeroError(f"{type(self).__name__} division by zero")
        if self < divisor:
            return self.zero(), self

        shift = divisor.leading_zeros() - self.leading_zeros()
        divisor = divisor << shift
        quotient = self.zero()
        remainder = self
        one = self.one()

        for _ in range(shift + 1):
            quotient = quotient << 1
            if remainder >= divisor:
                remainder = remainder - divisor
                quotient = quotient | one
            divisor = divisor >> 1

        return quotient, remainder

    def __floordiv__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self.div_rem(other)[0]

    def __rfloordiv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other.div_rem(self)[0]

    def __mod__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self.div_rem(other)[1]

    def __rmod__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other.div_rem(self)[1]

    def __divmod__(self, other):
        if self._coerce(other) is None:
            return NotImplemented
        return self.div_rem(other)

    def __rdivmod__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other.div_rem(self)

    # ------------------------------------------------------------------
    # Bitwise operators
    # ------------------------------------------------------------------

    def __and__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._make(self._high & other._high, self._low & other._low)

    __rand__ = __and__

    def __or__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._make(self._high | other._high, self._low | other._low)

    __ror__ = __or__

    def __xor__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._make(self._high ^ other._high, self._low ^ other._low)

    __rxor__ = __xor__

    def __invert__(self):
        return self._make(self._limb_not(self._high), self._limb_not(self._low))

    def __lshift__(self, amount):
        amount = operator.index(amount)
        if amount < 0:
            raise ValueError("negative shift count")
        if amount == 0:
            return self
        if amount >= self.BITS:
            return self.zero()
        half = self.HALF_BITS
        if amount >= half:
            return self._make(self._limb_shl(self._low, amount - half), self._LIMB_ZERO)
        high = self._limb_shl(self._high, amount) | self._limb_shr(self._low, half - amount)
        return self._make(high, self._limb_shl(self._low, amount))

    def __rshift__(self, amount):
        amount = operator.index(amount)
        if amount < 0:
            raise ValueError("negative shift count")
        if amount == 0:
            return self
        if amount >= self.BITS:
            return self.zero()
        half = self.HALF_BITS
        if amount >= half:
            return self._make(self._LIMB_ZERO, self._limb_shr(self._high, amount - half))
        low = self._limb_shr(self._low, amount) | self._limb_shl(self._high, half - amount)
        return self._make(self._limb_shr(self._high, amount), low)

    # ------------------------------------------------------------------
    # Bit counting
    # ------------------------------------------------------------------

    def leading_zeros(self) -> int:
        if not self._high:
            return self.HALF_BITS + self._limb_clz(self._low)
        return self._limb_clz(self._high)

    def trailing_zeros(self) -> int:
        if not self._low:
            return self.HALF_BITS + self._limb_ctz(self._high)
        return self._limb_ctz(self._low)

    def bit_length(self) -> int:
        return self.BITS - self.leading_zeros()

    def test_bit(self, index: int) -> bool:
        if not 0 <= index < self.BITS:
            return False
        if index >= self.HALF_BITS:
            limb, index = self._high, index - self.HALF_BITS
        else:
            limb = self._low
        return bool(self._limb_shr(limb, index) & self._LIMB_ONE)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def _compare(self, other):
        """Three-way comparison: -1, 0, 1, or NotImplemented."""
        if type(other) is not type(self):
            if isinstance(other, int):
                # Python ints outside the representable range still order
                if other < 0:
                    return 1
                if other >> self.BITS:
                    return -1
            elif isinstance(other, FixedWidthUInt) and other.BITS > self.BITS:
                return NotImplemented
            other = self._coerce(other)
            if other is None:
                return NotImplemented
        if self._high != other._high:
            return -1 if self._high < other._high else 1
        if self._low != other._low:
            return -1 if self._low < other._low else 1
        return 0

    def __eq__(self, other):
        result = self._compare(other)
        if result is NotImplemented:
            return result
        return result == 0

    def __ne__(self, other):
        result = self._compare(other)
        if result is NotImplemented:
            return result
        return result != 0

    def __lt__(self, other):
        result = self._compare(other)
        if result is NotImplemented:
            return result
        return result < 0

    def __le__(self, other):
        result = self._compare(other)
        if result is NotImplemented:
            return result
        return result <= 0

    def __gt__(self, other):
        result = self._compare(other)
        if result is NotImplemented:
            return result
        return result > 0

    def __ge__(self, other):
        result = self._compare(other)
        if result is NotImplemented:
            return result
        return result >= 0

    def __bool__(self):
        return bool(self._high) or bool(self._low)

    def __hash__(self):
        return hash(int(self))

    # ------------------------------------------------------------------
    # Conversion and rendering
    # ------------------------------------------------------------------

    def __int__(self):
        return (int(self._high) << self.HALF_BITS) | int(self._low)

    __index__ = __int__

    def _hex_digits(self) -> str:
        return self._limb_hex(self._high) + self._limb_hex(self._low)

    def to_hex_string(self) -> str:
        """Zero-padded hexadecimal with a ``0x`` prefix."""
        return '0x' + self._hex_digits()

    def to_decimal_string(self) -> str:
        """
        Render in base 10.

        Storage is binary, so the value is peeled off DECIMAL_CHUNK at a
        time with div_rem; every chunk but the most significant is
        zero-padded to DECIMAL_CHUNK_DIGITS.
        """
        if not self:
            return "0"
        chunk = self.from_int(DECIMAL_CHUNK)
        parts = []
        value = self
        while value:
            value, remainder = value.div_rem(chunk)
            parts.append(int(remainder))
        text = str(parts.pop())
        for part in reversed(parts):
            text += str(part).rjust(DECIMAL_CHUNK_DIGITS, '0')
        return text

    def __str__(self):
        return self.to_decimal_string()

    def __repr__(self):
        return f"{type(self).__name__}({self.to_hex_string()})"

    def __reduce__(self):
        return (type(self).from_int, (int(self),))
