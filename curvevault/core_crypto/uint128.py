"""
128-bit Unsigned Integer

Two native 64-bit limbs. Python ints are unbounded, so every limb operation
masks explicitly to reproduce 64-bit machine wraparound.

The full 64x64 -> 128-bit limb product is formed from 32-bit quarter pieces
(four cross products plus carry propagation), the same way it is done on
hardware without a native 128-bit multiply.
"""

from .fixed_width import FixedWidthUInt


# ============================================================================
# Constants
# ============================================================================

LIMB_BITS = 64
QUARTER_BITS = 32
MASK_64 = (1 << LIMB_BITS) - 1
MASK_32 = (1 << QUARTER_BITS) - 1


class UInt128(FixedWidthUInt):
    """
    128-bit unsigned integer with mod 2^128 wraparound.

    Example:
        >>> a, b = UInt128("122"), UInt128("2312")
        >>> a * b == 282064
        True
        >>> UInt128.max_value() + 1 == 0
        True
    """

    __slots__ = ()

    BITS = 128
    HALF_BITS = LIMB_BITS

    _LIMB_ZERO = 0
    _LIMB_ONE = 1

    @staticmethod
    def _limb_from_int(value: int) -> int:
        return value

    @staticmethod
    def _limb_adc(a: int, b: int, carry) -> tuple:
        total = a + b + carry
        return total & MASK_64, total >> LIMB_BITS

    @staticmethod
    def _limb_sbb(a: int, b: int, borrow) -> tuple:
        diff = a - b - borrow
        return diff & MASK_64, 1 if diff < 0 else 0

    @staticmethod
    def _limb_mul(a: int, b: int) -> int:
        return (a * b) & MASK_64

    @staticmethod
    def _limb_mul_wide(a: int, b: int) -> tuple:
        a_lo, a_hi = a & MASK_32, a >> QUARTER_BITS
        b_lo, b_hi = b & MASK_32, b >> QUARTER_BITS

        lo_lo = a_lo * b_lo
        lo_hi = a_lo * b_hi
        hi_lo = a_hi * b_lo
        hi_hi = a_hi * b_hi

        # middle column collects at most three 32-bit terms
        middle = (lo_lo >> QUARTER_BITS) + (lo_hi & MASK_32) + (hi_lo & MASK_32)
        low = ((middle & MASK_32) << QUARTER_BITS) | (lo_lo & MASK_32)
        high = hi_hi + (lo_hi >> QUARTER_BITS) + (hi_lo >> QUARTER_BITS) + (middle >> QUARTER_BITS)
        return high, low

    @staticmethod
    def _limb_shl(a: int, n: int) -> int:
        if n >= LIMB_BITS:
            return 0
        return (a << n) & MASK_64

    @staticmethod
    def _limb_shr(a: int, n: int) -> int:
        if n >= LIMB_BITS:
            return 0
        return a >> n

    @staticmethod
    def _limb_not(a: int) -> int:
        return a ^ MASK_64

    @staticmethod
    def _limb_clz(a: int) -> int:
        return LIMB_BITS - a.bit_length()

    @staticmethod
    def _limb_ctz(a: int) -> int:
        if not a:
            return LIMB_BITS
        return (a & -a).bit_length() - 1

    @staticmethod
    def _limb_hex(a: int) -> str:
        return format(a, '016x')
