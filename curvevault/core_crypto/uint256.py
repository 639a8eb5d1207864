"""
256-bit Unsigned Integer

Composed of two UInt128 limbs. Every limb-level operation is forwarded to
UInt128, so the 256-bit type reuses the generic two-limb algorithms without
any arithmetic of its own.
"""

from .fixed_width import FixedWidthUInt
from .uint128 import UInt128


class UInt256(FixedWidthUInt):
    """256-bit unsigned integer with mod 2^256 wraparound."""

    __slots__ = ()

    BITS = 256
    HALF_BITS = UInt128.BITS

    _LIMB_ZERO = UInt128.zero()
    _LIMB_ONE = UInt128.one()

    @staticmethod
    def _limb_from_int(value: int) -> UInt128:
        return UInt128.from_int(value)

    @staticmethod
    def _limb_adc(a: UInt128, b: UInt128, carry):
        return a.carrying_add(b, carry)

    @staticmethod
    def _limb_sbb(a: UInt128, b: UInt128, borrow):
        return a.borrowing_sub(b, borrow)

    @staticmethod
    def _limb_mul(a: UInt128, b: UInt128) -> UInt128:
        return a * b

    @staticmethod
    def _limb_mul_wide(a: UInt128, b: UInt128):
        return a.widening_mul(b)

    @staticmethod
    def _limb_shl(a: UInt128, n: int) -> UInt128:
        return a << n

    @staticmethod
    def _limb_shr(a: UInt128, n: int) -> UInt128:
        return a >> n

    @staticmethod
    def _limb_not(a: UInt128) -> UInt128:
        return ~a

    @staticmethod
    def _limb_clz(a: UInt128) -> int:
        return a.leading_zeros()

    @staticmethod
    def _limb_ctz(a: UInt128) -> int:
        return a.trailing_zeros()

    @staticmethod
    def _limb_hex(a: UInt128) -> str:
        return a._hex_digits()
