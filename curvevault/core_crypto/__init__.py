# Core Cryptography Module
"""
Core arithmetic implementations including:
- FixedWidthUInt base (two half-width limbs, wraparound mod 2^W)
- UInt128 (int limbs) and UInt256 (UInt128 limbs)
- Modular arithmetic (Montgomery products, square-and-multiply,
  Fermat inverse, Miller-Rabin)
"""

from .fixed_width import (
    FixedWidthUInt,
    DivideByZeroError,
    InvalidDigitError,
)
from .uint128 import UInt128
from .uint256 import UInt256
from .modular import (
    ModularArithmetic,
    MontgomeryArithmetic,
    InvalidModularInverseError,
    modular_arithmetic,
    mod_exp,
    mod_inverse,
    mod_add,
    mod_sub,
    mod_mul,
    gcd,
    is_probably_prime,
)

__all__ = [
    'FixedWidthUInt',
    'DivideByZeroError',
    'InvalidDigitError',
    'UInt128',
    'UInt256',
    'ModularArithmetic',
    'MontgomeryArithmetic',
    'InvalidModularInverseError',
    'modular_arithmetic',
    'mod_exp',
    'mod_inverse',
    'mod_add',
    'mod_sub',
    'mod_mul',
    'gcd',
    'is_probably_prime',
]
