"""
Modular Arithmetic over Fixed-Width Integers

Implements the modular operations the curve layer is built on:
- Modular exponentiation (square-and-multiply algorithm)
- Modular inverse via Fermat's little theorem
- Overflow-safe modular add / sub / mul
- Euclidean GCD
- Miller-Rabin primality testing

Products of two W-bit residues need 2W bits. They are never computed with
the wrapping ``*`` operator; instead:
- odd moduli use Montgomery multiplication (R = 2^W) on top of the full
  widening product, with no division at all
- even moduli fall back to shift-and-add multiplication

Note: This implementation avoids Python's built-in pow(a, b, mod).
      All arithmetic goes through the fixed-width integer types.
"""

import secrets
from functools import lru_cache
from typing import Tuple, Type, Union

from .fixed_width import DivideByZeroError, FixedWidthUInt
from .uint256 import UInt256


# ============================================================================
# Constants
# ============================================================================

DEFAULT_PRIMALITY_ROUNDS = 24
SMALL_PRIMES = (3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)

Operand = Union[int, FixedWidthUInt]


class InvalidModularInverseError(ValueError):
    """mod_inverse called with a non-prime modulus or a non-invertible value."""


# ============================================================================
# Arithmetic contexts
# ============================================================================

class ModularArithmetic:
    """
    Arithmetic modulo a fixed-width modulus.

    Values have an internal representation (``encode`` / ``decode``); for this
    class it is the plain residue. Additions and subtractions work the same in
    either representation, so only multiplication needs to know about it.
    """

    def __init__(self, modulus: FixedWidthUInt):
        if not modulus:
            raise DivideByZeroError("modulus must be non-zero")
        self.modulus = modulus
        self.width = type(modulus)
        self.zero = self.width.zero()
        self.encoded_one = self.width.one() % modulus

    def reduce(self, value: FixedWidthUInt) -> FixedWidthUInt:
        if value < self.modulus:
            return value
        return value % self.modulus

    def add(self, a: FixedWidthUInt, b: FixedWidthUInt) -> FixedWidthUInt:
        """(a + b) mod m for a, b < m, without losing the carry bit."""
        total, carry = a.carrying_add(b)
        if carry or total >= self.modulus:
            total = total - self.modulus
        return total

    def sub(self, a: FixedWidthUInt, b: FixedWidthUInt) -> FixedWidthUInt:
        diff, borrow = a.borrowing_sub(b)
        if borrow:
            diff = diff + self.modulus
        return diff

    def neg(self, a: FixedWidthUInt) -> FixedWidthUInt:
        if not a:
            return a
        return self.modulus - a

    def double(self, a: FixedWidthUInt) -> FixedWidthUInt:
        return self.add(a, a)

    def encode(self, a: FixedWidthUInt) -> FixedWidthUInt:
        return self.reduce(a)

    def decode(self, a: FixedWidthUInt) -> FixedWidthUInt:
        return a

    def mul_encoded(self, a: FixedWidthUInt, b: FixedWidthUInt) -> FixedWidthUInt:
        """
        Shift-and-add multiplication.

        Scans b from its most significant bit, doubling the accumulator and
        adding a whenever the bit is set; every step stays below m.
        """
        result = self.zero
        for index in range(b.bit_length() - 1, -1, -1):
            result = self.add(result, result)
            if b.test_bit(index):
                result = self.add(result, a)
        return result

    def mul(self, a: FixedWidthUInt, b: FixedWidthUInt) -> FixedWidthUInt:
        """(a * b) mod m for residues a, b."""
        return self.mul_encoded(a, b)

    def square(self, a: FixedWidthUInt) -> FixedWidthUInt:
        return self.mul(a, a)

    def pow(self, base: FixedWidthUInt, exponent: FixedWidthUInt) -> FixedWidthUInt:
        """
        Square-and-multiply (right-to-left binary method).

        1. Start with result = 1
        2. For each bit of exponent (from LSB to MSB):
           - If bit is 1, multiply result by base (mod m)
           - Square the base (mod m)
        """
        if self.modulus == 1:
            return self.zero
        if not exponent:
            return self.width.one()

        base = self.encode(base)
        result = self.encoded_one

        while exponent:
            if exponent & 1:
                result = self.mul_encoded(result, base)
            exponent = exponent >> 1
            # the last squaring would be thrown away
            if exponent:
                base = self.mul_encoded(base, base)

        return self.decode(result)

    def inverse(self, x: FixedWidthUInt) -> FixedWidthUInt:
        """
        Fermat inverse x^(m-2) mod m.

        Only meaningful for prime m and x not divisible by m; the result is
        checked so a violated precondition raises instead of returning junk.

        Raises:
            InvalidModularInverseError: If x has no Fermat inverse modulo m
        """
        x = self.reduce(x)
        if not x:
            raise InvalidModularInverseError(f"0 has no inverse modulo {self.modulus}")
        inverse = self.pow(x, self.modulus - 2)
        if self.mul(inverse, x) != 1:
            raise InvalidModularInverseError(
                f"{x} has no Fermat inverse modulo {self.modulus} "
                f"(modulus not prime or not coprime)"
            )
        return inverse

    def __repr__(self) -> str:
        return f"{type(self).__name__}(modulus={self.modulus})"


class MontgomeryArithmetic(ModularArithmetic):
    """
    Montgomery arithmetic for an odd modulus m with R = 2^W.

    Values are kept as a*R mod m. A product is reduced with REDC:
        u = (T mod R) * n' mod R          where n' = -m^-1 mod R
        t = (T + u*m) / R                 exact division by R
    giving T * R^-1 mod m with one conditional subtraction.
    """

    def __init__(self, modulus: FixedWidthUInt):
        if not modulus & 1:
            raise ValueError("Montgomery arithmetic requires an odd modulus")
        super().__init__(modulus)
        self._n_prime = -_inverse_mod_word(modulus)

        # R mod m = (2^W - m) mod m
        r_mod = (-modulus) % modulus
        r2 = r_mod
        for _ in range(self.width.BITS):
            r2 = self.add(r2, r2)
        self._r2 = r2
        self.encoded_one = r_mod

    def _redc(self, high: FixedWidthUInt, low: FixedWidthUInt) -> FixedWidthUInt:
        m = self.modulus
        u = low * self._n_prime
        um_high, um_low = u.widening_mul(m)
        # low + um_low is 0 mod R by construction; only its carry matters
        _, carry = low.carrying_add(um_low)
        t, overflow = high.carrying_add(um_high, carry)
        if overflow or t >= m:
            t = t - m
        return t

    def mul_encoded(self, a: FixedWidthUInt, b: FixedWidthUInt) -> FixedWidthUInt:
        high, low = a.widening_mul(b)
        return self._redc(high, low)

    def encode(self, a: FixedWidthUInt) -> FixedWidthUInt:
        return self.mul_encoded(self.reduce(a), self._r2)

    def decode(self, a: FixedWidthUInt) -> FixedWidthUInt:
        return self._redc(self.zero, a)

    def mul(self, a: FixedWidthUInt, b: FixedWidthUInt) -> FixedWidthUInt:
        # (a*b*R^-1) * R^2 * R^-1 = a*b
        return self.mul_encoded(self.mul_encoded(a, b), self._r2)


def _inverse_mod_word(m: FixedWidthUInt) -> FixedWidthUInt:
    """
    m^-1 mod 2^W for odd m, by Newton iteration x <- x * (2 - m*x).

    Relies on the wrapping multiply: every step doubles the number of
    correct low bits, starting from 3 (m*m == 1 mod 8 for odd m).
    """
    x = m
    correct_bits = 3
    while correct_bits < m.BITS:
        x = x * (2 - m * x)
        correct_bits *= 2
    return x


@lru_cache(maxsize=64)
def _cached_arithmetic(width: Type[FixedWidthUInt], modulus: FixedWidthUInt) -> ModularArithmetic:
    if modulus & 1 and modulus != 1:
        return MontgomeryArithmetic(modulus)
    return ModularArithmetic(modulus)


def modular_arithmetic(modulus: FixedWidthUInt) -> ModularArithmetic:
    """Shared arithmetic context for a modulus (Montgomery when it is odd)."""
    if not modulus:
        raise DivideByZeroError("modulus must be non-zero")
    return _cached_arithmetic(type(modulus), modulus)


def _unify(*values: Operand) -> Tuple[FixedWidthUInt, ...]:
    """Promote operands to the widest fixed-width type among them."""
    width = UInt256
    widths = [type(v) for v in values if isinstance(v, FixedWidthUInt)]
    if widths:
        width = max(widths, key=lambda w: w.BITS)
    return tuple(width(v) if type(v) is not width else v for v in values)


# ============================================================================
# Public functions
# ============================================================================

def mod_exp(base: Operand, exponent: Operand, modulus: Operand) -> FixedWidthUInt:
    """
    Modular exponentiation using square-and-multiply algorithm.

    Computes (base^exponent) mod modulus without Python's pow(a, b, mod).

    Time complexity: O(log exponent) modular multiplications

    Args:
        base: The base number
        exponent: The exponent
        modulus: The modulus (must be non-zero)

    Returns:
        (base^exponent) mod modulus, as the widest fixed-width type among
        the arguments (UInt256 for plain ints). modulus == 1 gives 0 and
        otherwise exponent == 0 gives 1.

    Raises:
        DivideByZeroError: If modulus == 0
    """
    base, exponent, modulus = _unify(base, exponent, modulus)
    return modular_arithmetic(modulus).pow(base, exponent)


def mod_inverse(x: Operand, p: Operand) -> FixedWidthUInt:
    """
    Compute modular inverse via Fermat's little theorem: x^(p-2) mod p.

    Args:
        x: The number to find inverse of
        p: A prime modulus

    Returns:
        Modular inverse of x mod p

    Raises:
        InvalidModularInverseError: If p is not prime or p divides x
    """
    x, p = _unify(x, p)
    return modular_arithmetic(p).inverse(x)


def mod_add(a: Operand, b: Operand, modulus: Operand) -> FixedWidthUInt:
    a, b, modulus = _unify(a, b, modulus)
    ctx = modular_arithmetic(modulus)
    return ctx.add(ctx.reduce(a), ctx.reduce(b))


def mod_sub(a: Operand, b: Operand, modulus: Operand) -> FixedWidthUInt:
    a, b, modulus = _unify(a, b, modulus)
    ctx = modular_arithmetic(modulus)
    return ctx.sub(ctx.reduce(a), ctx.reduce(b))


def mod_mul(a: Operand, b: Operand, modulus: Operand) -> FixedWidthUInt:
    """(a * b) mod modulus using the full-width product (never wraps)."""
    a, b, modulus = _unify(a, b, modulus)
    ctx = modular_arithmetic(modulus)
    return ctx.mul(ctx.reduce(a), ctx.reduce(b))


def gcd(a: Operand, b: Operand) -> FixedWidthUInt:
    """
    Compute the greatest common divisor using Euclidean algorithm.

    Args:
        a: First integer
        b: Second integer

    Returns:
        GCD of a and b
    """
    a, b = _unify(a, b)
    while b:
        a, b = b, a % b
    return a


def is_probably_prime(n: Operand, rounds: int = DEFAULT_PRIMALITY_ROUNDS) -> bool:
    """
    Miller-Rabin primality test.

    A probabilistic test that determines if n is probably prime.
    Probability of false positive: at most (1/4)^rounds

    Algorithm:
    1. Write n-1 as 2^r * d (factor out powers of 2)
    2. For each random witness a:
       - Compute x = a^d mod n
       - If x = 1 or x = n-1, continue
       - Square x up to r-1 times, looking for n-1
       - If never found, n is composite

    Args:
        n: Number to test for primality
        rounds: Number of witnesses to test

    Returns:
        True if n is probably prime, False if definitely composite
    """
    (n,) = _unify(n)
    if n < 2:
        return False
    if n == 2:
        return True
    if not n & 1:
        return False

    for p in SMALL_PRIMES:
        if n == p:
            return True
        if not n % p:
            return False

    n_minus_one = n - 1
    r = n_minus_one.trailing_zeros()
    d = n_minus_one >> r

    ctx = modular_arithmetic(n)
    span = int(n) - 3
    for _ in range(rounds):
        # Random witness in range [2, n-2]
        a = type(n).from_int(secrets.randbelow(span) + 2)
        x = ctx.pow(a, d)
        if x == 1 or x == n_minus_one:
            continue

        composite = True
        for _ in range(r - 1):
            x = ctx.square(x)
            if x == n_minus_one:
                composite = False
                break

        if composite:
            return False

    return True
