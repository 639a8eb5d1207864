"""
Unit tests for modular arithmetic.

Tests:
- Square-and-multiply exponentiation and its edge cases
- Fermat inverse and precondition checks
- Montgomery and shift-and-add products near the top of the width
- GCD and Miller-Rabin
"""

import random

import pytest
from curvevault.core_crypto.fixed_width import DivideByZeroError
from curvevault.core_crypto.modular import (
    InvalidModularInverseError,
    ModularArithmetic,
    MontgomeryArithmetic,
    gcd,
    is_probably_prime,
    mod_add,
    mod_exp,
    mod_inverse,
    mod_mul,
    mod_sub,
    modular_arithmetic,
)
from curvevault.core_crypto.uint128 import UInt128
from curvevault.core_crypto.uint256 import UInt256


P192 = 6277101735386680763835789423207666416083908700390324961279
P256 = 0xffffffff00000001000000000000000000000000ffffffffffffffffffffffff
# Largest prime below 2^128
P128 = (1 << 128) - 159


class TestModExp:
    """Tests for modular exponentiation."""

    def test_basic(self):
        """Test basic modular exponentiation."""
        assert mod_exp(2, 10, 1000) == 24
        assert mod_exp(3, 4, 5) == 1
        assert mod_exp(4, 13, 497) == 445

    def test_result_type(self):
        assert type(mod_exp(2, 10, 1000)) is UInt256
        assert type(mod_exp(UInt128.from_int(2), 10, 1000)) is UInt128

    def test_large_numbers(self):
        """Test with large numbers."""
        base = 12345678901234567890
        exp = 98765432109876543210
        mod = 1000000007
        assert mod_exp(base, exp, mod) == pow(base, exp, mod)

    def test_matches_native_pow(self):
        rng = random.Random(31)
        for modulus in (P192, P256, (1 << 256) - 2, 2 ** 200):
            for _ in range(3):
                base = rng.getrandbits(256)
                exp = rng.getrandbits(32)
                assert mod_exp(base, exp, modulus) == pow(base, exp, modulus)

    def test_exponent_zero(self):
        assert mod_exp(0, 0, 7) == 1
        assert mod_exp(5, 0, 1000) == 1

    def test_modulus_one(self):
        """Modulus 1 wins over exponent 0."""
        assert mod_exp(5, 3, 1) == 0
        assert mod_exp(5, 0, 1) == 0

    def test_modulus_zero(self):
        with pytest.raises(DivideByZeroError):
            mod_exp(5, 3, 0)

    def test_base_larger_than_modulus(self):
        assert mod_exp(1000, 3, 7) == pow(1000, 3, 7)


class TestModInverse:
    """Tests for the Fermat inverse."""

    def test_small(self):
        assert mod_inverse(3, 7) == 5
        assert mod_inverse(5, 17) == 7

    def test_fermat_check(self):
        rng = random.Random(17)
        for p in (P192, P256):
            for _ in range(3):
                x = rng.randrange(1, p)
                assert mod_mul(x, mod_inverse(x, p), p) == 1

    def test_inverse_in_128_bits(self):
        x = UInt128.from_int(123456789)
        inv = mod_inverse(x, UInt128.from_int(P128))
        assert type(inv) is UInt128
        assert (123456789 * int(inv)) % P128 == 1

    def test_zero_has_no_inverse(self):
        with pytest.raises(InvalidModularInverseError):
            mod_inverse(0, 7)
        with pytest.raises(InvalidModularInverseError):
            mod_inverse(14, 7)

    def test_non_prime_modulus_detected(self):
        with pytest.raises(InvalidModularInverseError):
            mod_inverse(3, 9)
        with pytest.raises(InvalidModularInverseError):
            mod_inverse(2, 8)


class TestModularProducts:
    """Products that overflow the width before reduction."""

    def test_near_width_odd_modulus(self):
        p = (1 << 256) - 189  # prime
        a, b = p - 1, p - 2
        assert mod_mul(a, b, p) == (a * b) % p

    def test_near_width_even_modulus(self):
        m = (1 << 256) - 2
        a, b = m - 1, m - 3
        assert mod_mul(a, b, m) == (a * b) % m

    def test_add_sub_with_carry(self):
        m = (1 << 256) - 189
        a, b = m - 1, m - 2
        assert mod_add(a, b, m) == (a + b) % m
        assert mod_sub(5, b, m) == (5 - b) % m

    def test_random_products(self):
        rng = random.Random(3)
        for _ in range(10):
            a, b = rng.randrange(P192), rng.randrange(P192)
            assert mod_mul(a, b, P192) == (a * b) % P192

    def test_context_selection(self):
        assert isinstance(modular_arithmetic(UInt256.from_int(P192)), MontgomeryArithmetic)
        ctx = modular_arithmetic(UInt256.from_int(1000))
        assert type(ctx) is ModularArithmetic

    def test_context_is_cached(self):
        assert modular_arithmetic(UInt256.from_int(P192)) is modular_arithmetic(UInt256.from_int(P192))

    def test_montgomery_round_trip(self):
        ctx = modular_arithmetic(UInt256.from_int(P256))
        x = UInt256.from_int(987654321)
        assert ctx.decode(ctx.encode(x)) == x

    def test_montgomery_rejects_even_modulus(self):
        with pytest.raises(ValueError):
            MontgomeryArithmetic(UInt256.from_int(10))


class TestGCD:
    """Tests for GCD."""

    def test_gcd(self):
        assert gcd(48, 18) == 6
        assert gcd(17, 13) == 1
        assert gcd(0, 5) == 5

    def test_gcd_large(self):
        a = 2 ** 100 * 3
        b = 2 ** 90 * 9
        assert gcd(a, b) == 2 ** 90 * 3


class TestMillerRabin:
    """Tests for Miller-Rabin primality."""

    def test_small_primes(self):
        for p in (2, 3, 5, 7, 11, 13, 97, 101):
            assert is_probably_prime(p)

    def test_small_composites(self):
        for n in (0, 1, 4, 9, 15, 91, 561):
            assert not is_probably_prime(n)

    def test_curve_primes(self):
        assert is_probably_prime(P192, rounds=8)
        assert is_probably_prime(P256, rounds=8)
        assert not is_probably_prime(P128 * P128)
        assert not is_probably_prime(P128 * 3)
