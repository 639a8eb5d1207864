"""
Optional validation of curve parameters, points and private scalars.

Nothing in the arithmetic calls these checks; they are entry points for
callers who want invalid inputs rejected instead of silently producing
meaningless results.
"""

from ..core_crypto.fixed_width import FixedWidthUInt
from ..core_crypto.modular import DEFAULT_PRIMALITY_ROUNDS, is_probably_prime
from .elliptic_curve import Coordinate, CurveParameters, EllipticCurve, Point


class CurveValidationError(ValueError):
    """Curve parameters, a point or a private scalar failed validation."""


def validate_curve_parameters(
    params: CurveParameters,
    primality_rounds: int = DEFAULT_PRIMALITY_ROUNDS,
) -> None:
    """
    Check the domain parameters.

    - p is an odd prime greater than 3
    - a and b are reduced mod p
    - 4a^3 + 27b^2 != 0 (mod p), i.e. the curve is non-singular
    - G is a finite point on the curve

    Raises:
        CurveValidationError: On the first failed check
    """
    p = params.p
    if params.b is None:
        raise CurveValidationError("curve coefficient b is required for validation")
    if p <= 3 or not p & 1:
        raise CurveValidationError(f"field modulus {p} must be an odd prime > 3")
    if params.a >= p or params.b >= p:
        raise CurveValidationError("curve coefficients must be reduced modulo p")
    if not is_probably_prime(p, primality_rounds):
        raise CurveValidationError(f"field modulus {p} is not prime")

    curve = EllipticCurve(params)
    f = curve.field
    a_cubed = f.mul(f.mul(params.a, params.a), params.a)
    b_squared = f.mul(params.b, params.b)
    four = params.width.from_int(4)
    twenty_seven = f.reduce(params.width.from_int(27))
    discriminant = f.add(f.mul(f.reduce(four), a_cubed), f.mul(twenty_seven, b_squared))
    if not discriminant:
        raise CurveValidationError("curve is singular (4a^3 + 27b^2 == 0 mod p)")

    if params.g.is_infinity:
        raise CurveValidationError("generator must be a finite point")
    if not curve.is_on_curve(params.g):
        raise CurveValidationError("generator is not on the curve")


def validate_public_point(params: CurveParameters, point: Point) -> None:
    """
    Reject infinity, unreduced coordinates and points off the curve.

    Raises:
        CurveValidationError: If the point is not a usable public key
    """
    if point.is_infinity:
        raise CurveValidationError("public point must not be the point at infinity")
    if point.x >= params.p or point.y >= params.p:
        raise CurveValidationError("public point coordinates must be reduced modulo p")
    if not EllipticCurve(params).is_on_curve(point):
        raise CurveValidationError("public point is not on the curve")


def validate_private_scalar(params: CurveParameters, scalar: Coordinate) -> None:
    """
    Require 1 <= scalar <= p - 1.

    Raises:
        CurveValidationError: If the scalar is out of range
    """
    if isinstance(scalar, str):
        scalar = params.width(scalar)
    # Compared as ints: the scalar's width need not match the curve's
    value = int(scalar) if isinstance(scalar, FixedWidthUInt) else scalar
    if value < 1 or value >= int(params.p):
        raise CurveValidationError("private scalar must lie in [1, p - 1]")
