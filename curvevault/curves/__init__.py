# Elliptic Curve Module
"""
Elliptic curve group implementations including:
- Points with an explicit point at infinity
- Affine addition and doubling with Fermat inverses
- Double-and-add scalar multiplication (Jacobian coordinates)
- Named curves (P-192, P-256, secp256k1, toy-17)
- Optional parameter, point and scalar validation
"""

from .elliptic_curve import (
    Point,
    INFINITY,
    CurveParameters,
    EllipticCurve,
)
from .named_curves import DEFAULT_CURVE, available_curves, get_curve
from .validation import (
    CurveValidationError,
    validate_curve_parameters,
    validate_public_point,
    validate_private_scalar,
)

__all__ = [
    'Point',
    'INFINITY',
    'CurveParameters',
    'EllipticCurve',
    'DEFAULT_CURVE',
    'available_curves',
    'get_curve',
    'CurveValidationError',
    'validate_curve_parameters',
    'validate_public_point',
    'validate_private_scalar',
]
