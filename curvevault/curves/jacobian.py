"""
Jacobian-coordinate point arithmetic.

A point (X, Y, Z) stands for the affine point (X / Z^2, Y / Z^3). Doubling
and addition need no field inversion in this form, so a whole double-and-add
scan costs a single inversion when the result is converted back.

Coordinates are kept in the arithmetic context's internal (Montgomery)
representation. ``None`` is the point at infinity.
"""

from typing import NamedTuple, Optional

from ..core_crypto.fixed_width import FixedWidthUInt
from ..core_crypto.modular import ModularArithmetic


class JacobianPoint(NamedTuple):
    x: FixedWidthUInt
    y: FixedWidthUInt
    z: FixedWidthUInt


def jacobian_double(
    field: ModularArithmetic,
    a_encoded: FixedWidthUInt,
    point: Optional[JacobianPoint],
) -> Optional[JacobianPoint]:
    """
    2P for y^2 = x^3 + ax + b.

        M  = 3 X^2 + a Z^4
        S  = 4 X Y^2
        X3 = M^2 - 2 S
        Y3 = M (S - X3) - 8 Y^4
        Z3 = 2 Y Z
    """
    if point is None or not point.y:
        return None

    mul, add, sub = field.mul_encoded, field.add, field.sub
    x, y, z = point

    xx = mul(x, x)
    yy = mul(y, y)
    yyyy = mul(yy, yy)
    zz = mul(z, z)

    s = field.double(field.double(mul(x, yy)))
    m = add(add(field.double(xx), xx), mul(a_encoded, mul(zz, zz)))

    x3 = sub(mul(m, m), field.double(s))
    eight_yyyy = field.double(field.double(field.double(yyyy)))
    y3 = sub(mul(m, sub(s, x3)), eight_yyyy)
    z3 = field.double(mul(y, z))
    return JacobianPoint(x3, y3, z3)


def jacobian_add(
    field: ModularArithmetic,
    a_encoded: FixedWidthUInt,
    p: Optional[JacobianPoint],
    q: Optional[JacobianPoint],
) -> Optional[JacobianPoint]:
    """
    P + Q.

        U1 = X1 Z2^2,  U2 = X2 Z1^2
        S1 = Y1 Z2^3,  S2 = Y2 Z1^3
        H  = U2 - U1,  R  = S2 - S1
        X3 = R^2 - H^3 - 2 U1 H^2
        Y3 = R (U1 H^2 - X3) - S1 H^3
        Z3 = H Z1 Z2

    H == 0 means equal x coordinates: the points are equal (double) or
    opposite (infinity).
    """
    if p is None:
        return q
    if q is None:
        return p

    mul, sub = field.mul_encoded, field.sub
    x1, y1, z1 = p
    x2, y2, z2 = q

    z1z1 = mul(z1, z1)
    z2z2 = mul(z2, z2)
    u1 = mul(x1, z2z2)
    u2 = mul(x2, z1z1)
    s1 = mul(mul(y1, z2), z2z2)
    s2 = mul(mul(y2, z1), z1z1)

    h = sub(u2, u1)
    r = sub(s2, s1)
    if not h:
        if not r:
            return jacobian_double(field, a_encoded, p)
        return None

    hh = mul(h, h)
    hhh = mul(h, hh)
    v = mul(u1, hh)

    x3 = sub(sub(mul(r, r), hhh), field.double(v))
    y3 = sub(mul(r, sub(v, x3)), mul(s1, hhh))
    z3 = mul(mul(z1, z2), h)
    return JacobianPoint(x3, y3, z3)
