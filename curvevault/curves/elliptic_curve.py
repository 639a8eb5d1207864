"""
Elliptic Curve Group over GF(p)

Implements the short-Weierstrass group y^2 = x^3 + ax + b (mod p):
- Point representation with an explicit point at infinity
- Affine point addition and doubling (chord-and-tangent rule)
- Scalar multiplication (double-and-add)

All coordinates are fixed-width unsigned integers; every field operation
goes through the modular arithmetic layer, and slopes use the Fermat
inverse.
"""

from dataclasses import dataclass
from typing import Optional, Type, Union

from ..core_crypto.fixed_width import FixedWidthUInt
from ..core_crypto.modular import ModularArithmetic, modular_arithmetic
from ..core_crypto.uint256 import UInt256
from .jacobian import JacobianPoint, jacobian_add, jacobian_double


Coordinate = Union[int, str, FixedWidthUInt]


def _as_width(value: Coordinate, width: Type[FixedWidthUInt]) -> FixedWidthUInt:
    if type(value) is width:
        return value
    if isinstance(value, FixedWidthUInt) and value.BITS > width.BITS:
        # Narrowing keeps the value; OverflowError if it does not fit
        return width.from_int(int(value))
    return width(value)


# ============================================================================
# Points
# ============================================================================

@dataclass(frozen=True)
class Point:
    """
    A curve point: finite (x, y) or the point at infinity.

    Infinity has both coordinates set to None, so it is structurally distinct
    from every finite point, whatever its coordinates.
    """
    x: Optional[FixedWidthUInt] = None
    y: Optional[FixedWidthUInt] = None

    def __post_init__(self):
        if (self.x is None) != (self.y is None):
            raise ValueError("a point needs both coordinates or neither")

    @classmethod
    def infinity(cls) -> 'Point':
        return INFINITY

    @classmethod
    def new(cls, x: Coordinate, y: Coordinate,
            width: Type[FixedWidthUInt] = UInt256) -> 'Point':
        """Finite point; ints and strings are converted to ``width``."""
        return cls(_as_width(x, width), _as_width(y, width))

    @property
    def is_infinity(self) -> bool:
        return self.x is None

    def __str__(self) -> str:
        if self.is_infinity:
            return "Point(infinity)"
        return f"Point({self.x}, {self.y})"


INFINITY = Point()


@dataclass(frozen=True)
class CurveParameters:
    """
    Domain parameters shared by both parties of an exchange.

    b and the group order are optional: arithmetic never needs them, only
    validation does.
    """
    p: FixedWidthUInt
    a: FixedWidthUInt
    g: Point
    b: Optional[FixedWidthUInt] = None
    order: Optional[FixedWidthUInt] = None
    name: str = ""

    @classmethod
    def create(
        cls,
        p: Coordinate,
        a: Coordinate,
        g: tuple,
        b: Optional[Coordinate] = None,
        order: Optional[Coordinate] = None,
        name: str = "",
        width: Type[FixedWidthUInt] = UInt256,
    ) -> 'CurveParameters':
        """Build parameters from ints/strings, converting to one width."""
        return cls(
            p=_as_width(p, width),
            a=_as_width(a, width),
            g=Point.new(g[0], g[1], width),
            b=None if b is None else _as_width(b, width),
            order=None if order is None else _as_width(order, width),
            name=name,
        )

    @property
    def width(self) -> Type[FixedWidthUInt]:
        return type(self.p)


# ============================================================================
# Group operations
# ============================================================================

class EllipticCurve:
    """
    Group law on y^2 = x^3 + ax + b over GF(p).

    Example:
        >>> curve = EllipticCurve(CurveParameters.create(17, 2, (5, 1), b=2))
        >>> curve.add(curve.params.g, curve.params.g) == Point.new(6, 3)
        True
    """

    def __init__(self, params: CurveParameters):
        self.params = params
        self.p = params.p
        self.field: ModularArithmetic = modular_arithmetic(params.p)
        self.a = self.field.reduce(params.a)
        self._a_encoded = self.field.encode(self.a)

    def _reduce(self, point: Point) -> Point:
        if point.is_infinity:
            return point
        x = self.field.reduce(_as_width(point.x, self.params.width))
        y = self.field.reduce(_as_width(point.y, self.params.width))
        if x is point.x and y is point.y:
            return point
        return Point(x, y)

    def add(self, p: Point, q: Point) -> Point:
        """
        Chord-and-tangent addition.

        - Either operand at infinity: return the other one
        - Same x, different y: vertical line, return infinity
        - Distinct x:  lambda = (Qy - Py) / (Qx - Px)
        - P == Q, y == 0: vertical tangent, return infinity
        - P == Q:      lambda = (3 Px^2 + a) / (2 Py)

        Then Rx = lambda^2 - Px - Qx and Ry = lambda (Px - Rx) - Py.
        """
        if p.is_infinity:
            return q
        if q.is_infinity:
            return p

        f = self.field
        p = self._reduce(p)
        q = self._reduce(q)

        if p.x == q.x and p.y != q.y:
            return INFINITY

        if p.x != q.x:
            slope = f.mul(f.sub(q.y, p.y), f.inverse(f.sub(q.x, p.x)))
        else:
            if not p.y:
                return INFINITY
            x_squared = f.mul(p.x, p.x)
            numerator = f.add(f.add(f.double(x_squared), x_squared), self.a)
            slope = f.mul(numerator, f.inverse(f.double(p.y)))

        rx = f.sub(f.sub(f.mul(slope, slope), p.x), q.x)
        ry = f.sub(f.mul(slope, f.sub(p.x, rx)), p.y)
        return Point(rx, ry)

    def double(self, point: Point) -> Point:
        return self.add(point, point)

    def negate(self, point: Point) -> Point:
        if point.is_infinity:
            return point
        point = self._reduce(point)
        return Point(point.x, self.field.neg(point.y))

    def is_on_curve(self, point: Point) -> bool:
        """
        Check y^2 == x^3 + ax + b (mod p).

        Raises:
            ValueError: If the parameters carry no b coefficient
        """
        if self.params.b is None:
            raise ValueError("curve coefficient b is required to test membership")
        if point.is_infinity:
            return True
        f = self.field
        if point.x >= self.p or point.y >= self.p:
            return False
        x = _as_width(point.x, self.params.width)
        y = _as_width(point.y, self.params.width)
        lhs = f.mul(y, y)
        rhs = f.add(f.add(f.mul(f.mul(x, x), x), f.mul(self.a, x)), f.reduce(self.params.b))
        return lhs == rhs

    def scalar_mul(self, point: Point, k: Coordinate) -> Point:
        """
        Compute k * point by double-and-add.

        Scans k from its least significant bit: when the bit is set the
        running point is added into the accumulator, then the running point
        is doubled. The accumulator starts at infinity, the identity.

        The running points are carried in Jacobian coordinates so no step
        needs an inversion; the result is converted back to affine once.
        """
        if isinstance(k, (int, str)):
            k = _as_width(k, self.params.width)
        if point.is_infinity or not k:
            return INFINITY

        f = self.field
        point = self._reduce(point)
        running: Optional[JacobianPoint] = JacobianPoint(
            f.encode(point.x), f.encode(point.y), f.encoded_one
        )
        accumulator: Optional[JacobianPoint] = None

        while k:
            if k & 1:
                accumulator = jacobian_add(f, self._a_encoded, accumulator, running)
            k = k >> 1
            if k:
                running = jacobian_double(f, self._a_encoded, running)

        return self._to_affine(accumulator)

    def _to_affine(self, point: Optional[JacobianPoint]) -> Point:
        if point is None:
            return INFINITY
        f = self.field
        z_inv = f.inverse(f.decode(point.z))
        z_inv2 = f.mul(z_inv, z_inv)
        x = f.mul(f.decode(point.x), z_inv2)
        y = f.mul(f.decode(point.y), f.mul(z_inv2, z_inv))
        return Point(x, y)

    def __repr__(self) -> str:
        return f"EllipticCurve({self.params.name or self.p})"
