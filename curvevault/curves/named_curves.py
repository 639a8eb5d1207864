"""
Named curve parameter sets.

Hex constants are parsed through the fixed-width string constructors when a
curve is first requested.
"""

from functools import lru_cache
from typing import Dict, List

from .elliptic_curve import CurveParameters


DEFAULT_CURVE = "P-192"

_CURVE_DEFINITIONS: Dict[str, Dict[str, object]] = {
    # NIST P-192 / secp192r1
    "P-192": {
        "p": "0xfffffffffffffffffffffffffffffffeffffffffffffffff",
        "a": "0xfffffffffffffffffffffffffffffffefffffffffffffffc",
        "b": "0x64210519e59c80e70fa7e9ab72243049feb8deecc146b9b1",
        "g": (
            "0x188da80eb03090f67cbf20eb43a18800f4ff0afd82ff1012",
            "0x07192b95ffc8da78631011ed6b24cdd573f977a11e794811",
        ),
        "order": "0xffffffffffffffffffffffff99def836146bc9b1b4d22831",
    },
    # NIST P-256 / secp256r1
    "P-256": {
        "p": "0xffffffff00000001000000000000000000000000ffffffffffffffffffffffff",
        "a": "0xffffffff00000001000000000000000000000000fffffffffffffffffffffffc",
        "b": "0x5ac635d8aa3a93e7b3ebbd55769886bc651d06b0cc53b0f63bce3c3e27d2604b",
        "g": (
            "0x6b17d1f2e12c4247f8bce6e563a440f277037d812deb33a0f4a13945d898c296",
            "0x4fe342e2fe1a7f9b8ee7eb4a7c0f9e162bce33576b315ececbb6406837bf51f5",
        ),
        "order": "0xffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551",
    },
    "secp256k1": {
        "p": "0xfffffffffffffffffffffffffffffffffffffffffffffffffffffffefffffc2f",
        "a": "0x0",
        "b": "0x7",
        "g": (
            "0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798",
            "0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8",
        ),
        "order": "0xfffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141",
    },
    # Textbook example y^2 = x^3 + 2x + 2 over GF(17), generator of order 19
    "toy-17": {
        "p": "17",
        "a": "2",
        "b": "2",
        "g": ("5", "1"),
        "order": "19",
    },
}


def available_curves() -> List[str]:
    return sorted(_CURVE_DEFINITIONS)


@lru_cache(maxsize=None)
def get_curve(name: str = DEFAULT_CURVE) -> CurveParameters:
    """
    Look up curve parameters by name.

    Raises:
        KeyError: If the curve is unknown
    """
    try:
        definition = _CURVE_DEFINITIONS[name]
    except KeyError:
        raise KeyError(
            f"unknown curve {name!r}; available: {', '.join(available_curves())}"
        ) from None
    return CurveParameters.create(
        p=definition["p"],
        a=definition["a"],
        b=definition["b"],
        g=definition["g"],
        order=definition["order"],
        name=name,
    )
