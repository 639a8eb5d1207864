"""
CurveVault: fixed-width integers, modular arithmetic and ECDH.

The most used names are re-exported here; each subpackage documents its own
contents.
"""

from .core_crypto.uint128 import UInt128
from .core_crypto.uint256 import UInt256
from .core_crypto.modular import mod_exp, mod_inverse
from .curves.elliptic_curve import CurveParameters, EllipticCurve, Point
from .curves.named_curves import available_curves, get_curve
from .exchange.key_exchange import (
    ECDHParty,
    KeyExchangeSession,
    derive_shared_secret,
    generate_public_key,
    run_key_exchange,
)

__version__ = "1.0.0"

__all__ = [
    'UInt128',
    'UInt256',
    'mod_exp',
    'mod_inverse',
    'CurveParameters',
    'EllipticCurve',
    'Point',
    'available_curves',
    'get_curve',
    'ECDHParty',
    'KeyExchangeSession',
    'derive_shared_secret',
    'generate_public_key',
    'run_key_exchange',
]
