# Key Exchange Module
"""
Two-party ECDH implementations including:
- Key pairs (chosen or random private scalar)
- Parties and a state-checked exchange session
- Optional concurrent execution of both parties
- Shared secret agreement check
"""

from .key_exchange import (
    ExchangeState,
    KeyExchangeError,
    KeyPair,
    ECDHParty,
    ExchangeResult,
    KeyExchangeSession,
    generate_public_key,
    derive_shared_secret,
    generate_private_scalar,
    run_key_exchange,
)

__all__ = [
    'ExchangeState',
    'KeyExchangeError',
    'KeyPair',
    'ECDHParty',
    'ExchangeResult',
    'KeyExchangeSession',
    'generate_public_key',
    'derive_shared_secret',
    'generate_private_scalar',
    'run_key_exchange',
]
