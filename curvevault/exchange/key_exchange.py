"""
Key Exchange Module

Implements two-party Elliptic Curve Diffie-Hellman over the in-house curve
arithmetic:
- Key pair creation from a chosen or randomly drawn private scalar
- Public point exchange
- Shared secret derivation (sk_own * PK_other)
- A session object that drives both parties through the protocol states,
  optionally on worker threads, and checks both secrets agree

Protocol:
    Alice: PK_A = sk_A * G          Bob: PK_B = sk_B * G
    Alice -> Bob: PK_A              Bob -> Alice: PK_B
    Alice: S = sk_A * PK_B          Bob: S = sk_B * PK_A

Correctness is the only guarantee: scalar multiplication is not constant
time and no key derivation is applied to the shared point.
"""

import secrets
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core_crypto.fixed_width import FixedWidthUInt
from ..curves.elliptic_curve import Coordinate, CurveParameters, EllipticCurve, Point
from ..curves.validation import (
    CurveValidationError,
    validate_curve_parameters,
    validate_private_scalar,
    validate_public_point,
)
from ..integration.event_logger import EventLogger, EventType, point_fingerprint


# Constants
PARTY_WORKERS = 2  # one worker thread per party in concurrent mode


class KeyExchangeError(RuntimeError):
    """The two parties derived different shared secrets."""


class ExchangeState(Enum):
    """Protocol states, visited strictly in this order."""
    SETUP = "setup"
    KEY_GENERATION = "key_generation"
    PUBLIC_EXCHANGE = "public_exchange"
    SECRET_DERIVATION = "secret_derivation"
    DONE = "done"


# ============================================================================
# Stateless Protocol Functions
# ============================================================================

def generate_public_key(params: CurveParameters, private_scalar: Coordinate) -> Point:
    """
    Compute the public point sk * G.

    Args:
        params: Curve domain parameters
        private_scalar: The private scalar sk

    Returns:
        The public point
    """
    return EllipticCurve(params).scalar_mul(params.g, private_scalar)


def derive_shared_secret(params: CurveParameters, own_private_scalar: Coordinate,
                         other_public_point: Point) -> Point:
    """
    Compute the shared secret sk_own * PK_other.

    Args:
        params: Curve domain parameters
        own_private_scalar: This party's private scalar
        other_public_point: The peer's public point

    Returns:
        The shared point; both parties obtain the same one
    """
    return EllipticCurve(params).scalar_mul(other_public_point, own_private_scalar)


def generate_private_scalar(params: CurveParameters) -> int:
    """
    Draw a private scalar uniformly with the secrets module.

    The range is [1, n - 1] when the group order n is known, otherwise
    [1, p - 1].
    """
    bound = params.order if params.order is not None else params.p
    return 1 + secrets.randbelow(int(bound) - 1)


# ============================================================================
# Key Pair and Party
# ============================================================================

@dataclass(frozen=True)
class KeyPair:
    """ECDH key pair container."""
    private_scalar: FixedWidthUInt
    public_point: Point

    @classmethod
    def from_private(cls, params: CurveParameters, private_scalar: Coordinate) -> 'KeyPair':
        """Build the key pair for a chosen private scalar."""
        if isinstance(private_scalar, (int, str)):
            private_scalar = params.width(private_scalar)
        return cls(private_scalar, generate_public_key(params, private_scalar))

    @classmethod
    def generate(cls, params: CurveParameters) -> 'KeyPair':
        """Generate a new key pair with a random private scalar."""
        return cls.from_private(params, generate_private_scalar(params))

    def __repr__(self) -> str:
        # Never show the private scalar
        return f"KeyPair(public={point_fingerprint(self.public_point)})"


class ECDHParty:
    """
    One participant of the exchange.

    Holds a single key pair; the private scalar never leaves the object.
    """

    def __init__(self, name: str, params: CurveParameters,
                 private_scalar: Optional[Coordinate] = None):
        """
        Initialize the party.

        Args:
            name: Party name (used only for audit events)
            params: Curve domain parameters
            private_scalar: Fixed private scalar, or None to draw one at
                key generation
        """
        self.name = name
        self.params = params
        self._private_scalar = private_scalar
        self._key_pair: Optional[KeyPair] = None
        self.peer_public: Optional[Point] = None
        self.shared_secret: Optional[Point] = None

    def generate_keys(self) -> Point:
        """Create the key pair (once) and return the public point."""
        if self._key_pair is None:
            if self._private_scalar is None:
                self._key_pair = KeyPair.generate(self.params)
            else:
                self._key_pair = KeyPair.from_private(self.params, self._private_scalar)
        return self._key_pair.public_point

    @property
    def public_point(self) -> Point:
        """Public point for sharing; generates the key pair on first use."""
        return self.generate_keys()

    def check_private_scalar(self) -> None:
        """
        Validate this party's private scalar without handing it out.

        A party that will draw its scalar at key generation has nothing to
        check yet; drawn scalars are in range by construction.

        Raises:
            CurveValidationError: If the scalar is outside [1, p - 1]
        """
        if self._key_pair is not None:
            validate_private_scalar(self.params, self._key_pair.private_scalar)
        elif self._private_scalar is not None:
            validate_private_scalar(self.params, self._private_scalar)

    def receive_public(self, peer_public: Point) -> None:
        self.peer_public = peer_public

    def derive_shared_secret(self, peer_public: Optional[Point] = None) -> Point:
        """
        Derive the shared secret from the peer's public point.

        Args:
            peer_public: The peer's public point; defaults to the one
                received during the exchange

        Returns:
            The shared point

        Raises:
            RuntimeError: If no peer public point is available
        """
        if peer_public is None:
            peer_public = self.peer_public
        if peer_public is None:
            raise RuntimeError(f"{self.name} has no peer public point. Exchange keys first.")
        self.generate_keys()
        self.shared_secret = derive_shared_secret(
            self.params, self._key_pair.private_scalar, peer_public
        )
        return self.shared_secret

    def __repr__(self) -> str:
        return f"ECDHParty({self.name!r})"


# ============================================================================
# Session
# ============================================================================

@dataclass
class ExchangeResult:
    """Outcome of a completed exchange. Private scalars are not included."""
    public_a: Point
    public_b: Point
    secret_a: Point
    secret_b: Point

    @property
    def shared_secret(self) -> Point:
        return self.secret_a

    @property
    def matched(self) -> bool:
        return self.secret_a == self.secret_b


class KeyExchangeSession:
    """
    Drives two parties through SETUP -> KEY_GENERATION -> PUBLIC_EXCHANGE ->
    SECRET_DERIVATION -> DONE.

    Each step method may only be called in its state; run() calls them all.

    Example:
        >>> session = KeyExchangeSession(params, ECDHParty("alice", params),
        ...                              ECDHParty("bob", params))
        >>> result = session.run()
        >>> result.secret_a == result.secret_b
        True
    """

    def __init__(self, params: CurveParameters, party_a: ECDHParty, party_b: ECDHParty,
                 concurrent: bool = False, validate: bool = False,
                 event_logger: Optional[EventLogger] = None):
        """
        Initialize the session.

        Args:
            params: Curve domain parameters shared by both parties
            party_a: First participant
            party_b: Second participant
            concurrent: Run each party's work on its own worker thread
            validate: Check curve parameters, private scalars and received
                public points, raising CurveValidationError on failure
            event_logger: Optional audit logger
        """
        self.params = params
        self.party_a = party_a
        self.party_b = party_b
        self.concurrent = concurrent
        self.validate = validate
        self.event_logger = event_logger
        self.state = ExchangeState.SETUP

    def _require(self, state: ExchangeState) -> None:
        if self.state != state:
            raise RuntimeError(
                f"Step requires state {state.name}, session is in {self.state.name}"
            )

    def _log(self, event_type: EventType, party: str = "system", **details) -> None:
        if self.event_logger is not None:
            self.event_logger.log(event_type, party, **details)

    def _both(self, work_a, work_b):
        """Run one callable per party, on worker threads when concurrent."""
        if not self.concurrent:
            return work_a(), work_b()
        with ThreadPoolExecutor(max_workers=PARTY_WORKERS) as executor:
            future_a = executor.submit(work_a)
            future_b = executor.submit(work_b)
            return future_a.result(), future_b.result()

    def _run_validation(self, check, party: str = "system", **details) -> None:
        try:
            check()
        except CurveValidationError as e:
            self._log(EventType.VALIDATION_FAILED, party, reason=str(e), **details)
            raise

    # ========================================================================
    # Steps
    # ========================================================================

    def setup(self) -> None:
        """Validate the domain parameters (when enabled) and start the session."""
        self._require(ExchangeState.SETUP)
        self._log(EventType.SESSION_START, curve=self.params.name,
                  concurrent=self.concurrent, validate=self.validate)
        if self.validate:
            self._run_validation(lambda: validate_curve_parameters(self.params))
            for party in (self.party_a, self.party_b):
                self._run_validation(party.check_private_scalar, party.name)
            self._log(EventType.CURVE_VALIDATED, curve=self.params.name)
        self.state = ExchangeState.KEY_GENERATION

    def generate_keys(self) -> None:
        """Both parties compute their public points."""
        self._require(ExchangeState.KEY_GENERATION)
        public_a, public_b = self._both(self.party_a.generate_keys, self.party_b.generate_keys)
        if self.event_logger is not None:
            self.event_logger.log_key_generated(self.party_a.name, public_a, self.params.name)
            self.event_logger.log_key_generated(self.party_b.name, public_b, self.params.name)
        self.state = ExchangeState.PUBLIC_EXCHANGE

    def exchange_public_keys(self) -> None:
        """Hand each party the other's public point."""
        self._require(ExchangeState.PUBLIC_EXCHANGE)
        a, b = self.party_a, self.party_b
        if self.validate:
            self._run_validation(lambda: validate_public_point(self.params, b.public_point), a.name)
            self._run_validation(lambda: validate_public_point(self.params, a.public_point), b.name)
        a.receive_public(b.public_point)
        b.receive_public(a.public_point)
        if self.event_logger is not None:
            self.event_logger.log_public_key_sent(a.name, b.name, a.public_point)
            self.event_logger.log_public_key_sent(b.name, a.name, b.public_point)
        self.state = ExchangeState.SECRET_DERIVATION

    def derive_secrets(self) -> ExchangeResult:
        """
        Both parties derive the shared secret and the results are compared.

        Raises:
            KeyExchangeError: If the secrets differ
        """
        self._require(ExchangeState.SECRET_DERIVATION)
        a, b = self.party_a, self.party_b
        secret_a, secret_b = self._both(a.derive_shared_secret, b.derive_shared_secret)
        if self.event_logger is not None:
            self.event_logger.log_secret_derived(a.name, b.name, secret_a)
            self.event_logger.log_secret_derived(b.name, a.name, secret_b)

        result = ExchangeResult(a.public_point, b.public_point, secret_a, secret_b)
        if not result.matched:
            self._log(EventType.SECRETS_MISMATCHED,
                      secret_a=point_fingerprint(secret_a),
                      secret_b=point_fingerprint(secret_b))
            raise KeyExchangeError(f"{a.name} and {b.name} derived different shared secrets")

        self._log(EventType.SECRETS_MATCHED, secret=point_fingerprint(secret_a))
        self.state = ExchangeState.DONE
        self._log(EventType.SESSION_COMPLETE, curve=self.params.name)
        return result

    def run(self) -> ExchangeResult:
        """Run every remaining step of the protocol."""
        if self.state == ExchangeState.SETUP:
            self.setup()
        if self.state == ExchangeState.KEY_GENERATION:
            self.generate_keys()
        if self.state == ExchangeState.PUBLIC_EXCHANGE:
            self.exchange_public_keys()
        return self.derive_secrets()


# ============================================================================
# Convenience Functions
# ============================================================================

def run_key_exchange(params: CurveParameters,
                     sk_a: Optional[Coordinate] = None,
                     sk_b: Optional[Coordinate] = None,
                     **options) -> ExchangeResult:
    """
    One-shot two-party exchange.

    Args:
        params: Curve domain parameters
        sk_a: Private scalar of party A, or None for a random one
        sk_b: Private scalar of party B, or None for a random one
        **options: Forwarded to KeyExchangeSession (concurrent, validate,
            event_logger)

    Returns:
        ExchangeResult with both public points and both secrets
    """
    session = KeyExchangeSession(
        params,
        ECDHParty("A", params, sk_a),
        ECDHParty("B", params, sk_b),
        **options,
    )
    return session.run()
