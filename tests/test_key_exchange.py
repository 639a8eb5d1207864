"""
Unit tests for the ECDH key exchange.

Tests:
- Concrete P-192 exchange with fixed private scalars
- Concurrent and sequential sessions
- Protocol state ordering
- Random key generation
- Cross-check against the cryptography package on P-256
"""

import pytest
from curvevault.core_crypto.uint128 import UInt128
from curvevault.core_crypto.uint256 import UInt256
from curvevault.curves.elliptic_curve import INFINITY, CurveParameters, EllipticCurve, Point
from curvevault.curves.named_curves import get_curve
from curvevault.curves.validation import CurveValidationError
from curvevault.exchange.key_exchange import (
    ECDHParty,
    ExchangeResult,
    ExchangeState,
    KeyExchangeError,
    KeyExchangeSession,
    KeyPair,
    derive_shared_secret,
    generate_private_scalar,
    generate_public_key,
    run_key_exchange,
)


SK_A = 1863057198451078255086943063078133078831752240818134503
SK_B = 5684341886080801483496218260349564865441085341978530127


@pytest.fixture(scope="module")
def p192_params():
    """P-192 domain parameters without b, as the protocol needs no more."""
    return CurveParameters.create(
        p=6277101735386680763835789423207666416083908700390324961279,
        a=6277101735386680763835789423207666416083908700390324961276,
        g=(
            602046282375688656758213480587526111916698976636884684818,
            174050332293622031404857552280219410364023488927386650641,
        ),
    )


@pytest.fixture(scope="module")
def p192_result(p192_params):
    return run_key_exchange(p192_params, SK_A, SK_B)


@pytest.fixture
def toy_params():
    return get_curve("toy-17")


class TestConcreteExchange:
    """Fixed-scalar exchange on P-192."""

    def test_secrets_identical(self, p192_result):
        assert p192_result.secret_a == p192_result.secret_b
        assert p192_result.matched

    def test_secret_is_finite_point(self, p192_result):
        assert not p192_result.shared_secret.is_infinity

    def test_public_points_on_curve(self, p192_result):
        curve = EllipticCurve(get_curve("P-192"))
        assert curve.is_on_curve(p192_result.public_a)
        assert curve.is_on_curve(p192_result.public_b)
        assert curve.is_on_curve(p192_result.shared_secret)

    def test_concurrent_matches_sequential(self, p192_params, p192_result):
        result = run_key_exchange(p192_params, SK_A, SK_B, concurrent=True)
        assert result == p192_result

    def test_string_scalars(self, toy_params):
        result = run_key_exchange(toy_params, "3", "0x7")
        # 3 * 7 = 21 = 2 (mod 19)
        assert result.shared_secret == Point.new(6, 3)


class TestProtocolFunctions:
    """Stateless helpers."""

    def test_generate_public_key(self, toy_params):
        assert generate_public_key(toy_params, 1) == toy_params.g
        assert generate_public_key(toy_params, 2) == Point.new(6, 3)

    def test_derive_shared_secret_symmetric(self, toy_params):
        for sk_a in range(1, 19):
            for sk_b in (2, 5, 11):
                pk_a = generate_public_key(toy_params, sk_a)
                pk_b = generate_public_key(toy_params, sk_b)
                assert (derive_shared_secret(toy_params, sk_a, pk_b)
                        == derive_shared_secret(toy_params, sk_b, pk_a))

    def test_private_scalar_range(self, toy_params):
        for _ in range(50):
            sk = generate_private_scalar(toy_params)
            assert 1 <= sk <= 18

    def test_private_scalar_range_without_order(self):
        params = CurveParameters.create(17, 2, (5, 1), b=2)
        for _ in range(50):
            assert 1 <= generate_private_scalar(params) <= 16


class TestKeyPair:
    """Key pair container."""

    def test_from_private(self, toy_params):
        kp = KeyPair.from_private(toy_params, 4)
        assert kp.private_scalar == 4
        assert type(kp.private_scalar) is UInt256
        assert kp.public_point == Point.new(3, 1)

    def test_generate(self, toy_params):
        kp = KeyPair.generate(toy_params)
        expected = EllipticCurve(toy_params).scalar_mul(toy_params.g, kp.private_scalar)
        assert kp.public_point == expected

    def test_repr_hides_private_scalar(self, toy_params):
        kp = KeyPair.from_private(toy_params, 4)
        assert repr(kp).startswith("KeyPair(public=")
        assert "private" not in repr(kp)


class TestECDHParty:
    """Single participant."""

    def test_public_point_is_stable(self, toy_params):
        party = ECDHParty("alice", toy_params)
        assert party.public_point == party.public_point

    def test_derive_with_explicit_peer(self, toy_params):
        alice = ECDHParty("alice", toy_params, 3)
        bob = ECDHParty("bob", toy_params, 5)
        assert alice.derive_shared_secret(bob.public_point) == bob.derive_shared_secret(alice.public_point)

    def test_derive_without_peer(self, toy_params):
        with pytest.raises(RuntimeError):
            ECDHParty("alice", toy_params, 3).derive_shared_secret()

    def test_private_scalar_not_exposed(self, toy_params):
        party = ECDHParty("alice", toy_params, 3)
        party.generate_keys()
        assert not hasattr(party, "private_scalar")

    def test_check_private_scalar(self, toy_params):
        ECDHParty("alice", toy_params, 3).check_private_scalar()
        ECDHParty("alice", toy_params).check_private_scalar()
        with pytest.raises(CurveValidationError):
            ECDHParty("alice", toy_params, 0).check_private_scalar()
        with pytest.raises(CurveValidationError):
            ECDHParty("alice", toy_params, 17).check_private_scalar()


class TestKeyExchangeSession:
    """State machine around two parties."""

    def make_session(self, params, **options):
        return KeyExchangeSession(
            params, ECDHParty("alice", params), ECDHParty("bob", params), **options
        )

    def test_run_random_keys(self, toy_params):
        session = self.make_session(toy_params)
        result = session.run()
        assert isinstance(result, ExchangeResult)
        assert result.secret_a == result.secret_b
        assert session.state == ExchangeState.DONE

    def test_step_by_step(self, toy_params):
        session = self.make_session(toy_params)
        session.setup()
        assert session.state == ExchangeState.KEY_GENERATION
        session.generate_keys()
        assert session.state == ExchangeState.PUBLIC_EXCHANGE
        session.exchange_public_keys()
        assert session.state == ExchangeState.SECRET_DERIVATION
        assert session.party_a.peer_public == session.party_b.public_point
        result = session.derive_secrets()
        assert result.matched

    def test_out_of_order_steps(self, toy_params):
        session = self.make_session(toy_params)
        with pytest.raises(RuntimeError):
            session.generate_keys()
        with pytest.raises(RuntimeError):
            session.derive_secrets()
        session.setup()
        with pytest.raises(RuntimeError):
            session.setup()
        with pytest.raises(RuntimeError):
            session.exchange_public_keys()

    def test_cannot_run_twice(self, toy_params):
        session = self.make_session(toy_params)
        session.run()
        with pytest.raises(RuntimeError):
            session.run()

    def test_concurrent_session(self, toy_params):
        session = self.make_session(toy_params, concurrent=True)
        result = session.run()
        assert result.matched

    def test_mismatch_raises(self, toy_params, monkeypatch):
        session = self.make_session(toy_params)
        monkeypatch.setattr(session.party_b, "derive_shared_secret", lambda *args: INFINITY)
        with pytest.raises(KeyExchangeError):
            session.run()
        assert session.state == ExchangeState.SECRET_DERIVATION

    def test_key_exchange_error_is_runtime_error(self):
        assert issubclass(KeyExchangeError, RuntimeError)


class TestNamedCurveExchanges:
    """Random exchanges on the 256-bit curves."""

    def test_secp256k1(self):
        result = run_key_exchange(get_curve("secp256k1"))
        assert result.matched
        assert EllipticCurve(get_curve("secp256k1")).is_on_curve(result.shared_secret)


class TestNarrowWidthExchange:
    """Exchanges on a curve with 128-bit coordinates."""

    @pytest.fixture
    def params128(self):
        return CurveParameters.create(17, 2, (5, 1), b=2, order=19, width=UInt128)

    def test_derive_with_default_width_point(self, params128):
        # 3 * G = (10, 6)
        secret = derive_shared_secret(params128, 3, Point.new(5, 1))
        assert secret == Point.new(10, 6, width=UInt128)
        assert type(secret.x) is UInt128

    def test_validated_exchange(self, params128):
        result = run_key_exchange(params128, 3, 7, validate=True)
        # 3 * 7 = 21 = 2 (mod 19)
        assert result.shared_secret == Point.new(6, 3, width=UInt128)
        assert type(result.public_a.x) is UInt128

    def test_concurrent_random_exchange(self, params128):
        result = run_key_exchange(params128, concurrent=True, validate=True)
        assert result.matched
        assert EllipticCurve(params128).is_on_curve(result.shared_secret)


class TestCryptographyCrossCheck:
    """Compare against an independent ECDH implementation."""

    def test_p256_against_cryptography(self):
        ec = pytest.importorskip("cryptography.hazmat.primitives.asymmetric.ec")
        params = get_curve("P-256")
        sk_a = 0x1f2e3d4c5b6a79881f2e3d4c5b6a79881f2e3d4c5b6a79881f2e3d4c5b6a7988
        sk_b = 0x0a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f9

        result = run_key_exchange(params, sk_a, sk_b)

        key_a = ec.derive_private_key(sk_a, ec.SECP256R1())
        key_b = ec.derive_private_key(sk_b, ec.SECP256R1())
        numbers = key_a.public_key().public_numbers()
        assert result.public_a == Point.new(numbers.x, numbers.y)

        shared = key_a.exchange(ec.ECDH(), key_b.public_key())
        assert int(result.shared_secret.x) == int.from_bytes(shared, "big")
