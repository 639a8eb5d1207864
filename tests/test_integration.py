"""
Integration tests for CurveVault.

Tests complete workflows:
- Key exchange sessions feeding the audit log
- Audit log privacy and tamper evidence
- Export / import of the log
"""

import json

import pytest
from curvevault import get_curve, run_key_exchange
from curvevault.curves.validation import CurveValidationError
from curvevault.exchange.key_exchange import ECDHParty, KeyExchangeSession
from curvevault.integration.event_logger import (
    EventLogger,
    EventType,
    ExchangeEvent,
    create_event_logger,
    get_party_hash,
    point_fingerprint,
)
from curvevault.curves.elliptic_curve import INFINITY, Point


EXPECTED_SEQUENCE = [
    EventType.SESSION_START,
    EventType.KEY_GENERATED,
    EventType.KEY_GENERATED,
    EventType.PUBLIC_KEY_SENT,
    EventType.PUBLIC_KEY_SENT,
    EventType.SECRET_DERIVED,
    EventType.SECRET_DERIVED,
    EventType.SECRETS_MATCHED,
    EventType.SESSION_COMPLETE,
]


@pytest.fixture
def toy_params():
    return get_curve("toy-17")


class TestEventLogger:
    """Audit log on its own."""

    def test_log_and_retrieve(self):
        logger = create_event_logger()
        logger.log(EventType.SESSION_START, curve="toy-17")
        logger.log_key_generated("alice", Point.new(6, 3), "toy-17")

        events = logger.get_all_events()
        assert logger.length == 2
        assert [e.event_type for e in events] == [EventType.SESSION_START, EventType.KEY_GENERATED]
        assert events[0].details == {"curve": "toy-17"}

    def test_filter_by_type_and_party(self):
        logger = EventLogger()
        logger.log_key_generated("alice", Point.new(6, 3))
        logger.log_key_generated("bob", Point.new(10, 6))
        logger.log_public_key_sent("alice", "bob", Point.new(6, 3))

        assert len(logger.get_events_by_type(EventType.KEY_GENERATED)) == 2
        assert len(logger.get_party_events("alice")) == 2
        assert len(logger.get_party_events("carol")) == 0

    def test_recent_events(self):
        logger = EventLogger()
        for i in range(15):
            logger.log(EventType.SESSION_START, f"party{i}")
        assert len(logger.get_recent_events(5)) == 5
        assert len(logger.get_recent_events()) == 10

    def test_record_round_trip(self):
        event = ExchangeEvent(EventType.SECRET_DERIVED, get_party_hash("alice"), 1700000000,
                              {"peer": "abc"})
        parsed = ExchangeEvent.from_record(event.to_record())
        assert parsed.event_type == EventType.SECRET_DERIVED
        assert parsed.party_hash == get_party_hash("alice")[:16]
        assert parsed.timestamp == 1700000000
        assert parsed.details == {"peer": "abc"}

    def test_callbacks(self):
        logger = EventLogger()
        seen = []
        logger.add_callback(seen.append)
        logger.log(EventType.SESSION_START)
        logger.remove_callback(seen.append)
        logger.log(EventType.SESSION_COMPLETE)
        assert [e.event_type for e in seen] == [EventType.SESSION_START]

    def test_failing_callback_does_not_break_logging(self):
        logger = EventLogger()

        def broken(event):
            raise RuntimeError("callback failure")

        logger.add_callback(broken)
        logger.log(EventType.SESSION_START)
        assert logger.length == 1

    def test_fingerprints(self):
        assert len(point_fingerprint(Point.new(6, 3))) == 16
        assert point_fingerprint(Point.new(6, 3)) != point_fingerprint(Point.new(10, 6))
        assert point_fingerprint(INFINITY) != point_fingerprint(Point.new(0, 0))

    def test_print_audit_log(self, capsys):
        logger = EventLogger()
        logger.log(EventType.SESSION_START, curve="toy-17")
        logger.print_audit_log()
        out = capsys.readouterr().out
        assert "KEY EXCHANGE AUDIT LOG" in out
        assert "session_start" in out
        assert "Total events: 1" in out


class TestAuditTrail:
    """Tamper evidence and persistence."""

    def test_integrity_holds(self):
        logger = EventLogger()
        for i in range(5):
            logger.log(EventType.KEY_GENERATED, f"party{i}")
        assert logger.verify_integrity()

    def test_tampering_detected(self):
        logger = EventLogger()
        logger.log(EventType.SECRETS_MATCHED, secret="aaaa")
        logger.log(EventType.SESSION_COMPLETE)

        record, digest = logger._entries[0]
        logger._entries[0] = (record.replace("aaaa", "bbbb"), digest)
        assert not logger.verify_integrity()

    def test_export_import(self):
        logger = EventLogger()
        logger.log(EventType.SESSION_START, curve="P-192")
        logger.log(EventType.SESSION_COMPLETE, curve="P-192")

        restored = EventLogger.import_log(logger.export_log())
        assert restored.length == 2
        assert restored.verify_integrity()
        assert restored.get_all_events()[1].event_type == EventType.SESSION_COMPLETE

    def test_import_rejects_tampered_log(self):
        logger = EventLogger()
        logger.log(EventType.SESSION_START, curve="P-192")
        data = json.loads(logger.export_log())
        data["entries"][0]["record"] = data["entries"][0]["record"].replace("P-192", "P-256")

        with pytest.raises(ValueError):
            EventLogger.import_log(json.dumps(data))


class TestExchangeWorkflow:
    """Sessions writing to the audit log."""

    def test_event_sequence(self, toy_params):
        logger = EventLogger()
        run_key_exchange(toy_params, 3, 7, event_logger=logger)

        assert [e.event_type for e in logger.get_all_events()] == EXPECTED_SEQUENCE
        assert logger.verify_integrity()

    def test_validated_session_logs_validation(self, toy_params):
        logger = EventLogger()
        run_key_exchange(toy_params, 3, 7, validate=True, event_logger=logger)

        types = [e.event_type for e in logger.get_all_events()]
        assert types[:2] == [EventType.SESSION_START, EventType.CURVE_VALIDATED]
        assert types[2:] == EXPECTED_SEQUENCE[1:]

    def test_concurrent_session_logs_every_step(self, toy_params):
        logger = EventLogger()
        session = KeyExchangeSession(
            toy_params, ECDHParty("alice", toy_params), ECDHParty("bob", toy_params),
            concurrent=True, event_logger=logger,
        )
        session.run()
        assert len(logger.get_events_by_type(EventType.SECRET_DERIVED)) == 2
        assert logger.verify_integrity()

    def test_matching_fingerprints(self, toy_params):
        logger = EventLogger()
        result = run_key_exchange(toy_params, 4, 9, event_logger=logger)

        derived = logger.get_events_by_type(EventType.SECRET_DERIVED)
        fingerprints = {e.details["secret"] for e in derived}
        assert fingerprints == {point_fingerprint(result.shared_secret)}

    def test_privacy(self, toy_params):
        """Party names and private scalars never reach the log."""
        logger = EventLogger()
        sk_a = 13
        session = KeyExchangeSession(
            toy_params,
            ECDHParty("secret_alice", toy_params, sk_a),
            ECDHParty("secret_bob", toy_params, 5),
            event_logger=logger,
        )
        session.run()

        exported = logger.export_log()
        assert "secret_alice" not in exported
        assert "secret_bob" not in exported
        assert get_party_hash("secret_alice")[:16] in exported
        for event in logger.get_all_events():
            assert "private" not in json.dumps(event.details)

    def test_validation_failure_logged(self, toy_params):
        logger = EventLogger()
        with pytest.raises(CurveValidationError):
            run_key_exchange(toy_params, 0, 7, validate=True, event_logger=logger)

        failures = logger.get_events_by_type(EventType.VALIDATION_FAILED)
        assert len(failures) == 1
        assert "private scalar" in failures[0].details["reason"]


class TestFullSystemIntegration:
    """Full system integration test."""

    def test_p192_exchange_with_audit(self):
        params = get_curve("P-192")
        logger = EventLogger()
        result = run_key_exchange(params, validate=True, event_logger=logger)

        assert result.matched
        assert logger.get_events_by_type(EventType.SESSION_COMPLETE)
        assert logger.verify_integrity()
