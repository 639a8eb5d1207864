"""
Event Logger Module

Records every step of a key exchange into a tamper-evident audit trail.

Features:
- Key generation, public key exchange and secret derivation events
- Validation outcomes
- Privacy-preserving party hashes (SHA-256)
- Public points recorded only as short fingerprints
- Private scalars are never recorded
- Hash-chained records: editing any stored record breaks verification

Author: CurveVault Project
"""

import hashlib
import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..curves.elliptic_curve import Point


# ============================================================================
# Constants
# ============================================================================

EVENT_VERSION = "1.0"
GENESIS_DIGEST = "0" * 64
FINGERPRINT_LENGTH = 16


# ============================================================================
# Privacy Functions
# ============================================================================

def get_party_hash(name: str) -> str:
    """
    Compute privacy-preserving hash of a party name.

    Party names are never stored in plaintext, while events for the same
    party can still be correlated.

    Args:
        name: The plaintext party name

    Returns:
        Hex-encoded SHA-256 hash of the name
    """
    return hashlib.sha256(name.encode()).hexdigest()


def get_party_hash_short(name: str) -> str:
    """First 16 hex characters of the party hash, for display."""
    return get_party_hash(name)[:16]


def point_fingerprint(point: Point) -> str:
    """
    Short SHA-256 fingerprint of a public point.

    Args:
        point: Any curve point

    Returns:
        16 hex characters identifying the point
    """
    if point.is_infinity:
        material = b"infinity"
    else:
        material = f"{point.x.to_hex_string()}:{point.y.to_hex_string()}".encode()
    return hashlib.sha256(material).hexdigest()[:FINGERPRINT_LENGTH]


# ============================================================================
# Event Types
# ============================================================================

class EventType(Enum):
    """Events recorded during a key exchange."""

    # Session lifecycle
    SESSION_START = "session_start"
    SESSION_COMPLETE = "session_complete"

    # Validation
    CURVE_VALIDATED = "curve_validated"
    VALIDATION_FAILED = "validation_failed"

    # Protocol steps
    KEY_GENERATED = "key_generated"
    PUBLIC_KEY_SENT = "public_key_sent"
    SECRET_DERIVED = "secret_derived"

    # Outcome
    SECRETS_MATCHED = "secrets_matched"
    SECRETS_MISMATCHED = "secrets_mismatched"


# ============================================================================
# Event Structure
# ============================================================================

@dataclass
class ExchangeEvent:
    """
    A single audit event.

    All party-identifying information is hashed for privacy.
    """
    event_type: EventType
    party_hash: str  # SHA-256 hash of party name
    timestamp: int   # Unix timestamp
    details: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> str:
        """Convert event to a compact JSON record."""
        return json.dumps({
            'version': EVENT_VERSION,
            'type': self.event_type.value,
            'party': self.party_hash[:16],
            'time': self.timestamp,
            'details': self.details,
        }, separators=(',', ':'), sort_keys=True)

    @classmethod
    def from_record(cls, record: str) -> 'ExchangeEvent':
        """Parse event from a JSON record."""
        data = json.loads(record)
        return cls(
            event_type=EventType(data['type']),
            party_hash=data['party'],
            timestamp=data['time'],
            details=data.get('details', {}),
        )

    def __str__(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp)
        return (
            f"[{dt.strftime('%Y-%m-%d %H:%M:%S')}] "
            f"{self.event_type.value} | "
            f"party:{self.party_hash[:8]}..."
        )


def _chain_digest(previous: str, record: str) -> str:
    return hashlib.sha256((previous + record).encode()).hexdigest()


# ============================================================================
# Event Logger
# ============================================================================

class EventLogger:
    """
    Hash-chained audit logger for key exchange sessions.

    Each stored entry is (record, digest) with
    digest = SHA-256(previous digest || record). Appends are serialised with a
    lock so both parties may log from worker threads.
    """

    def __init__(self, entries: Optional[List[Tuple[str, str]]] = None):
        """
        Initialize the event logger.

        Args:
            entries: Optional existing (record, digest) chain to continue
        """
        self._entries: List[Tuple[str, str]] = list(entries or [])
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[ExchangeEvent], None]] = []

    def _add_event(self, event: ExchangeEvent) -> None:
        record = event.to_record()
        with self._lock:
            previous = self._entries[-1][1] if self._entries else GENESIS_DIGEST
            self._entries.append((record, _chain_digest(previous, record)))
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                pass  # Don't let callbacks break logging

    def log(self, event_type: EventType, party: str = "system",
            **details: Any) -> ExchangeEvent:
        """
        Record an event.

        Args:
            event_type: Kind of event
            party: Party name (will be hashed)
            **details: JSON-serialisable details

        Returns:
            The logged event
        """
        event = ExchangeEvent(
            event_type=event_type,
            party_hash=get_party_hash(party),
            timestamp=int(time.time()),
            details=details,
        )
        self._add_event(event)
        return event

    def add_callback(self, callback: Callable[[ExchangeEvent], None]) -> None:
        """Add a callback to be notified of new events."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[ExchangeEvent], None]) -> None:
        """Remove a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # ========================================================================
    # Protocol Events
    # ========================================================================

    def log_key_generated(self, party: str, public_point: Point,
                          curve: str = "") -> ExchangeEvent:
        """Log a key pair creation; only the public point is fingerprinted."""
        return self.log(
            EventType.KEY_GENERATED, party,
            public=point_fingerprint(public_point), curve=curve,
        )

    def log_public_key_sent(self, sender: str, recipient: str,
                            public_point: Point) -> ExchangeEvent:
        return self.log(
            EventType.PUBLIC_KEY_SENT, sender,
            to=get_party_hash_short(recipient),
            public=point_fingerprint(public_point),
        )

    def log_secret_derived(self, party: str, peer: str,
                           secret: Point) -> ExchangeEvent:
        """
        Log a shared-secret derivation.

        The secret itself is reduced to a fingerprint so matching secrets can
        be compared without revealing them.
        """
        return self.log(
            EventType.SECRET_DERIVED, party,
            peer=get_party_hash_short(peer),
            secret=point_fingerprint(secret),
        )

    # ========================================================================
    # Retrieval
    # ========================================================================

    @property
    def length(self) -> int:
        return len(self._entries)

    def get_all_events(self) -> List[ExchangeEvent]:
        with self._lock:
            records = [record for record, _ in self._entries]
        return [ExchangeEvent.from_record(record) for record in records]

    def get_party_events(self, name: str) -> List[ExchangeEvent]:
        """
        Get all events for a specific party.

        Args:
            name: The party name to search for

        Returns:
            List of events for that party
        """
        short = get_party_hash_short(name)
        return [e for e in self.get_all_events() if e.party_hash == short]

    def get_events_by_type(self, event_type: EventType) -> List[ExchangeEvent]:
        """Get all events of a specific type."""
        return [e for e in self.get_all_events() if e.event_type == event_type]

    def get_recent_events(self, count: int = 10) -> List[ExchangeEvent]:
        """Get the most recent events."""
        events = self.get_all_events()
        return events[-count:] if len(events) > count else events

    def print_audit_log(self, last_n: Optional[int] = None) -> None:
        """Print the audit log in a readable format."""
        events = self.get_all_events()
        total = len(events)
        if last_n:
            events = events[-last_n:]

        print("\n" + "=" * 70)
        print("KEY EXCHANGE AUDIT LOG")
        print("=" * 70)

        for event in events:
            print(event)
            for k, v in event.details.items():
                print(f"    {k}: {v}")

        print("=" * 70)
        print(f"Total events: {total}")
        print("=" * 70)

    def verify_integrity(self) -> bool:
        """Recompute the digest chain; False if any record was altered."""
        with self._lock:
            entries = list(self._entries)
        previous = GENESIS_DIGEST
        for record, digest in entries:
            if _chain_digest(previous, record) != digest:
                return False
            previous = digest
        return True

    def export_log(self) -> str:
        """Export the entire audit log as JSON."""
        with self._lock:
            entries = [{'record': r, 'digest': d} for r, d in self._entries]
        return json.dumps({'version': EVENT_VERSION, 'entries': entries}, indent=2)

    @classmethod
    def import_log(cls, json_str: str) -> 'EventLogger':
        """
        Import an audit log from JSON.

        Raises:
            ValueError: If the imported chain fails verification
        """
        data = json.loads(json_str)
        logger = cls([(e['record'], e['digest']) for e in data['entries']])
        if not logger.verify_integrity():
            raise ValueError("Audit log integrity check failed")
        return logger


# ============================================================================
# Convenience Functions
# ============================================================================

def create_event_logger() -> EventLogger:
    """Create a new, empty event logger."""
    return EventLogger()
