# Integration Module
"""
Audit logging for key exchange sessions.

All events are logged with privacy-preserving party hashes.
"""

# Lazy imports to avoid circular imports with the exchange module
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import event_logger
    return getattr(event_logger, name)

__all__ = [
    'EventType',
    'ExchangeEvent',
    'EventLogger',
    'get_party_hash',
    'point_fingerprint',
    'create_event_logger',
]
