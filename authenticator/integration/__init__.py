# Integration Module
"""
Audit trail for secret creation and code verification.

All events are logged with privacy-preserving user hashes.
"""

from .event_logger import (
    EventType,
    SecurityEvent,
    EventLogger,
    get_user_hash,
)

__all__ = [
    'EventType',
    'SecurityEvent',
    'EventLogger',
    'get_user_hash',
]
