"""
Event Logger Module

In-memory security audit trail for secret generation and code
verification.

Features:
- TOTP verification events (success and failure)
- Secret creation events
- Privacy-preserving user hashes (SHA-256)
- JSON export/import of the recorded events
- Subscriber callbacks for forwarding events elsewhere

Secrets and one-time codes are never recorded; only the outcome, the
matching drift step and a hash of the account name.
"""

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Callable

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

EVENT_VERSION = "1.0"
ANONYMOUS_USER = "anonymous"


# ============================================================================
# Privacy Functions
# ============================================================================

def get_user_hash(username: str) -> str:
    """
    Compute privacy-preserving hash of an account name.

    Account names are never stored in plaintext, while events for the
    same account can still be correlated.

    Args:
        username: The plaintext account name

    Returns:
        Hex-encoded SHA-256 hash of the account name
    """
    return hashlib.sha256(username.encode('utf-8')).hexdigest()


# ============================================================================
# Event Types
# ============================================================================

class EventType(Enum):
    """Types of security events that can be logged."""

    SECRET_CREATED = "secret_created"
    TOTP_VERIFIED = "totp_verified"
    TOTP_FAILED = "totp_failed"


# ============================================================================
# Event Structure
# ============================================================================

@dataclass
class SecurityEvent:
    """A single audit record; user_hash is a SHA-256 hex digest."""
    event_type: EventType
    user_hash: str
    timestamp: int  # Unix timestamp
    details: Dict[str, Any] = field(default_factory=dict)

    def to_transaction(self) -> str:
        """Serialize the event as compact JSON."""
        return json.dumps({
            'version': EVENT_VERSION,
            'type': self.event_type.value,
            'user': self.user_hash,
            'time': self.timestamp,
            'details': self.details,
        }, separators=(',', ':'))

    @classmethod
    def from_transaction(cls, tx_str: str) -> 'SecurityEvent':
        data = json.loads(tx_str)
        return cls(
            event_type=EventType(data['type']),
            user_hash=data['user'],
            timestamp=data['time'],
            details=data.get('details', {}),
        )

    def __str__(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp)
        return (
            f"[{dt.strftime('%Y-%m-%d %H:%M:%S')}] "
            f"{self.event_type.value} | "
            f"user:{self.user_hash[:8]}..."
        )


# ============================================================================
# Event Logger
# ============================================================================

class EventLogger:
    """
    Thread-safe in-memory audit log.

    Example:
        >>> audit = EventLogger()
        >>> event = audit.log_totp("alice@example.com", success=True, offset=0)
        >>> len(audit.get_events_by_type(EventType.TOTP_VERIFIED))
        1
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._events: List[SecurityEvent] = []
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[SecurityEvent], None]] = []
        self._clock = clock

    def _add_event(self, event: SecurityEvent) -> None:
        with self._lock:
            self._events.append(event)
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception("Audit callback failed for %s", event.event_type.value)

    def _user_hash(self, username: Optional[str]) -> str:
        return get_user_hash(username if username else ANONYMOUS_USER)

    def add_callback(self, callback: Callable[[SecurityEvent], None]) -> None:
        """Add a callback to be notified of new events."""
        with self._lock:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[SecurityEvent], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def log_totp(self, username: Optional[str], success: bool,
                 offset: Optional[int] = None) -> SecurityEvent:
        """
        Log a TOTP verification attempt.

        Args:
            username: Account name (will be hashed), None for anonymous
            success: Whether the code was accepted
            offset: Drift step the code matched at, if accepted

        Returns:
            The logged event
        """
        details: Dict[str, Any] = {}
        if success and offset is not None:
            details['offset'] = offset

        event = SecurityEvent(
            event_type=EventType.TOTP_VERIFIED if success else EventType.TOTP_FAILED,
            user_hash=self._user_hash(username),
            timestamp=int(self._clock()),
            details=details,
        )
        self._add_event(event)
        return event

    def log_secret_created(self, username: Optional[str], length: int) -> SecurityEvent:
        """Log the creation of a new secret (never the secret itself)."""
        event = SecurityEvent(
            event_type=EventType.SECRET_CREATED,
            user_hash=self._user_hash(username),
            timestamp=int(self._clock()),
            details={'length': length},
        )
        self._add_event(event)
        return event

    def get_all_events(self) -> List[SecurityEvent]:
        with self._lock:
            return list(self._events)

    def get_user_events(self, username: str) -> List[SecurityEvent]:
        """Get all events for a specific account."""
        user_hash = get_user_hash(username)
        return [e for e in self.get_all_events() if e.user_hash == user_hash]

    def get_events_by_type(self, event_type: EventType) -> List[SecurityEvent]:
        return [e for e in self.get_all_events() if e.event_type == event_type]

    def get_recent_events(self, count: int = 10) -> List[SecurityEvent]:
        if count <= 0:
            return []
        events = self.get_all_events()
        return events[-count:] if len(events) > count else events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def export_log(self) -> str:
        """Export the audit log as a JSON array of event records."""
        return json.dumps([e.to_transaction() for e in self.get_all_events()])

    @classmethod
    def import_log(cls, json_str: str) -> 'EventLogger':
        """
        Import an audit log produced by export_log().

        Raises:
            ValueError: If the data is not a valid exported log
        """
        try:
            records = json.loads(json_str)
            events = [SecurityEvent.from_transaction(tx) for tx in records]
        except (TypeError, KeyError) as exc:
            raise ValueError("Invalid audit log format") from exc

        audit = cls()
        audit._events.extend(events)
        return audit

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
