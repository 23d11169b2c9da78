"""
TOTP (Time-based One-Time Password) Implementation

Implements RFC 6238 TOTP with RFC 4226 dynamic truncation for two-factor
authentication.

Features:
- Code generation from a Base32 secret and a time step counter
- Verification with time drift tolerance
- Constant-time code comparison
- Secret generation and provisioning URIs for authenticator apps

Fixed-width counter: only the low 32 bits of the time step counter are fed
to HMAC (the high 4 bytes of the 8-byte message are always zero). Counters
of 2**32 and above wrap, and negative counters wrap as two's complement.
Codes stay compatible with secrets and apps already enrolled against this
layout.

Used with:
- Google Authenticator
- Authy
- Microsoft Authenticator
- Any RFC 6238 compliant authenticator
"""

import hashlib
import hmac
import logging
import math
import struct
import time
from typing import Callable, Optional, Tuple, Union

from ..config import AuthenticatorConfig, DEFAULT_CONFIG
from ..core_crypto.base32 import Base32Codec
from ..core_crypto.constant_time import equal_timing
from ..exceptions import InvalidArgument
from ..integration.event_logger import EventLogger
from ..provisioning import qr
from . import secret as secret_generator

logger = logging.getLogger(__name__)

TimeSlice = Union[int, float]
Clock = Callable[[], float]

COUNTER_MASK = 0xFFFFFFFF
SIGN_BIT_MASK = 0x7FFFFFFF


def get_time_counter(timestamp: Optional[float] = None,
                     time_step: int = DEFAULT_CONFIG.period) -> int:
    """
    Get the time counter value for TOTP.

    Args:
        timestamp: Unix timestamp (uses current time if None)
        time_step: Time step in seconds

    Returns:
        Time counter (T = floor(time / time_step))
    """
    if timestamp is None:
        timestamp = time.time()
    return math.floor(timestamp / time_step)


def pack_counter(counter: int) -> bytes:
    """
    Pack a counter into the 8-byte HMAC message.

    The high 4 bytes are zero and the low 4 bytes hold the counter
    modulo 2**32, big-endian.
    """
    return struct.pack('>II', 0, counter & COUNTER_MASK)


def truncate(digest: bytes, digits: int = DEFAULT_CONFIG.digits) -> str:
    """
    Dynamic truncation (RFC 4226 section 5.3).

    Args:
        digest: HMAC output (20 bytes for SHA-1)
        digits: Number of digits in the code

    Returns:
        Zero-padded numeric code
    """
    # Offset from the low 4 bits of the last byte
    offset = digest[-1] & 0x0F

    # 4 bytes at offset, most significant bit cleared
    truncated = struct.unpack('>I', digest[offset:offset + 4])[0] & SIGN_BIT_MASK

    return str(truncated % (10 ** digits)).zfill(digits)


def hotp(key: bytes, counter: int, digits: int = DEFAULT_CONFIG.digits) -> str:
    """
    HMAC-SHA1 one-time password for a raw key and counter.

    Building block of get_code(); counter-based mode is not exposed as a
    verification flow.
    """
    digest = hmac.new(key, pack_counter(counter), hashlib.sha1).digest()
    return truncate(digest, digits)


def _is_finite(value: TimeSlice) -> bool:
    return not isinstance(value, float) or math.isfinite(value)


class Authenticator:
    """
    TOTP generator and verifier.

    Holds only immutable configuration, a clock and collaborators, so one
    instance can be shared between threads.

    Example:
        >>> auth = Authenticator()
        >>> secret = auth.create_secret()
        >>> code = auth.get_code(secret)
        >>> auth.check_code(secret, code)
        True
    """

    def __init__(self, config: Optional[AuthenticatorConfig] = None,
                 clock: Optional[Clock] = None,
                 codec: Optional[Base32Codec] = None,
                 audit: Optional[EventLogger] = None):
        """
        Initialize the authenticator.

        Args:
            config: Scheme parameters (RFC 6238 defaults if None)
            clock: Returns the current Unix time in seconds (time.time if None)
            codec: Secret decoder (lenient Base32 over the config alphabet if None)
            audit: Optional audit log for generated secrets and verifications
        """
        self._config = config or DEFAULT_CONFIG
        self._clock = clock if clock is not None else time.time
        self._codec = codec or Base32Codec(self._config.decode_alphabet)
        self._audit = audit

    @property
    def config(self) -> AuthenticatorConfig:
        return self._config

    @property
    def codec(self) -> Base32Codec:
        return self._codec

    def current_time_slice(self) -> int:
        """Time step counter for the current clock reading."""
        return get_time_counter(self._clock(), self._config.period)

    def remaining_seconds(self) -> int:
        """Seconds until the current code rotates."""
        period = self._config.period
        return period - (int(self._clock()) % period)

    def create_secret(self, length: Optional[int] = None,
                      account: Optional[str] = None) -> str:
        """
        Create a new random secret.

        Args:
            length: Number of characters (16..128, default 16)
            account: Optional account name for the audit log

        Raises:
            InvalidArgument: If length is out of range
            NoSecureRandomSource: If no strong random source is available
        """
        new_secret = secret_generator.create_secret(length, self._config)
        if self._audit is not None:
            self._audit.log_secret_created(account, len(new_secret))
        return new_secret

    def get_code(self, secret: str, time_slice: Optional[TimeSlice] = None) -> str:
        """
        Calculate the code for a secret.

        Args:
            secret: Base32 secret
            time_slice: Time step counter (current step if None); floats
                are truncated

        Returns:
            Zero-padded code of config.digits characters

        Raises:
            InvalidArgument: With a strict codec and a malformed secret, or
                for an infinite or NaN time slice
        """
        if time_slice is None:
            time_slice = self.current_time_slice()
        elif not _is_finite(time_slice):
            raise InvalidArgument(f"time_slice must be finite, got {time_slice!r}")

        key = self._codec.decode(secret)
        return hotp(key, int(time_slice), self._config.digits)

    def verify(self, secret: str, code: str, difference: Optional[int] = None,
               current_time_slice: Optional[TimeSlice] = None) -> Tuple[bool, Optional[int]]:
        """
        Verify a code and report the drift step it matched at.

        Offsets are tried in ascending order from -difference to
        +difference; the first match wins.

        Returns:
            Tuple of (valid, matched offset or None); (False, None) for
            an infinite or NaN time slice or window
        """
        if not isinstance(code, str) or len(code) != self._config.digits:
            return False, None
        if self._codec.strict and not self._codec.is_valid(secret):
            return False, None

        if difference is None:
            difference = self._config.default_window
        if current_time_slice is None:
            current_time_slice = self.current_time_slice()
        if not (_is_finite(difference) and _is_finite(current_time_slice)):
            return False, None
        current = int(current_time_slice)

        for offset in range(-int(difference), int(difference) + 1):
            calculated = self.get_code(secret, current + offset)
            if equal_timing(calculated, code):
                return True, offset

        return False, None

    def check_code(self, secret: str, code: str, difference: Optional[int] = None,
                   current_time_slice: Optional[TimeSlice] = None,
                   account: Optional[str] = None) -> bool:
        """
        Check a user-supplied code against a window of time steps.

        Args:
            secret: Base32 secret
            code: Code entered by the user
            difference: Accepted drift in time steps (default 1)
            current_time_slice: Time step counter (current step if None)
            account: Optional account name for the audit log

        Returns:
            True if the code matches any step within the window
        """
        valid, offset = self.verify(secret, code, difference, current_time_slice)

        if valid:
            logger.debug("Code accepted at drift offset %d", offset)
        else:
            logger.debug("Code rejected")

        if self._audit is not None:
            self._audit.log_totp(account, valid, offset)
        return valid

    def equal_timing(self, calculated: str, user_code: str) -> bool:
        """Constant-time string comparison."""
        return equal_timing(calculated, user_code)

    def provisioning_uri(self, name: str, secret: str, title: Optional[str] = None) -> str:
        return qr.provisioning_uri(name, secret, title)

    def create_qr_code(self, name: str, secret: str, title: Optional[str] = None,
                       params: Optional[dict] = None) -> str:
        """Link to a hosted QR image of the provisioning URI."""
        return qr.create_qr_code(name, secret, title, params)

    def __repr__(self) -> str:
        return (f"Authenticator(digits={self._config.digits}, "
                f"period={self._config.period})")


_default = Authenticator()


def create_secret(length: int = DEFAULT_CONFIG.default_secret_length) -> str:
    """Create a new random secret with the default configuration."""
    return _default.create_secret(length)


def get_code(secret: str, time_slice: Optional[TimeSlice] = None) -> str:
    """Calculate the code for a secret with the default configuration."""
    return _default.get_code(secret, time_slice)


def check_code(secret: str, code: str, difference: int = DEFAULT_CONFIG.default_window,
               current_time_slice: Optional[TimeSlice] = None) -> bool:
    """Check a code against +/- difference time steps."""
    return _default.check_code(secret, code, difference, current_time_slice)


def get_remaining_seconds(time_step: int = DEFAULT_CONFIG.period) -> int:
    """
    Get seconds remaining until next TOTP code.

    Args:
        time_step: Time step in seconds

    Returns:
        Seconds until next code
    """
    return time_step - (int(time.time()) % time_step)
