# Authentication Module
"""
One-time password implementation:
- Secret generation - secret.py
- TOTP code derivation and verification (RFC 6238) - totp.py

Security features:
- Secrets drawn only from the OS CSPRNG
- Constant-time comparison of codes
- Verification failures reported as False, never as exceptions
"""

from .secret import create_secret as generate_secret, secure_random_bytes

from .totp import (
    Authenticator,
    create_secret,
    get_code,
    check_code,
    get_time_counter,
    get_remaining_seconds,
    pack_counter,
    truncate,
    hotp,
)

__all__ = [
    # Secret generation
    'generate_secret',
    'secure_random_bytes',
    # TOTP
    'Authenticator',
    'create_secret',
    'get_code',
    'check_code',
    'get_time_counter',
    'get_remaining_seconds',
    'pack_counter',
    'truncate',
    'hotp',
]
