"""
Authenticator - TOTP two-factor authentication codes.

Generates shared secrets, derives RFC 6238 codes compatible with
authenticator apps and verifies user codes with clock drift tolerance.

    >>> from authenticator import create_secret, get_code, check_code
    >>> secret = create_secret()
    >>> check_code(secret, get_code(secret))
    True
"""

from .config import AuthenticatorConfig, DEFAULT_CONFIG
from .exceptions import AuthenticatorError, InvalidArgument, NoSecureRandomSource
from .core_crypto import Base32Codec, base32_decode, equal_timing
from .auth import Authenticator, create_secret, get_code, check_code
from .provisioning import create_qr_code, provisioning_uri
from .integration import EventLogger, EventType
from .logger import setup_logging

__version__ = '1.0.0'

__all__ = [
    'Authenticator',
    'AuthenticatorConfig',
    'DEFAULT_CONFIG',
    'create_secret',
    'get_code',
    'check_code',
    'equal_timing',
    'base32_decode',
    'Base32Codec',
    'create_qr_code',
    'provisioning_uri',
    'AuthenticatorError',
    'InvalidArgument',
    'NoSecureRandomSource',
    'EventLogger',
    'EventType',
    'setup_logging',
]
