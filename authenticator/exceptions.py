"""
Exception hierarchy for the authenticator package.

Only secret generation and configuration can fail. Decoding, code
derivation, comparison and verification are total functions and report a
wrong or malformed code as ``False`` instead of raising.
"""


class AuthenticatorError(Exception):
    """Base class for all authenticator errors."""


class InvalidArgument(AuthenticatorError, ValueError):
    """An argument or configuration value is outside its allowed range."""


class NoSecureRandomSource(AuthenticatorError, RuntimeError):
    """The platform offers no cryptographically strong random source."""
