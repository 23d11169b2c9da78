"""
Authenticator configuration.

Holds the fixed parameters of the TOTP scheme (RFC 6238 defaults) as an
immutable value passed to each component, so alternate parameterizations
can be tested without touching module state.
"""

from dataclasses import dataclass

from .exceptions import InvalidArgument


# TOTP configuration (RFC 6238 defaults)
TOTP_DIGITS = 6           # Number of digits in OTP
TOTP_TIME_STEP = 30       # Time step in seconds
TOTP_DRIFT_TOLERANCE = 1  # Accept codes from +/- this many time steps

# Secret generation bounds (characters, one per random byte)
SECRET_MIN_LENGTH = 16
SECRET_MAX_LENGTH = 128
SECRET_DEFAULT_LENGTH = 16

# Decoding table (RFC 4648 Base32)
BASE32_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ234567'

# Generation table: Base32 letters and digits followed by the padding
# character. Indexed with (byte & 31), so '=' at position 32 is never drawn.
SECRET_ALPHABET = BASE32_ALPHABET + '='


@dataclass(frozen=True)
class AuthenticatorConfig:
    """
    Parameters shared by the codec, secret generator, deriver and verifier.

    Attributes:
        digits: Length of generated codes
        period: Time step in seconds
        default_window: Drift tolerance used when none is given
        min_secret_length: Smallest allowed generated secret
        max_secret_length: Largest allowed generated secret
        default_secret_length: Length used by create_secret() with no argument
        decode_alphabet: 32-character table for Base32 decoding
        secret_alphabet: 33-character table for secret generation
    """
    digits: int = TOTP_DIGITS
    period: int = TOTP_TIME_STEP
    default_window: int = TOTP_DRIFT_TOLERANCE
    min_secret_length: int = SECRET_MIN_LENGTH
    max_secret_length: int = SECRET_MAX_LENGTH
    default_secret_length: int = SECRET_DEFAULT_LENGTH
    decode_alphabet: str = BASE32_ALPHABET
    secret_alphabet: str = SECRET_ALPHABET

    def __post_init__(self):
        if not 1 <= self.digits <= 10:
            raise InvalidArgument(f"digits must be between 1 and 10, got {self.digits}")
        if self.period <= 0:
            raise InvalidArgument(f"period must be positive, got {self.period}")
        if self.default_window < 0:
            raise InvalidArgument(f"default_window must not be negative, got {self.default_window}")
        if not (1 <= self.min_secret_length <= self.default_secret_length
                <= self.max_secret_length):
            raise InvalidArgument(
                "secret lengths must satisfy 1 <= min <= default <= max, got "
                f"{self.min_secret_length}/{self.default_secret_length}/{self.max_secret_length}"
            )
        if len(self.decode_alphabet) != 32 or len(set(self.decode_alphabet)) != 32:
            raise InvalidArgument("decode_alphabet must hold 32 distinct characters")
        if len(self.secret_alphabet) < 32:
            raise InvalidArgument("secret_alphabet must hold at least 32 characters")

    @property
    def modulus(self) -> int:
        """10 ** digits, the reduction applied after truncation."""
        return 10 ** self.digits


DEFAULT_CONFIG = AuthenticatorConfig()
