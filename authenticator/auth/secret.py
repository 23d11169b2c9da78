"""
Secret Generation

Creates new shared secrets for enrolling an authenticator app.

One character is produced per random byte by indexing the low 5 bits of
the byte into the generation table, so a secret of length N carries
5 * N bits of entropy. This is not a full Base32 encoding of the random
bytes; it stays compatible with the lenient decoder.

Randomness comes only from the operating system CSPRNG (secrets module).
There is no fallback to a non-cryptographic generator.
"""

import logging
import secrets
from typing import Optional

from ..config import AuthenticatorConfig, DEFAULT_CONFIG
from ..exceptions import InvalidArgument, NoSecureRandomSource

logger = logging.getLogger(__name__)


def secure_random_bytes(length: int) -> bytes:
    """
    Draw bytes from the platform CSPRNG.

    Raises:
        NoSecureRandomSource: If the platform has no strong random source
    """
    try:
        return secrets.token_bytes(length)
    except NotImplementedError as exc:
        logger.error("No cryptographically secure random source available")
        raise NoSecureRandomSource("No cryptographically secure random source available") from exc


def create_secret(length: Optional[int] = None,
                  config: AuthenticatorConfig = DEFAULT_CONFIG) -> str:
    """
    Generate a new random secret.

    Args:
        length: Number of characters (default 16, allowed 16..128)
        config: Length bounds and generation alphabet

    Returns:
        Secret string over the generation alphabet

    Raises:
        InvalidArgument: If length is outside the allowed range
        NoSecureRandomSource: If no strong random source is available
    """
    if length is None:
        length = config.default_secret_length

    if (isinstance(length, bool) or not isinstance(length, int)
            or not config.min_secret_length <= length <= config.max_secret_length):
        raise InvalidArgument(
            f"Secret length must be between {config.min_secret_length} "
            f"and {config.max_secret_length}"
        )

    random_bytes = secure_random_bytes(length)
    alphabet = config.secret_alphabet
    secret = ''.join(alphabet[byte & 31] for byte in random_bytes)

    logger.debug("Generated secret of length %d", length)
    return secret
