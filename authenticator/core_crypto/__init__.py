# Core Cryptography Module
"""
Primitive building blocks of the one-time password scheme:
- Base32 secret decoding (lenient by default)
- Constant-time comparison
"""

from .base32 import Base32Codec, base32_decode
from .constant_time import equal_timing, xor_compare

__all__ = [
    'Base32Codec',
    'base32_decode',
    'equal_timing',
    'xor_compare',
]
