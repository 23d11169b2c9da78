"""
Constant-Time Comparison

Compares a calculated code with a user-supplied one without leaking the
position of the first differing character through timing.

A length mismatch returns immediately; the length of a one-time code is
public. For equal lengths every byte is examined.

The vetted primitive hmac.compare_digest is used by default. xor_compare is
the portable accumulate-all-differences loop and must keep its shape: no
branch on the data and no early exit.
"""

import hmac
from typing import Union

Comparable = Union[str, bytes]


def _as_bytes(value: Comparable) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode('utf-8')


def xor_compare(a: Comparable, b: Comparable) -> bool:
    """
    Compare two values by OR-accumulating the XOR of every byte pair.

    Args:
        a: First value (str or bytes)
        b: Second value (str or bytes)

    Returns:
        True if both values are byte-identical
    """
    a_bytes = _as_bytes(a)
    b_bytes = _as_bytes(b)
    if len(a_bytes) != len(b_bytes):
        return False

    result = 0
    for x, y in zip(a_bytes, b_bytes):
        result |= x ^ y
    return result == 0


def equal_timing(a: Comparable, b: Comparable, use_platform: bool = True) -> bool:
    """
    Constant-time equality check.

    Args:
        a: Calculated value
        b: Value supplied by the user
        use_platform: Use hmac.compare_digest (default) instead of the
            manual XOR loop

    Returns:
        True only for byte-identical values of equal length
    """
    a_bytes = _as_bytes(a)
    b_bytes = _as_bytes(b)
    if len(a_bytes) != len(b_bytes):
        return False
    if use_platform:
        return hmac.compare_digest(a_bytes, b_bytes)
    return xor_compare(a_bytes, b_bytes)
