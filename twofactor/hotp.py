"""
hotp.py — HOTP engine (RFC 4226).

    code = Truncate(HMAC-SHA1(key, counter)) mod 10^6

- counter is sent to HMAC as an 8-byte big-endian integer.
- Dynamic truncation: offset = last byte & 0x0F, take 4 bytes from offset,
  clear the MSB of the first one, read as a 31-bit unsigned integer.
- Result is zero-padded to exactly DIGITS characters.

Every function here is pure; the same key and counter always give the same
code, which is what makes verification on the server side possible.
"""

import hashlib
import hmac
import struct

from .errors import InvalidCounter, KeyTooShort

DIGITS = 6
MIN_KEY_BYTES = 8
MAX_COUNTER = 2 ** 64 - 1


def int_to_bytes(i: int) -> bytes:
    """
    Convert a counter into the 8-byte big-endian message HMAC expects.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        InvalidCounter: if i is negative or wider than 64 bits
    """
    if i < 0 or i > MAX_COUNTER:
        raise InvalidCounter(f"HOTP counter must be in 0..2**64-1, got {i}")
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation to an HMAC-SHA1 digest.

    Returns:
        int: 31-bit unsigned integer
    """
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def generate(key: bytes, counter: int) -> str:
    """
    Compute the HOTP code for a binary key and a counter.

    Arguments:
        key: raw secret bytes (at least MIN_KEY_BYTES long)
        counter: non-negative integer counter

    Returns:
        str: code of exactly DIGITS decimal digits, e.g. "000042"

    Raises:
        KeyTooShort: if key is shorter than MIN_KEY_BYTES
        InvalidCounter: if counter is out of range
    """
    if len(key) < MIN_KEY_BYTES:
        raise KeyTooShort(
            f"Secret key is too short, must decode to at least {MIN_KEY_BYTES} bytes "
            f"(got {len(key)})"
        )

    msg = int_to_bytes(counter)
    digest = hmac.new(key, msg, hashlib.sha1).digest()

    dbc = dynamic_truncate(digest)
    return str(dbc % (10 ** DIGITS)).zfill(DIGITS)
