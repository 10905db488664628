"""
base32.py — RFC 4648 base32 codec for TOTP secrets.

Secrets handed out to authenticator apps are unpadded base32 strings
(e.g. "JBSWY3DPEHPK3PXP"). decode() turns them back into the raw key bytes
fed to HMAC:

- Input must be ASCII; it is then upper-cased, so the codec is
  case-insensitive.
- Only A-Z and 2-7 are accepted. Padding '=' is rejected like any other
  foreign character.
- Bits are pushed through an accumulator 5 at a time; every time 8 or more
  bits are buffered one byte is emitted. 0-4 trailing bits are dropped.
"""

from types import MappingProxyType

from .errors import InvalidCharacter

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

# character -> 5-bit value, read-only
_LOOKUP = MappingProxyType({char: value for value, char in enumerate(ALPHABET)})


def decode(b32: str) -> bytes:
    """
    Decode a base32 string into raw bytes.

    Arguments:
        b32: base32 text, any case, no padding

    Returns:
        bytes: decoded key material

    Raises:
        InvalidCharacter: if a character outside A-Z2-7 is found
    """
    if not b32.isascii():
        position = next(i for i, char in enumerate(b32) if not char.isascii())
        raise InvalidCharacter(
            f"Invalid character {b32[position]!r} at position {position} in base32 string"
        )
    b32 = b32.upper()

    buffer = 0      # bit accumulator
    bits = 0        # number of valid bits in buffer
    out = bytearray()

    for position, char in enumerate(b32):
        value = _LOOKUP.get(char)
        if value is None:
            raise InvalidCharacter(
                f"Invalid character {char!r} at position {position} in base32 string"
            )
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1

    return bytes(out)


def encode(data: bytes) -> str:
    """
    Encode raw bytes as unpadded upper-case base32.

    Inverse of decode() for byte strings; the last symbol is zero-filled
    when the bit count is not a multiple of 5.
    """
    buffer = 0
    bits = 0
    out = []

    for byte in data:
        buffer = (buffer << 8) | byte
        bits += 8
        while bits >= 5:
            bits -= 5
            out.append(ALPHABET[(buffer >> bits) & 0x1F])
        buffer &= (1 << bits) - 1

    if bits:
        out.append(ALPHABET[(buffer << (5 - bits)) & 0x1F])

    return "".join(out)
