"""
twofactor package
=================

Time-based one-time passcodes (TOTP, RFC 6238) built on HOTP (RFC 4226),
plus the per-identity secrets (Tokens) they are derived from.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^6
- TOTP: HOTP with counter = floor(unix_time / 30)
- Verification accepts codes from +/- 4 steps around "now" by default.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from twofactor import OneTimePin, Token
>>> token = Token(name="alice@example.com").use_alpha(False).use_numeric(False)
>>> otp = OneTimePin(token)
>>> code = otp.current_code()
>>> otp.verify(code)
True
>>> uri = token.provisioning_uri()     # render this as a QR code
"""
from .errors import (
    EmptyCharacterPool,
    InvalidCharacter,
    InvalidCounter,
    KeyTooShort,
    TwoFactorError,
)
from .one_time_pin import OneTimePin
from .token import Token

__all__ = [
    "EmptyCharacterPool",
    "InvalidCharacter",
    "InvalidCounter",
    "KeyTooShort",
    "OneTimePin",
    "Token",
    "TwoFactorError",
]
