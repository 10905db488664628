"""
errors.py — Exceptions raised by the two-factor core.

All of them derive from ValueError, so callers that already guard secret
handling with ``except ValueError`` keep working.
"""


class TwoFactorError(ValueError):
    """Base class for every error raised by the twofactor package."""


class InvalidCharacter(TwoFactorError):
    """Base32 input contains a character outside A-Z / 2-7."""


class KeyTooShort(TwoFactorError):
    """Decoded secret is shorter than the HOTP minimum key size."""


class InvalidCounter(TwoFactorError):
    """HOTP counter is negative or does not fit in 64 bits."""


class EmptyCharacterPool(TwoFactorError):
    """Every character class is disabled, so no secret can be generated."""
