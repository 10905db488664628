"""
token.py — Two-factor secret (Token).

A Token owns:
- the secret value shared with the user's authenticator app,
- a display name used in the otpauth:// provisioning URI,
- the character-pool settings used when a new secret has to be generated.

The value is either set explicitly or generated on first access; once set it
does not change until set_value() replaces it. Changing the pool settings
afterwards does not regenerate an existing value.

Generation draws from the OS CSPRNG (``secrets``), never from ``random``.
"""

import base64
import io
import logging
import os
import secrets
import threading
from typing import Optional

import qrcode
import qrcode.image.svg

from .errors import EmptyCharacterPool

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
ALPHA = "abcdefghijklmnopqrstuvwxyz"
ALPHA_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
NUMERIC = "0123456789"
SPECIAL = ".-+=_,!@$#*%<>[]{}"

DEFAULT_LENGTH = 16
MIN_LENGTH = 8
MAX_LENGTH = 20
DEFAULT_NAME = "Unknown"
DEFAULT_ISSUER = os.getenv("TWOFACTOR_ISSUER", "TwoFactor")

_sysrand = secrets.SystemRandom()


class Token:
    """
    Two-factor secret with lazy, thread-safe generation.

    >>> token = Token("JBSWY3DPEHPK3PXP", name="alice")
    >>> str(token)
    'JBSWY3DPEHPK3PXP'
    >>> len(Token().use_special(True).set_length(20).value)
    20
    """

    def __init__(self, value: Optional[str] = None, name: str = DEFAULT_NAME) -> None:
        """
        Arguments:
            value: secret; if empty or None a random one is generated on first read
            name: token name shown in authenticator apps
        """
        self._lock = threading.Lock()
        self._value: Optional[str] = value or None
        self.name = name

        self._length = DEFAULT_LENGTH
        self._use_alpha = True
        self._use_alpha_upper = True
        self._use_numeric = True
        self._use_special = False
        self._chars: Optional[str] = None

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        state = "set" if self.is_set else "unset"
        return f"<Token name={self.name!r} value={state}>"

    # --- Character pool settings ------------------------------------------
    @property
    def length(self) -> int:
        return self._length

    def set_length(self, length: int = DEFAULT_LENGTH) -> "Token":
        """
        Set the length of generated secrets.

        Values outside MIN_LENGTH..MAX_LENGTH are ignored and the current
        length is kept.
        """
        if MIN_LENGTH <= length <= MAX_LENGTH:
            self._length = length
            self._chars = None
        else:
            logger.debug("Ignoring token length %s (allowed %s-%s)", length, MIN_LENGTH, MAX_LENGTH)
        return self

    def use_alpha(self, use_alpha: bool = True) -> "Token":
        self._chars = None
        self._use_alpha = use_alpha
        return self

    def use_alpha_upper(self, use_alpha_upper: bool = True) -> "Token":
        self._chars = None
        self._use_alpha_upper = use_alpha_upper
        return self

    def use_numeric(self, use_numeric: bool = True) -> "Token":
        self._chars = None
        self._use_numeric = use_numeric
        return self

    def use_special(self, use_special: bool = False) -> "Token":
        self._chars = None
        self._use_special = use_special
        return self

    @property
    def flags(self) -> dict:
        """Current character-class switches."""
        return {
            "use_alpha": self._use_alpha,
            "use_alpha_upper": self._use_alpha_upper,
            "use_numeric": self._use_numeric,
            "use_special": self._use_special,
        }

    @property
    def chars(self) -> str:
        """Character pool for generation, rebuilt after any setting changes."""
        if self._chars is None:
            chars = ""
            if self._use_alpha:
                chars += ALPHA
            if self._use_alpha_upper:
                chars += ALPHA_UPPER
            if self._use_numeric:
                chars += NUMERIC
            if self._use_special:
                chars += SPECIAL
            self._chars = chars
        return self._chars

    # --- Value ------------------------------------------------------------
    @property
    def is_set(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> str:
        """Secret value, generated on first access if none was given."""
        return self.ensure_generated()

    def set_value(self, value: str) -> "Token":
        """Replace the secret value. An empty value is generated again on next read."""
        with self._lock:
            self._value = value or None
        return self

    def ensure_generated(self) -> str:
        """
        Return the value, generating and freezing it if unset.

        Guarded by a lock so concurrent first readers all see the same secret.
        """
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self.generate()
                logger.debug(
                    "Generated %d-character token from a pool of %d characters",
                    len(self._value), len(self.chars),
                )
            return self._value

    def generate(self) -> str:
        """
        Build a new random secret from the current pool.

        Characters are drawn uniformly with replacement, then the whole
        string is shuffled. Does not touch the stored value.

        Raises:
            EmptyCharacterPool: if every character class is disabled
        """
        chars = self.chars
        if not chars:
            raise EmptyCharacterPool("Cannot generate a token: every character class is disabled")

        picked = [secrets.choice(chars) for _ in range(self._length)]
        _sysrand.shuffle(picked)
        return "".join(picked)

    # --- Provisioning -----------------------------------------------------
    def provisioning_uri(self, issuer: str = DEFAULT_ISSUER) -> str:
        """
        otpauth:// URI to hand to a QR renderer or authenticator app.

        Format: otpauth://totp/<issuer>/<name>?secret=<value>
        """
        return f"otpauth://totp/{issuer}/{self.name}?secret={self.value}"

    def image_base64(self, issuer: str = DEFAULT_ISSUER) -> str:
        """QR code of provisioning_uri() as a base64-encoded SVG image."""
        img = qrcode.make(self.provisioning_uri(issuer), image_factory=qrcode.image.svg.SvgPathImage)
        buf = io.BytesIO()
        img.save(buf)
        return base64.b64encode(buf.getvalue()).decode("ascii")
