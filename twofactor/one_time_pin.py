"""
one_time_pin.py — TOTP controller (RFC 6238) bound to a Token.

    counter = floor(unix_time / TIME_STEP)
    code    = HOTP(base32_decode(token.value), counter)

- Code generation always targets the current step exactly.
- Verification accepts any step in [step - window, step + window] to absorb
  clock skew between the authenticator app and the server.
- Verification never raises: a malformed stored secret reads as "wrong code".

OneTimePin holds no state besides the Token reference, so one instance can be
shared between threads.
"""

import hmac
import logging
import time
from typing import Optional

from . import base32, hotp
from .errors import TwoFactorError
from .token import DEFAULT_ISSUER, DEFAULT_NAME, Token

logger = logging.getLogger(__name__)

TIME_STEP = 30          # seconds per TOTP step
DEFAULT_WINDOW = 4      # steps accepted on each side during verification


def timecode(for_time: float) -> int:
    """Map a unix timestamp to its TOTP step."""
    return int(for_time // TIME_STEP)


class OneTimePin:
    """
    Produce and verify one-time pins for a Token.

    >>> otp = OneTimePin.from_token_key("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ")
    >>> otp.at(59)
    '287082'
    >>> otp.verify("287082", window=0, for_time=59)
    True
    """

    def __init__(self, token: Optional[Token] = None) -> None:
        self.set_token(token)

    @classmethod
    def from_token_key(cls, key: str, name: str = DEFAULT_NAME) -> "OneTimePin":
        """Create a controller for an existing base32 secret."""
        return cls(Token(key, name))

    @property
    def token(self) -> Token:
        return self._token

    def set_token(self, token: Optional[Token] = None) -> "OneTimePin":
        """
        Bind a Token. Without one, a new token is created whose pool is
        restricted to upper-case letters so its value is valid base32.
        """
        if token is None:
            token = Token().use_alpha(False).use_numeric(False)
        self._token = token
        return self

    # --- Steps ------------------------------------------------------------
    def current_step(self) -> int:
        return timecode(time.time())

    def remaining_seconds(self, for_time: Optional[float] = None) -> int:
        """Seconds until the code for for_time (default: now) rolls over."""
        if for_time is None:
            for_time = time.time()
        return int(TIME_STEP - (for_time % TIME_STEP))

    # --- Generation -------------------------------------------------------
    def current_code(self) -> str:
        """
        Code for the current step.

        Raises:
            InvalidCharacter: if the token value is not base32
            KeyTooShort: if the token decodes to fewer than 8 bytes
        """
        return self.at_step(self.current_step())

    now = current_code

    def at(self, for_time: float) -> str:
        """Code valid at the given unix timestamp."""
        return self.at_step(timecode(for_time))

    def at_step(self, step: int) -> str:
        """Code for an explicit step counter."""
        key = base32.decode(self._token.value)
        return hotp.generate(key, step)

    # --- Verification -----------------------------------------------------
    def verify(
        self,
        candidate: str,
        window: int = DEFAULT_WINDOW,
        for_time: Optional[float] = None,
        counter: Optional[int] = None,
    ) -> bool:
        """
        Check a user-supplied code against the token.

        Arguments:
            candidate: code typed by the user, compared exactly ("42" != "000042")
            window: steps accepted on either side of the reference step
            for_time: unix timestamp to verify against instead of now
            counter: step to verify against; takes precedence over for_time

        Returns:
            bool: True if candidate matches any step in the window
        """
        try:
            if counter is not None:
                step = int(counter)
            elif for_time is not None:
                step = timecode(for_time)
            else:
                step = self.current_step()

            candidate_bytes = str(candidate).encode("utf-8")
            key = base32.decode(self._token.value)
            for offset in range(-window, window + 1):
                test_counter = step + offset
                if test_counter < 0:
                    continue
                expected = hotp.generate(key, test_counter)
                if hmac.compare_digest(expected.encode("utf-8"), candidate_bytes):
                    logger.debug("Code matched at step offset %+d", offset)
                    return True
        except (TwoFactorError, ValueError, OverflowError) as e:
            logger.warning("Verification failed on token %r: %s", self._token.name, type(e).__name__)
            return False

        logger.debug("No match within +/-%d steps", window)
        return False

    # --- Provisioning -----------------------------------------------------
    def provisioning_uri(self, issuer: str = DEFAULT_ISSUER) -> str:
        return self._token.provisioning_uri(issuer)
