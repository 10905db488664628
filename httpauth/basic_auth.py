"""
basic_auth.py — HTTP Basic authorisation header codec.

    encode("alice", "s3cret")  -> "Basic YWxpY2U6czNjcmV0"
    decode("Basic YWxpY2U6czNjcmV0") -> Credentials("alice", "s3cret")

decode() returns None for anything that is not a well-formed token: bad
base64, non UTF-8 payload, or a payload without the ':' separator. It never
returns a partially filled pair.
"""

import base64
import binascii
from typing import NamedTuple, Optional

from werkzeug.datastructures import Authorization


class MalformedToken(ValueError):
    """Raised by BasicAuth.from_token when the token cannot be decoded."""


class Credentials(NamedTuple):
    username: str
    password: str


class BasicAuth:
    """Username/password pair that renders as a Basic authorisation token."""

    def __init__(self, username: Optional[str] = None, password: Optional[str] = None) -> None:
        self.username = username
        self.password = password

    @classmethod
    def from_token(cls, token: str) -> "BasicAuth":
        """
        Build from an encoded token ("Basic xxx" or just "xxx").

        Raises:
            MalformedToken: if the token does not decode to user:pass
        """
        credentials = cls.decode(token)
        if credentials is None:
            raise MalformedToken("Not a valid basic authorisation token")
        return cls(credentials.username, credentials.password)

    @staticmethod
    def decode(token: str) -> Optional[Credentials]:
        """
        Decode a basic auth token.

        Only the last whitespace separated part is decoded, so both the full
        header value and the bare base64 payload are accepted.

        Returns:
            Credentials or None on failure
        """
        parts = token.split()
        if not parts:
            return None
        try:
            decoded = base64.b64decode(parts[-1], validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None

        if ":" not in decoded:
            return None
        username, _, password = decoded.partition(":")
        return Credentials(username, password)

    @staticmethod
    def encode(username: str, password: str) -> str:
        """Create a basic auth token: "Basic " + base64("user:pass")."""
        return Authorization("basic", {"username": username, "password": password}).to_header()

    @property
    def token(self) -> Optional[str]:
        """Encoded token, or None until both username and password are set."""
        if self.username is not None and self.password is not None:
            return self.encode(self.username, self.password)
        return None

    def __str__(self) -> str:
        return self.token or ""
