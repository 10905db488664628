"""
HTTP authentication helpers used alongside the two-factor core.
"""

from .basic_auth import BasicAuth, Credentials, MalformedToken

__all__ = ["BasicAuth", "Credentials", "MalformedToken"]
