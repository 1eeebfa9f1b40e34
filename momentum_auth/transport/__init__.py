"""
Transport - HTTP pipeline and wire contract of the identity service.
"""

from momentum_auth.transport.http import BearerTokenAuth, SessionTransport
from momentum_auth.transport.api import IdentityServiceAPI

__all__ = [
    "BearerTokenAuth",
    "SessionTransport",
    "IdentityServiceAPI",
]
