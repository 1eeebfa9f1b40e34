"""
SDK - High-level client for application code.
"""

from momentum_auth.sdk.client import AuthClient

__all__ = ["AuthClient"]
