"""
Ports - Interfaces for credential storage and the platform ceremony.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from momentum_auth.ports.store_port import CredentialStorePort
from momentum_auth.ports.ceremony_port import CeremonyPort

__all__ = [
    "CredentialStorePort",
    "CeremonyPort",
]
