"""
Ceremony Port - Interface to the platform's WebAuthn credential ceremony.

The ceremony suspends until the user completes or cancels an out-of-band
interaction (biometric prompt, security key touch).

Implementations live with the host application: a browser bridge
(navigator.credentials via a webview), a native platform API, or a
CTAP client such as python-fido2.
"""

from abc import ABC, abstractmethod
from momentum_auth.domain.challenge import CredentialChallenge
from momentum_auth.domain.credential import AssertionResponse, AttestationResponse


class CeremonyPort(ABC):
    """Port: Run registration and authentication ceremonies."""

    @abstractmethod
    async def create(self, challenge: CredentialChallenge) -> AttestationResponse:
        """
        Run a registration ceremony (navigator.credentials.create).

        Args:
            challenge: Registration options; challenge.options is passed
                to the platform unchanged

        Returns:
            Attestation produced by the authenticator

        Raises:
            CeremonyDeclined: User declined or authenticator refused
            CeremonyTimedOut: Timed out or not allowed
            CeremonyAborted: Ceremony was aborted
        """
        pass

    @abstractmethod
    async def get(self, challenge: CredentialChallenge) -> AssertionResponse:
        """
        Run an authentication ceremony (navigator.credentials.get).

        Args:
            challenge: Authentication options; challenge.options is passed
                to the platform unchanged

        Returns:
            Assertion signed by the authenticator

        Raises:
            CeremonyDeclined: User declined or authenticator refused
            CeremonyTimedOut: Timed out or not allowed
            CeremonyAborted: Ceremony was aborted
        """
        pass
