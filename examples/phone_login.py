"""
Phone Login Example - Passkey-first login with code fallback from a terminal.

A terminal has no platform authenticator, so the ceremony adapter declines
every request and the client falls back to a verification code.

    MOMENTUM_API_URL=https://api.example.com python examples/phone_login.py
"""

import asyncio
import logging

from momentum_auth import AuthClient, AuthConfig, CeremonyDeclined
from momentum_auth.adapters import FileCredentialStore
from momentum_auth.ports import CeremonyPort


class TerminalCeremony(CeremonyPort):
    """No authenticator available."""

    async def create(self, challenge):
        raise CeremonyDeclined("No authenticator in a terminal")

    async def get(self, challenge):
        raise CeremonyDeclined("No authenticator in a terminal")


async def main():
    logging.basicConfig(level=logging.INFO)
    config = AuthConfig.from_env()

    async with AuthClient(TerminalCeremony(), FileCredentialStore(config.store_path), config) as client:
        client.on_auth_state_changed(lambda user: print(f"Logged in: {user.is_logged_in}"))

        if client.is_logged_in():
            print("Already logged in")
            devices = await client.devices.list_devices()
            print(f"Signed-in devices: {len(devices)}")
            return

        phone = input("Phone number: ")
        country = input("Country [US]: ") or "US"

        outcome = await client.start_passkey_authentication(phone, country)
        if outcome.logged_in:
            return
        if not outcome.code_requested:
            print(f"Error: {client.last_error}")
            return

        print(client.last_error)
        code = input("Verification code: ")
        if await client.verify_code(outcome.phone, code, outcome.country):
            print(f"Welcome {client.current_user().name or outcome.phone}")
        else:
            print(f"Error: {client.last_error}")


if __name__ == "__main__":
    asyncio.run(main())
