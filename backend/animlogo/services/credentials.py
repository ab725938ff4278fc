"""Credential gate and host credential providers.

The host environment owns API key selection. The pipeline only asks whether
a usable key is selected and, when not, triggers the host's picker.
Providers are injected so tests and embedding hosts can substitute their own.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from dotenv import load_dotenv
from pydantic import SecretStr

from animlogo.config import Settings, settings
from animlogo.errors import CredentialMissingError

logger = logging.getLogger(__name__)

# Environment variables checked after settings.google.api_key
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


class CredentialProvider(ABC):
    """Host capability that holds the currently selected API key."""

    @abstractmethod
    async def has_credential(self) -> bool:
        """Return True if a key is currently selected."""
        ...

    @abstractmethod
    async def select_credential(self) -> None:
        """Open the host's key picker.

        Success is assumed once this returns: either the host supplied a key
        or the user abandoned the flow.
        """
        ...

    @abstractmethod
    async def get_credential(self) -> Optional[str]:
        """Return the selected key, or None if there is none."""
        ...


class EnvCredentialProvider(CredentialProvider):
    """Reads the key from settings, then GEMINI_API_KEY / GOOGLE_API_KEY.

    After select_credential() the key found on re-reading ``.env`` and the
    settings sources takes priority, preferring one that differs from the key
    in use so an expired configured key can be replaced.
    """

    def __init__(self, dotenv_path: Optional[str] = None) -> None:
        self._dotenv_path = dotenv_path
        self._selected: Optional[str] = None

    async def has_credential(self) -> bool:
        return bool(await self.get_credential())

    async def select_credential(self) -> None:
        current = await self.get_credential()
        load_dotenv(self._dotenv_path, override=True)

        candidates = [_secret_value(Settings().google.api_key)]
        candidates += [os.environ.get(name) for name in API_KEY_ENV_VARS]
        candidates = [key for key in candidates if key]

        fresh = [key for key in candidates if key != current]
        self._selected = (fresh or candidates or [None])[0]
        if candidates and not fresh:
            logger.warning("Re-selection found no new API key, keeping the current one")

    async def get_credential(self) -> Optional[str]:
        if self._selected:
            return self._selected
        value = _secret_value(settings.google.api_key)
        if value:
            return value
        for name in API_KEY_ENV_VARS:
            value = os.environ.get(name)
            if value:
                return value
        return None


def _secret_value(secret: Optional[SecretStr]) -> Optional[str]:
    return secret.get_secret_value() if secret is not None else None


class StaticCredentialProvider(CredentialProvider):
    """In-memory key holder.

    select_credential() swaps in the next key from ``replacements`` when one
    is queued, mimicking a picker where the user chooses a different key.
    """

    def __init__(self, api_key: Optional[str] = None, replacements: Optional[list[str]] = None) -> None:
        self.api_key = api_key
        self._replacements = list(replacements or [])
        self.select_calls = 0

    async def has_credential(self) -> bool:
        return bool(self.api_key)

    async def select_credential(self) -> None:
        self.select_calls += 1
        if self._replacements:
            self.api_key = self._replacements.pop(0)

    async def get_credential(self) -> Optional[str]:
        return self.api_key


class CredentialGate:
    """Tracks whether a usable API credential is currently selected."""

    def __init__(self, provider: CredentialProvider) -> None:
        self.provider = provider

    async def has_credential(self) -> bool:
        """Query the host. Host errors count as "no credential"."""
        try:
            return bool(await self.provider.has_credential())
        except Exception as e:
            logger.warning(f"Credential check failed, treating as missing: {type(e).__name__}: {e}")
            return False

    async def request_credential(self) -> None:
        """Delegate to the host's credential picker."""
        logger.info("Requesting credential selection from host")
        await self.provider.select_credential()

    async def require_credential(self) -> str:
        """Return the selected key.

        Raises:
            CredentialMissingError: If the host has no key selected.
        """
        api_key = await self.provider.get_credential()
        if not api_key:
            raise CredentialMissingError("No API key selected. Please select a key to continue.")
        return api_key
