"""
Credential store for the vision API key.

The key lives in the OS keychain via ``keyring``; OPENAI_API_KEY in the
environment overrides it.
"""

from typing import Optional, Protocol, runtime_checkable

import keyring
import structlog
from keyring.errors import KeyringError, PasswordDeleteError

from iscale.domain.shared.errors import InfrastructureError
from iscale.infrastructure.config import get_openai_api_key, load_environment

logger = structlog.get_logger(__name__)

SERVICE_NAME = "com.iscale.openai"
ACCOUNT_NAME = "api-key"


class CredentialStoreError(InfrastructureError):
    """Keychain backend failed to store or remove a key."""

    pass


@runtime_checkable
class ICredentialStore(Protocol):
    """Port for reading and managing the API key."""

    def get(self) -> Optional[str]:
        """Return the stored key, or None if none is configured."""
        ...

    def set(self, key: Optional[str]) -> None:
        """Store a key; None removes it."""
        ...

    def delete(self) -> None:
        """Remove the stored key (no-op if absent)."""
        ...


class KeyringCredentialStore:
    """
    API key stored in the OS keychain.

    Saving replaces any existing entry; empty keys are treated as absent.

    Example:
        >>> store = KeyringCredentialStore()
        >>> store.set("sk-...")
        >>> store.get()
        'sk-...'
    """

    def __init__(self, service: str = SERVICE_NAME, account: str = ACCOUNT_NAME):
        self.service = service
        self.account = account

    def get(self) -> Optional[str]:
        try:
            value = keyring.get_password(self.service, self.account)
        except KeyringError as e:
            logger.warning("Keychain read failed", service=self.service, error=str(e))
            return None
        return value or None

    def set(self, key: Optional[str]) -> None:
        if not key:
            self.delete()
            return
        try:
            keyring.set_password(self.service, self.account, key)
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to store API key: {e}") from e
        logger.info("API key stored", service=self.service)

    def delete(self) -> None:
        try:
            keyring.delete_password(self.service, self.account)
        except PasswordDeleteError:
            return
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to remove API key: {e}") from e
        logger.info("API key removed", service=self.service)


class InMemoryCredentialStore:
    """Process-local key store for tests and ephemeral sessions."""

    def __init__(self, key: Optional[str] = None):
        self._key = key or None

    def get(self) -> Optional[str]:
        return self._key

    def set(self, key: Optional[str]) -> None:
        self._key = key or None

    def delete(self) -> None:
        self._key = None


class EnvironmentOverrideStore:
    """
    Prefer OPENAI_API_KEY from the environment, then the wrapped store.

    Writes always go to the wrapped store.
    """

    def __init__(self, fallback: ICredentialStore):
        self.fallback = fallback

    def get(self) -> Optional[str]:
        return get_openai_api_key() or self.fallback.get()

    def set(self, key: Optional[str]) -> None:
        self.fallback.set(key)

    def delete(self) -> None:
        self.fallback.delete()


def create_credential_store() -> ICredentialStore:
    """Keychain-backed store with environment override."""
    load_environment()
    return EnvironmentOverrideStore(KeyringCredentialStore())
