"""Secret-store capability used by the keyring credential backend.

The OS keyring cannot be reimplemented portably, so the credential store
talks to it through the small :class:`SecretBackend` interface.  Production
code uses :class:`KeyringBackend` (the :mod:`keyring` library); tests plug
in an in-memory implementation to exercise the Auto-mode fallback rules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import keyring
import keyring.errors


class SecretNotFoundError(Exception):
    """The requested ``(service, key)`` entry does not exist."""


class SecretBackend(ABC):
    """Minimal get/set/delete interface over a secret store.

    :meth:`get` and :meth:`delete` raise :class:`SecretNotFoundError` when
    the entry is absent.  Every other failure propagates unchanged.
    """

    @abstractmethod
    def set(self, service: str, key: str, value: str) -> None:
        ...

    @abstractmethod
    def get(self, service: str, key: str) -> str:
        ...

    @abstractmethod
    def delete(self, service: str, key: str) -> None:
        ...


class KeyringBackend(SecretBackend):
    """:class:`SecretBackend` over the platform keyring (Keychain, Secret Service, ...).

    On hosts without a usable keyring the library raises
    :class:`keyring.errors.NoKeyringError`, which callers treat as a backend
    failure.
    """

    def set(self, service: str, key: str, value: str) -> None:
        keyring.set_password(service, key, value)

    def get(self, service: str, key: str) -> str:
        value = keyring.get_password(service, key)
        if value is None:
            raise SecretNotFoundError(f"{service}/{key}")
        return value

    def delete(self, service: str, key: str) -> None:
        try:
            keyring.delete_password(service, key)
        except keyring.errors.PasswordDeleteError as exc:
            raise SecretNotFoundError(f"{service}/{key}") from exc
