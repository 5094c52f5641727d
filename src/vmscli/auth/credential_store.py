"""Persistent storage for the portal username and password.

Two backends are available:

* **keyring** -- two entries (``username`` and ``password``) under the
  ``vmscli`` service in the OS keyring, via :class:`KeyringCredentials`.
* **file** -- ``credentials.yaml`` next to the config file, written
  atomically with ``0o600`` permissions inside a ``0o700`` directory, via
  :class:`CredentialsFile`.

:class:`CredentialStore` picks one per operation.  The effective
:class:`~vmscli.models.StoreKind` comes from the override (the
``VMSCLI_CREDENTIAL_STORE`` value, read once at the program boundary), then
the caller's preference, then ``auto``.  In ``auto`` mode the keyring is
tried first and the file is the fallback, so the CLI keeps working on
headless hosts where no keyring daemon is running.

See Also:
    :mod:`vmscli.auth.backends` -- the keyring capability interface.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from vmscli.auth.backends import KeyringBackend, SecretBackend, SecretNotFoundError
from vmscli.config import atomic_write, credential_store_override, get_credentials_path
from vmscli.exceptions import (
    BackendError,
    CombinedStoreError,
    CorruptCredentialsError,
    CredentialsNotFoundError,
    ValidationError,
)
from vmscli.models import Credentials, StoreKind

logger = logging.getLogger(__name__)

SERVICE_NAME = "vmscli"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"

_ALLOWED_KINDS = ", ".join(kind.value for kind in StoreKind)


# --- Store kind resolution ---


def normalize_store_kind(raw: Optional[str]) -> str:
    """Lower-case and strip *raw*; an empty value means ``auto``."""
    value = (raw or "").strip().lower()
    return value or StoreKind.AUTO.value


def validate_store_kind(raw: Optional[str]) -> StoreKind:
    """Return the :class:`StoreKind` named by *raw*.

    Accepts ``""``, ``auto``, ``keyring`` and ``file`` in any case, with
    surrounding whitespace.

    Raises:
        ValidationError: For any other value.
    """
    try:
        return StoreKind(normalize_store_kind(raw))
    except ValueError:
        raise ValidationError(
            f"invalid credential store {raw!r} (allowed: {_ALLOWED_KINDS})"
        ) from None


def resolve_store_kind(preferred: Optional[str] = None, override: Optional[str] = None) -> StoreKind:
    """Pick the store kind for one operation.

    A non-blank *override* wins over *preferred*; with neither set the result
    is ``auto``.  The winning value is always validated.
    """
    value = override if override and override.strip() else preferred
    return validate_store_kind(value)


# --- Backends ---


class KeyringCredentials:
    """Credentials kept as two entries in a :class:`SecretBackend`."""

    def __init__(self, backend: SecretBackend, service: str = SERVICE_NAME) -> None:
        self._backend = backend
        self._service = service

    def save(self, creds: Credentials) -> None:
        try:
            self._backend.set(self._service, USERNAME_KEY, creds.username)
        except Exception as exc:
            raise BackendError(f"save username to keyring: {exc}", backend="keyring") from exc
        try:
            self._backend.set(self._service, PASSWORD_KEY, creds.password)
        except Exception as exc:
            raise BackendError(f"save password to keyring: {exc}", backend="keyring") from exc

    def load(self) -> Credentials:
        username = self._get(USERNAME_KEY)
        password = self._get(PASSWORD_KEY)
        return Credentials(username=username, password=password)

    def delete(self) -> None:
        errors: list[BackendError] = []
        for key in (USERNAME_KEY, PASSWORD_KEY):
            try:
                self._backend.delete(self._service, key)
            except SecretNotFoundError:
                continue
            except Exception as exc:
                error = BackendError(f"delete {key} from keyring: {exc}", backend="keyring")
                error.__cause__ = exc
                errors.append(error)
        if errors:
            raise errors[0]

    def _get(self, key: str) -> str:
        try:
            return self._backend.get(self._service, key)
        except SecretNotFoundError as exc:
            raise CredentialsNotFoundError() from exc
        except Exception as exc:
            raise BackendError(f"read {key} from keyring: {exc}", backend="keyring") from exc


class CredentialsFile:
    """Credentials kept in a two-field YAML document readable only by the owner."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def save(self, creds: Credentials) -> None:
        """Write *creds* atomically with ``0o600`` permissions, replacing any old file.

        Raises:
            BackendError: If the directory or file cannot be written.
        """
        directory = self._path.parent
        try:
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            os.chmod(directory, 0o700)
        except OSError as exc:
            raise BackendError(f"create credentials dir: {exc}", backend="file") from exc

        text = yaml.safe_dump(
            {USERNAME_KEY: creds.username, PASSWORD_KEY: creds.password},
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        try:
            atomic_write(self._path, text, mode=0o600)
        except OSError as exc:
            raise BackendError(f"write credentials file: {exc}", backend="file") from exc

    def load(self) -> Credentials:
        """Read credentials back.

        Raises:
            CredentialsNotFoundError: If the file does not exist.
            CorruptCredentialsError: If it cannot be parsed or misses a field.
            BackendError: If it exists but cannot be read.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CredentialsNotFoundError() from exc
        except OSError as exc:
            raise BackendError(f"read credentials file: {exc}", backend="file") from exc

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CorruptCredentialsError(f"parse credentials file: {exc}") from exc

        if not isinstance(data, dict):
            raise CorruptCredentialsError("credentials file is missing required fields")
        username = data.get(USERNAME_KEY)
        password = data.get(PASSWORD_KEY)
        if not isinstance(username, str) or not username.strip():
            raise CorruptCredentialsError("credentials file is missing required fields")
        if not isinstance(password, str) or password == "":
            raise CorruptCredentialsError("credentials file is missing required fields")
        return Credentials(username=username, password=password)

    def delete(self) -> None:
        """Remove the file; a missing file is not an error."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise BackendError(f"delete credentials file: {exc}", backend="file") from exc


# --- Store ---


class CredentialStore:
    """Save, load and delete portal credentials across keyring and file backends.

    Args:
        credentials_path: Location of the YAML fallback file.  Defaults to
            :func:`~vmscli.config.get_credentials_path`, resolved lazily.
        backend: Secret backend for the keyring store.  Defaults to
            :class:`~vmscli.auth.backends.KeyringBackend`.
        override: Store kind that wins over every ``preferred`` argument,
            normally the ``VMSCLI_CREDENTIAL_STORE`` value.  See
            :meth:`from_environment`.

    Example::

        store = CredentialStore.from_environment()
        store.save(Credentials(username="me@example.com", password="s3cret"))
        creds = store.load()
    """

    def __init__(
        self,
        credentials_path: Optional[Path] = None,
        backend: Optional[SecretBackend] = None,
        override: Optional[str] = None,
    ) -> None:
        self._credentials_path = credentials_path
        self._keyring = KeyringCredentials(backend or KeyringBackend())
        self._override = override

    @classmethod
    def from_environment(cls, credentials_path: Optional[Path] = None, backend: Optional[SecretBackend] = None) -> CredentialStore:
        """Build a store whose override is read from ``VMSCLI_CREDENTIAL_STORE``."""
        return cls(credentials_path, backend=backend, override=credential_store_override())

    @property
    def path(self) -> Path:
        """Location of the file-backend credentials."""
        if self._credentials_path is None:
            self._credentials_path = get_credentials_path()
        return self._credentials_path

    def resolve(self, preferred: Optional[str] = None) -> StoreKind:
        """The store kind an operation with *preferred* would use."""
        return resolve_store_kind(preferred, self._override)

    def save(self, creds: Credentials, preferred: Optional[str] = None) -> StoreKind:
        """Persist *creds*.

        Returns:
            The backend that holds the credentials (never ``AUTO``).

        Raises:
            ValidationError: If the username or password is empty, or the
                store kind is invalid.
            BackendError: If a single-backend write fails.
            CombinedStoreError: If both backends fail in ``auto`` mode.
        """
        if not creds.username:
            raise ValidationError("username is required")
        if not creds.password:
            raise ValidationError("password is required")

        kind = self.resolve(preferred)
        if kind is StoreKind.KEYRING:
            self._keyring.save(creds)
            return kind
        if kind is StoreKind.FILE:
            self._file().save(creds)
            return kind

        try:
            self._keyring.save(creds)
            return StoreKind.KEYRING
        except Exception as keyring_error:
            logger.debug("keyring save failed, falling back to file: %s", keyring_error)
            try:
                self._file().save(creds)
            except Exception as file_error:
                raise CombinedStoreError("save", keyring_error, file_error) from file_error
            return StoreKind.FILE

    def load(self, preferred: Optional[str] = None) -> Credentials:
        """Load stored credentials.

        In ``auto`` mode the keyring wins; the file is consulted only when the
        keyring fails.  When both fail, a "not found" from one backend yields
        to the other backend's error, since that one is actionable.

        Raises:
            CredentialsNotFoundError: If no credentials are stored.
            CorruptCredentialsError: If the file exists but is incomplete.
            BackendError: If a backend fails for another reason.
            CombinedStoreError: If both backends fail for other reasons.
        """
        kind = self.resolve(preferred)
        if kind is StoreKind.KEYRING:
            return self._keyring.load()
        if kind is StoreKind.FILE:
            return self._file().load()

        try:
            return self._keyring.load()
        except Exception as exc:
            keyring_error = exc
        logger.debug("keyring load failed, trying file: %s", keyring_error)
        try:
            return self._file().load()
        except Exception as exc:
            file_error = exc

        keyring_missing = isinstance(keyring_error, CredentialsNotFoundError)
        file_missing = isinstance(file_error, CredentialsNotFoundError)
        if keyring_missing and file_missing:
            raise CredentialsNotFoundError()
        if keyring_missing:
            raise file_error
        if file_missing:
            raise keyring_error
        raise CombinedStoreError("load", keyring_error, file_error) from file_error

    def delete(self, preferred: Optional[str] = None) -> None:
        """Remove stored credentials.  Absence is never an error.

        In ``auto`` mode both backends are cleared; the call fails only when
        both of them fail.
        """
        kind = self.resolve(preferred)
        if kind is StoreKind.KEYRING:
            self._keyring.delete()
            return
        if kind is StoreKind.FILE:
            self._file().delete()
            return

        keyring_error: Optional[Exception] = None
        file_error: Optional[Exception] = None
        try:
            self._keyring.delete()
        except Exception as exc:
            keyring_error = exc
        try:
            self._file().delete()
        except Exception as exc:
            file_error = exc
        if keyring_error is not None and file_error is not None:
            raise CombinedStoreError("delete", keyring_error, file_error) from file_error
        if keyring_error is not None:
            logger.debug("keyring delete failed: %s", keyring_error)
        if file_error is not None:
            logger.debug("file delete failed: %s", file_error)

    def _file(self) -> CredentialsFile:
        return CredentialsFile(self.path)
