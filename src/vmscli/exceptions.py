"""Exception hierarchy for vmscli.

All exceptions inherit from :class:`VmsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`vmscli.exit_codes`.
The entry point in :func:`vmscli.app.main` catches ``VmsError`` and exits
with that code; anything else produces a crash log.

Subclass hierarchy::

    VmsError (exit 1)
    +-- ValidationError              (exit 2)
    +-- ConfigError                  (exit 1)
    +-- CredentialStoreError         (exit 1)
    |   +-- CredentialsNotFoundError (exit 4)
    |   +-- CorruptCredentialsError  (exit 1)
    |   +-- BackendError             (exit 1)
    |   +-- CombinedStoreError       (exit 1)
    +-- AuthError                    (exit 3)
    |   +-- LoginError
    |   |   +-- InvalidCredentialsError
    |   |   +-- InteractiveAuthRequiredError
    |   +-- TokenNotFoundError
    +-- ServerError                  (exit 5)
    +-- TransportError               (exit 6)

Underlying library errors are always chained (``raise ... from exc``) so
``__cause__`` keeps the diagnostic detail while the class gives callers a
stable classification.
"""

from __future__ import annotations

from typing import Optional

from vmscli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)
from vmscli.models import LoginOutcome


class VmsError(Exception):
    """Base exception for all vmscli errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(VmsError):
    """Raised for invalid input: empty username/password, unknown store kind, conflicting flags."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(VmsError):
    """Raised for configuration problems (invalid JSON, missing base URL)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Credential store ---


class CredentialStoreError(VmsError):
    """Base class for failures of the credential persistence layer."""


class CredentialsNotFoundError(CredentialStoreError):
    """No credentials are stored in the selected backend."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, message: str = "credentials not found", exit_code: int | None = None):
        super().__init__(message, exit_code)


class CorruptCredentialsError(CredentialStoreError):
    """Stored credentials exist but cannot be parsed or miss required fields."""


class BackendError(CredentialStoreError):
    """The keyring or the filesystem failed for a reason other than absence.

    Args:
        message: Description of the failed operation.
        backend: ``"keyring"`` or ``"file"``.
    """

    def __init__(self, message: str, backend: str = ""):
        super().__init__(message)
        self.backend = backend


class CombinedStoreError(CredentialStoreError):
    """Both backends of an Auto-mode operation failed.

    The message names both underlying errors; the individual exceptions are
    kept on :attr:`keyring_error` and :attr:`file_error`, and ``__cause__``
    points at the file error.
    """

    def __init__(self, operation: str, keyring_error: Exception, file_error: Exception):
        super().__init__(
            f"{operation} credentials failed (keyring: {keyring_error}, file: {file_error})"
        )
        self.keyring_error = keyring_error
        self.file_error = file_error
        self.__cause__ = file_error


# --- Authentication ---


class AuthError(VmsError):
    """Raised when authentication fails or the session is not accepted."""

    exit_code = EXIT_AUTH_FAILURE


class LoginError(AuthError):
    """A login attempt that the portal answered, but did not accept.

    :attr:`outcome` lets callers decide between retrying with different
    credentials and falling back to an interactive browser flow.
    """

    outcome: LoginOutcome = LoginOutcome.TRANSPORT_OR_SERVER_ERROR

    def __init__(self, message: str, outcome: Optional[LoginOutcome] = None):
        super().__init__(message)
        if outcome is not None:
            self.outcome = outcome


class InvalidCredentialsError(LoginError):
    """The portal reported an invalid username or password."""

    outcome = LoginOutcome.INVALID_CREDENTIALS


class InteractiveAuthRequiredError(LoginError):
    """The portal is still presenting its login prompt (SSO/MFA interstitial)."""

    outcome = LoginOutcome.INTERACTIVE_AUTH_REQUIRED


class TokenNotFoundError(AuthError):
    """No session cookie matching the requested token was found in the jar."""


# --- Transport ---


class ServerError(VmsError):
    """Raised when the portal answers with an HTTP error status."""

    exit_code = EXIT_SERVER_ERROR


class TransportError(VmsError):
    """Raised on network-level failures (timeout, DNS, refused connection, cancellation)."""

    exit_code = EXIT_CONNECTION_ERROR
