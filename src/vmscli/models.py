"""Canonical Pydantic models and enums shared across vmscli modules.

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`RequestConfig` and :class:`GlobalConfig`.

**Auth models** -- :class:`Credentials` (persisted by the credential store),
:class:`StoreKind` (which backend to use), and the login state machine
enums :class:`LoginState` and :class:`LoginOutcome`.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Auth ---


class Credentials(BaseModel):
    """A username/password pair for the portal.

    Instances are immutable; updating stored credentials always replaces
    them wholesale.  Emptiness is checked by
    :meth:`~vmscli.auth.credential_store.CredentialStore.save` rather than
    here so that it surfaces as :class:`~vmscli.exceptions.ValidationError`.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"

    def __str__(self) -> str:
        return f"username={self.username!r} password='***'"


class StoreKind(str, enum.Enum):
    """Credential backend selector.

    ``AUTO`` prefers the OS keyring and falls back to the credentials file
    whenever the keyring fails (headless hosts, CI containers).
    """

    AUTO = "auto"
    KEYRING = "keyring"
    FILE = "file"


class LoginState(str, enum.Enum):
    """States of a single login attempt."""

    START = "start"
    FORM_SUBMITTED = "form_submitted"
    SESSION_CHECK_PENDING = "session_check_pending"
    SUCCESS = "success"
    FAILED = "failed"


class LoginOutcome(str, enum.Enum):
    """Classification of a finished (or provisional) login attempt."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    INTERACTIVE_AUTH_REQUIRED = "interactive_auth_required"
    TRANSPORT_OR_SERVER_ERROR = "transport_or_server_error"


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings for every request sent to the portal."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/vmscli/config.json``.

    Loaded and saved by :func:`~vmscli.config.load_global_config` and
    :func:`~vmscli.config.save_global_config`.  ``base_url`` can be
    overridden by ``VMSCLI_BASE_URL`` or ``--base-url``, and
    ``credential_store`` by ``VMSCLI_CREDENTIAL_STORE``.
    """

    base_url: Optional[str] = Field(
        default=None, description="Portal root URL, e.g. https://portal.example.com"
    )
    credential_store: str = Field(
        default="auto", description="Preferred credential backend: auto, keyring, file"
    )
    cookie_prefix: str = Field(
        default="production",
        description="Prefix of the access-token cookie name (<prefix>access_token)",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
