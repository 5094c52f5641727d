"""Portal authentication and credential persistence.

The main entry points are:

- :class:`Authenticator` -- posts the login form, classifies the answer and
  verifies the resulting session.
- :class:`CredentialStore` -- saves, loads and deletes the username and
  password in the OS keyring or a ``0o600`` YAML file.
- :func:`extract_access_token` / :func:`extract_xsrf_token` -- read session
  tokens from the client's cookie jar.
- :func:`resolve_password` -- pick the password from a flag, stdin or a prompt.

Typical usage::

    from vmscli.auth import Authenticator, CredentialStore
    from vmscli.client import create_http_client

    creds = CredentialStore.from_environment().load()
    with create_http_client() as client:
        Authenticator(base_url, client).login(creds.username, creds.password)
"""

from vmscli.auth.authenticator import Authenticator
from vmscli.auth.backends import KeyringBackend, SecretBackend, SecretNotFoundError
from vmscli.auth.credential_store import (
    CredentialStore,
    resolve_store_kind,
    validate_store_kind,
)
from vmscli.auth.password import resolve_password
from vmscli.auth.tokens import extract_access_token, extract_xsrf_token

__all__ = [
    "Authenticator",
    "CredentialStore",
    "KeyringBackend",
    "SecretBackend",
    "SecretNotFoundError",
    "extract_access_token",
    "extract_xsrf_token",
    "resolve_password",
    "resolve_store_kind",
    "validate_store_kind",
]
