"""Auth commands -- log in to the portal and manage stored credentials.

Provides the ``vmscli auth`` sub-command group:

    vmscli auth login -u me@example.com      # prompt for the password
    echo "$PW" | vmscli auth login -u me@example.com --password-stdin
    vmscli auth status                       # log in with stored credentials
    vmscli auth token --xsrf                 # print a session token
    vmscli auth logout                       # forget stored credentials

``--store`` selects the credential backend (``auto``, ``keyring``,
``file``); ``VMSCLI_CREDENTIAL_STORE`` overrides it.
"""

from __future__ import annotations

import sys
from typing import Any, Optional

import typer

from vmscli.auth.authenticator import Authenticator
from vmscli.auth.credential_store import CredentialStore
from vmscli.auth.password import resolve_password
from vmscli.client import create_http_client
from vmscli.config import load_global_config, resolve_base_url
from vmscli.exceptions import (
    CredentialsNotFoundError,
    InteractiveAuthRequiredError,
    InvalidCredentialsError,
    ValidationError,
    VmsError,
)
from vmscli.models import Credentials, GlobalConfig, StoreKind
from vmscli.output import error, format_response, info, print_data, success, suggest


auth_app = typer.Typer(no_args_is_help=True)

_STORE_HELP = "Credential store: auto, keyring, file (VMSCLI_CREDENTIAL_STORE wins)."


def _credential_store() -> CredentialStore:
    return CredentialStore.from_environment()


def _options(ctx: typer.Context) -> dict[str, Any]:
    return ctx.obj if isinstance(ctx.obj, dict) else {}


def _fail(exc: VmsError) -> typer.Exit:
    """Report *exc* on stderr and return the matching ``typer.Exit``."""
    error(str(exc))
    if isinstance(exc, InvalidCredentialsError):
        suggest("Check the username and password and try again.")
    elif isinstance(exc, InteractiveAuthRequiredError):
        suggest("This account needs SSO/MFA: sign in through a browser instead.")
    elif isinstance(exc, CredentialsNotFoundError):
        suggest("Log in first: vmscli auth login -u <username>")
    return typer.Exit(code=exc.exit_code)


def _login(ctx: typer.Context, config: GlobalConfig, creds: Credentials) -> Authenticator:
    """Log in on a fresh client; the caller closes ``authn.client``."""
    base_url = resolve_base_url(_options(ctx).get("base_url"), config)
    client = create_http_client(config.request)
    authn = Authenticator(base_url, client, cookie_prefix=config.cookie_prefix)
    try:
        authn.login(creds.username, creds.password)
    except BaseException:
        client.close()
        raise
    return authn


@auth_app.command("login")
def auth_login(
    ctx: typer.Context,
    username: Optional[str] = typer.Option(
        None, "--username", "-u", help="Portal username (defaults to the stored one)."
    ),
    password: Optional[str] = typer.Option(
        None, "--password", help="Password (prefer --password-stdin or the prompt)."
    ),
    password_stdin: bool = typer.Option(
        False, "--password-stdin", help="Read the password from one line of stdin."
    ),
    store: Optional[str] = typer.Option(None, "--store", help=_STORE_HELP),
    no_save: bool = typer.Option(
        False, "--no-save", help="Do not persist the credentials after a successful login."
    ),
) -> None:
    """Log in to the portal and store the credentials for later runs.

    Without ``--username`` and password flags, stored credentials are reused.
    The credentials are saved only after the portal has accepted them.

    Raises:
        typer.Exit: With the error's exit code (2 invalid usage, 3 rejected
            login or SSO/MFA required, 5 server error, 6 network error).
    """
    try:
        config = load_global_config()
        preferred = store if store is not None else config.credential_store
        cred_store = _credential_store()
        # reject an invalid store kind before prompting for a password
        cred_store.resolve(preferred)
        no_input = bool(_options(ctx).get("no_input"))

        creds: Optional[Credentials] = None
        if username is None and password is None and not password_stdin:
            try:
                creds = cred_store.load(preferred)
                info(f"Using stored credentials for {creds.username}.")
            except CredentialsNotFoundError:
                creds = None

        stored = creds is not None
        if creds is None:
            if not username:
                if no_input:
                    raise ValidationError("username is required (use --username)")
                username = typer.prompt("Username").strip()
            if not username:
                raise ValidationError("username is required")
            secret = resolve_password(
                password,
                password_provided=password is not None,
                from_stdin=password_stdin,
                stdin=sys.stdin,
                interactive=False if no_input else None,
            )
            creds = Credentials(username=username, password=secret)

        _login(ctx, config, creds).client.close()
        success(f"Logged in as {creds.username}.")

        if not stored and not no_save:
            kind = cred_store.save(creds, preferred)
            where = f"{cred_store.path}" if kind is StoreKind.FILE else "the OS keyring"
            info(f"Credentials saved to {where}.")
    except VmsError as exc:
        raise _fail(exc) from None


@auth_app.command("logout")
def auth_logout(
    store: Optional[str] = typer.Option(None, "--store", help=_STORE_HELP),
) -> None:
    """Remove stored credentials.  Succeeds when nothing is stored."""
    try:
        config = load_global_config()
        preferred = store if store is not None else config.credential_store
        _credential_store().delete(preferred)
    except VmsError as exc:
        raise _fail(exc) from None
    success("Stored credentials removed.")


@auth_app.command("status")
def auth_status(
    ctx: typer.Context,
    store: Optional[str] = typer.Option(None, "--store", help=_STORE_HELP),
) -> None:
    """Log in with the stored credentials and print the current user."""
    try:
        config = load_global_config()
        preferred = store if store is not None else config.credential_store
        creds = _credential_store().load(preferred)
        authn = _login(ctx, config, creds)
        try:
            user = authn.current_user()
        finally:
            authn.client.close()
    except VmsError as exc:
        raise _fail(exc) from None
    success(f"Session established for {creds.username}.")
    format_response(user)


@auth_app.command("token")
def auth_token(
    ctx: typer.Context,
    xsrf: bool = typer.Option(False, "--xsrf", help="Print the anti-forgery token instead."),
    store: Optional[str] = typer.Option(None, "--store", help=_STORE_HELP),
) -> None:
    """Log in with the stored credentials and print a session token to stdout."""
    try:
        config = load_global_config()
        preferred = store if store is not None else config.credential_store
        creds = _credential_store().load(preferred)
        authn = _login(ctx, config, creds)
        try:
            token = authn.xsrf_token() if xsrf else authn.access_token()
        finally:
            authn.client.close()
    except VmsError as exc:
        raise _fail(exc) from None
    print_data(token)
