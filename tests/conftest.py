"""Shared test fixtures for vmscli.

Provides isolated config directories, an in-memory secret backend standing
in for the OS keyring, a fake portal built on :class:`httpx.MockTransport`,
and output/CLI helpers.  These fixtures are discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from vmscli.auth.backends import SecretBackend, SecretNotFoundError
from vmscli.output import OutputFormat, OutputManager, reset_output, set_output


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager caches sys.stdout/sys.stderr at creation time; CliRunner
    swaps those streams, so a stale manager would write to closed files.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the XDG directories at *tmp_path*.

    Clears every ``VMSCLI_*`` variable so the developer's environment never
    leaks into a test, and forces XDG layout so paths are predictable on
    every platform.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("vmscli.config._is_xdg_platform", lambda: True)
    for var in ("VMSCLI_BASE_URL", "VMSCLI_CREDENTIAL_STORE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Secret backend fake
# ---------------------------------------------------------------------------


class MemorySecretBackend(SecretBackend):
    """In-memory :class:`SecretBackend` with switchable failures.

    Setting ``fail_with`` makes every call raise that exception, which models
    a host without a keyring daemon.
    """

    def __init__(self) -> None:
        self.entries: dict[tuple[str, str], str] = {}
        self.fail_with: Optional[Exception] = None
        self.calls: list[tuple[str, str, str]] = []

    def set(self, service: str, key: str, value: str) -> None:
        self.calls.append(("set", service, key))
        if self.fail_with is not None:
            raise self.fail_with
        self.entries[(service, key)] = value

    def get(self, service: str, key: str) -> str:
        self.calls.append(("get", service, key))
        if self.fail_with is not None:
            raise self.fail_with
        try:
            return self.entries[(service, key)]
        except KeyError:
            raise SecretNotFoundError(f"{service}/{key}") from None

    def delete(self, service: str, key: str) -> None:
        self.calls.append(("delete", service, key))
        if self.fail_with is not None:
            raise self.fail_with
        if self.entries.pop((service, key), None) is None:
            raise SecretNotFoundError(f"{service}/{key}")


@pytest.fixture
def secret_backend() -> MemorySecretBackend:
    return MemorySecretBackend()


# ---------------------------------------------------------------------------
# Fake portal
# ---------------------------------------------------------------------------


PORTAL_URL = "https://portal.example.com"

SUCCESS_PAGE = "<html><body><h1>Welcome back</h1></body></html>"
INVALID_PAGE = '<span class="red11">Invalid username / password</span>'
SSO_PAGE = """
<html><body>
<span>Please log in to your account below</span>
<form><input name="password_login" /></form>
</body></html>
"""


@dataclass
class FakePortal:
    """Programmable portal: login page body, status codes and call counters."""

    url: str = PORTAL_URL
    login_body: str = SUCCESS_PAGE
    login_status: int = 200
    current_user_status: int = 200
    current_user: dict = field(default_factory=lambda: {"userId": 1, "email": "user@example.com"})
    login_cookies: list[str] = field(
        default_factory=lambda: [
            "productionaccess_token=abc123; Path=/wand2",
            'X-XSRF-TOKEN="tok%2Ben%2F1"; Path=/wand',
        ]
    )
    login_requests: list[httpx.Request] = field(default_factory=list)
    current_user_calls: int = 0
    clients: list[httpx.Client] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login.html":
            self.login_requests.append(request)
            headers = [("content-type", "text/html")]
            headers += [("set-cookie", c) for c in self.login_cookies]
            return httpx.Response(self.login_status, headers=headers, text=self.login_body)
        if request.url.path == "/wand2/api/users/current":
            self.current_user_calls += 1
            if self.current_user_status >= 400:
                return httpx.Response(self.current_user_status, json={"message": "not logged in"})
            return httpx.Response(self.current_user_status, json=self.current_user)
        return httpx.Response(404, text="not found")

    def reject_credentials(self) -> None:
        """Answer the login form with the "Invalid username / password" page."""
        self.login_body = INVALID_PAGE

    def require_interactive_login(self) -> None:
        """Answer the login form with the login prompt again (SSO/MFA accounts)."""
        self.login_body = SSO_PAGE

    def client(self) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(self.handler), follow_redirects=True)
        self.clients.append(client)
        return client


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture
def portal_url(portal: FakePortal) -> str:
    return portal.url


@pytest.fixture
def portal_client_factory(
    portal: FakePortal, monkeypatch: pytest.MonkeyPatch
) -> Callable[..., httpx.Client]:
    """Make ``create_http_client`` in the auth commands return portal clients."""

    def _factory(config: object = None) -> httpx.Client:
        return portal.client()

    monkeypatch.setattr("vmscli.commands.auth.create_http_client", _factory)
    return _factory


# ---------------------------------------------------------------------------
# Output / CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain output manager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
