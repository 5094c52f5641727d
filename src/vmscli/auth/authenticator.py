"""Form-based login against the portal.

:class:`Authenticator` drives one login attempt through a small state
machine::

    START -> FORM_SUBMITTED -> SESSION_CHECK_PENDING -> SUCCESS
                  |                     |
                  +-------> FAILED <----+

1. The username and password are posted to the login page as form fields,
   following redirects, on the caller's :class:`httpx.Client`.  Its cookie
   jar collects the session cookies and is shared by every later step.
2. The response body is classified with :mod:`vmscli.auth.markers`.  An
   "invalid username / password" page or a page still showing the login
   prompt ends the attempt immediately; the session check is *not* made.
3. Otherwise the "current user" endpoint is queried on the same client; a
   2xx answer confirms the session.

On success nothing is returned: the session lives in the client's cookie
jar, and the raw tokens can be read with :meth:`Authenticator.access_token`
and :meth:`Authenticator.xsrf_token`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from vmscli.auth.markers import classify_login_page
from vmscli.auth.tokens import DEFAULT_COOKIE_PREFIX, extract_access_token, extract_xsrf_token
from vmscli.client import raise_for_status
from vmscli.exceptions import (
    AuthError,
    InteractiveAuthRequiredError,
    InvalidCredentialsError,
    ServerError,
    TransportError,
    ValidationError,
)
from vmscli.models import LoginOutcome, LoginState

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login.html"
CURRENT_USER_PATH = "/wand2/api/users/current"

USERNAME_FIELD = "username"
PASSWORD_FIELD = "password"


class Authenticator:
    """Log in to the portal with a username and password.

    Args:
        base_url: Portal root, e.g. ``https://portal.example.com``.
        client: HTTP client whose cookie jar receives the session.  It is
            owned by the caller and mutated in place.
        login_path: Path the login form is posted to.
        current_user_path: Authenticated endpoint used to verify the session.
        cookie_prefix: Prefix of the access-token cookie name.

    Example::

        with create_http_client() as client:
            authn = Authenticator("https://portal.example.com", client)
            authn.login("me@example.com", "s3cret")
            token = authn.access_token()
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.Client,
        login_path: str = LOGIN_PATH,
        current_user_path: str = CURRENT_USER_PATH,
        cookie_prefix: str = DEFAULT_COOKIE_PREFIX,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.login_path = login_path
        self.current_user_path = current_user_path
        self.cookie_prefix = cookie_prefix
        self.state = LoginState.START
        self.outcome: Optional[LoginOutcome] = None

    def login(self, username: str, password: str) -> None:
        """Run one login attempt.

        Raises:
            ValidationError: If *username* or *password* is empty.
            InvalidCredentialsError: The portal rejected the credentials.
            InteractiveAuthRequiredError: The portal still shows its login
                prompt; the account needs interactive SSO/MFA.
            AuthError: The session check was answered with 401/403.
            ServerError: The portal answered with another HTTP error.
            TransportError: The request could not be completed.
        """
        if not username:
            raise ValidationError("username is required")
        if not password:
            raise ValidationError("password is required")

        self.state = LoginState.START
        self.outcome = None

        try:
            response = self._send(
                "POST",
                self.login_path,
                data={USERNAME_FIELD: username, PASSWORD_FIELD: password},
            )
        except TransportError:
            self._fail(LoginOutcome.TRANSPORT_OR_SERVER_ERROR)
            raise
        self._transition(LoginState.FORM_SUBMITTED)

        outcome = classify_login_page(response.text)
        if outcome is LoginOutcome.INVALID_CREDENTIALS:
            self._fail(outcome)
            raise InvalidCredentialsError("login failed: invalid username or password")
        if outcome is LoginOutcome.INTERACTIVE_AUTH_REQUIRED:
            self._fail(outcome)
            raise InteractiveAuthRequiredError(
                "login did not establish a session: the portal is still showing its "
                "login prompt; interactive SSO/MFA is required (sign in with a browser)"
            )
        if response.status_code >= 500:
            self._fail(LoginOutcome.TRANSPORT_OR_SERVER_ERROR)
            raise ServerError(f"login failed: HTTP {response.status_code}")

        self._transition(LoginState.SESSION_CHECK_PENDING)
        self._verify_session()
        self.outcome = LoginOutcome.SUCCESS
        self._transition(LoginState.SUCCESS)

    def current_user(self) -> dict[str, Any]:
        """Return the JSON record of the logged-in user.

        Raises:
            AuthError: If the session is not (or no longer) valid.
            ServerError: On other HTTP errors or a non-JSON body.
            TransportError: If the request could not be completed.
        """
        response = self._send("GET", self.current_user_path, headers={"Accept": "application/json"})
        raise_for_status(response)
        try:
            data = response.json()
        except ValueError as exc:
            raise ServerError("current user endpoint did not return JSON") from exc
        return data if isinstance(data, dict) else {"user": data}

    def access_token(self) -> str:
        """The raw access-token cookie set by the last login."""
        return extract_access_token(self.client, self.base_url, self.cookie_prefix)

    def xsrf_token(self) -> str:
        """The decoded anti-forgery token set by the last login."""
        return extract_xsrf_token(self.client, self.base_url)

    def _verify_session(self) -> None:
        try:
            response = self._send("GET", self.current_user_path, headers={"Accept": "application/json"})
            raise_for_status(response)
        except (AuthError, ServerError, TransportError):
            self._fail(LoginOutcome.TRANSPORT_OR_SERVER_ERROR)
            raise

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            return self.client.request(method, url, follow_redirects=True, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    def _transition(self, state: LoginState) -> None:
        logger.debug("login state %s -> %s", self.state.value, state.value)
        self.state = state

    def _fail(self, outcome: LoginOutcome) -> None:
        self.outcome = outcome
        if self.state is not LoginState.FAILED:
            self._transition(LoginState.FAILED)
