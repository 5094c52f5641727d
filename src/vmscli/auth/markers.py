"""HTML predicates that classify the portal's answer to a login form.

The portal returns ``200 OK`` whether or not the login worked, so the only
signal is the page text.  Every literal the classification depends on
lives here so that a change in portal wording only touches this module.
"""

from __future__ import annotations

import re

from vmscli.models import LoginOutcome

# <span class="red11">Invalid username / password</span>
_INVALID_CREDENTIALS = re.compile(r"invalid\s+username\s*/\s*password", re.IGNORECASE)

_LOGIN_FORM_MARKERS = (
    re.compile(r"<input\b[^>]*\bname\s*=\s*[\"']?password_login\b", re.IGNORECASE),
    re.compile(r"<input\b[^>]*\btype\s*=\s*[\"']?password\b", re.IGNORECASE),
    re.compile(r"please\s+log\s*in", re.IGNORECASE),
)


def is_invalid_credentials_page(body: str) -> bool:
    """True when the page carries the "Invalid username / password" message."""
    return bool(_INVALID_CREDENTIALS.search(body))


def is_login_form_page(body: str) -> bool:
    """True when the page still asks the user to log in.

    After a successful form post the portal redirects into the application;
    seeing the password field or the "please log in" prompt again means the
    account is behind SSO/MFA and needs a browser.
    """
    return any(pattern.search(body) for pattern in _LOGIN_FORM_MARKERS)


def classify_login_page(body: str) -> LoginOutcome:
    """Classify a login response body.

    The invalid-credentials check runs first: a rejected password page also
    shows the login form again.  ``SUCCESS`` is provisional until the session
    has been verified against the portal.
    """
    if is_invalid_credentials_page(body):
        return LoginOutcome.INVALID_CREDENTIALS
    if is_login_form_page(body):
        return LoginOutcome.INTERACTIVE_AUTH_REQUIRED
    return LoginOutcome.SUCCESS
