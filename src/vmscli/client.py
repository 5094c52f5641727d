"""HTTP client construction and error mapping for portal requests.

The portal is cookie-session based, so a single :class:`httpx.Client` (and
its cookie jar) must be shared by every step of a login and by any request
made afterwards.  :func:`create_http_client` builds that client from the
user's :class:`~vmscli.models.RequestConfig`; :func:`raise_for_status`
turns error responses into the project's exception types.
"""

from __future__ import annotations

import httpx

from vmscli import __version__
from vmscli.exceptions import AuthError, ServerError
from vmscli.models import RequestConfig

USER_AGENT = f"vmscli/{__version__}"


def create_http_client(config: RequestConfig | None = None) -> httpx.Client:
    """Return an :class:`httpx.Client` that follows redirects and keeps cookies.

    The caller owns the client and should close it (or use it as a context
    manager) once the session is no longer needed.
    """
    config = config or RequestConfig()
    return httpx.Client(
        timeout=config.timeout,
        verify=config.verify_ssl,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def raise_for_status(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes.

    Raises:
        AuthError: On 401 / 403.
        ServerError: On any other 4xx or 5xx status.
    """
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg)
    raise ServerError(full_msg)
