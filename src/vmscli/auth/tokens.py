"""Session token extraction from a client's cookie jar.

The portal hosts several sub-applications under different URL prefixes and
sets same-named cookies for each of them, e.g. ``X-XSRF-TOKEN`` once for
``/`` and once for ``/wand``.  A token is therefore looked up by name *and*
by the path the consuming application is mounted under: the cookie whose
``Path`` is the most specific match wins.
"""

from __future__ import annotations

from http.cookiejar import Cookie
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import httpx

from vmscli.exceptions import TokenNotFoundError

DEFAULT_COOKIE_PREFIX = "production"
ACCESS_TOKEN_SUFFIX = "access_token"
XSRF_COOKIE_NAME = "X-XSRF-TOKEN"

API_MOUNT_PATH = "/wand2/api/"
APP_MOUNT_PATH = "/wand/app/"


def path_matches(cookie_path: str, request_path: str) -> bool:
    """RFC 6265 path-match: ``/wand`` matches ``/wand/app/`` but not ``/wand2/``."""
    cookie_path = cookie_path or "/"
    if cookie_path == request_path:
        return True
    if not request_path.startswith(cookie_path):
        return False
    return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"


def _domain_matches(cookie: Cookie, host: str) -> bool:
    domain = (cookie.domain or "").lstrip(".").lower()
    if not domain or not host:
        return True
    # http.cookiejar stores host-only cookies for plain hosts as "host.local"
    if domain.endswith(".local") and not host.endswith(".local"):
        domain = domain[: -len(".local")]
    return host == domain or host.endswith("." + domain)


def mount_path(base_url: str, mount: str) -> str:
    """Join the path component of *base_url* with an application *mount* path."""
    base_path = urlparse(base_url).path.rstrip("/")
    return f"{base_path}{mount}"


def find_scoped_cookie(
    client: httpx.Client,
    base_url: str,
    target_path: str,
    name_matches: Callable[[str], bool],
) -> Optional[Cookie]:
    """Return the matching cookie with the longest ``Path`` covering *target_path*."""
    host = (urlparse(base_url).hostname or "").lower()
    best: Optional[Cookie] = None
    for cookie in client.cookies.jar:
        if not name_matches(cookie.name):
            continue
        if not _domain_matches(cookie, host):
            continue
        if not path_matches(cookie.path, target_path):
            continue
        if best is None or len(cookie.path or "") > len(best.path or ""):
            best = cookie
    return best


def extract_access_token(
    client: httpx.Client,
    base_url: str,
    prefix: str = DEFAULT_COOKIE_PREFIX,
) -> str:
    """Return the raw ``<prefix>access_token`` cookie value scoped to the API mount.

    Raises:
        TokenNotFoundError: If no such cookie is in the jar.
    """
    name = f"{prefix}{ACCESS_TOKEN_SUFFIX}"
    cookie = find_scoped_cookie(
        client, base_url, mount_path(base_url, API_MOUNT_PATH), lambda n: n == name
    )
    if cookie is None or cookie.value is None:
        raise TokenNotFoundError(f"access token cookie {name!r} not found")
    return cookie.value


def decode_xsrf_value(raw: str) -> str:
    """Percent-decode an XSRF cookie value and drop one layer of quotes.

    ``"tok%2Ben%2F1"`` (quotes included) becomes ``tok+en/1``.
    """
    value = unquote(raw)
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return value


def extract_xsrf_token(client: httpx.Client, base_url: str) -> str:
    """Return the decoded ``X-XSRF-TOKEN`` cookie scoped to the web app mount.

    Raises:
        TokenNotFoundError: If no such cookie is in the jar.
    """
    cookie = find_scoped_cookie(
        client,
        base_url,
        mount_path(base_url, APP_MOUNT_PATH),
        lambda n: n == XSRF_COOKIE_NAME,
    )
    if cookie is None or cookie.value is None:
        raise TokenNotFoundError(f"{XSRF_COOKIE_NAME} cookie not found")
    return decode_xsrf_value(cookie.value)
