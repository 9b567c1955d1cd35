"""Credential strategies that write proof of identity into a request.

Each strategy is a small tagged dataclass whose ``apply`` mutates a
:class:`~authz.request.RequestDescriptor` and reports success as a bool.
"""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from http.cookies import Morsel, SimpleCookie
from typing import Any, Optional, Union

from requests.cookies import create_cookie

from authz.codec import query_names
from authz.oauth1 import Oauth1Authorization
from authz.request import RequestDescriptor

logger = logging.getLogger(__name__)


def build_basic_auth_header(username: str, password: str) -> str:
    """Build HTTP Basic Authentication header value.

    Args:
        username: Username
        password: Password

    Returns:
        Header value string (e.g., "Basic dXNlcjpwYXNz")
    """
    credentials = f"{username}:{password}"
    encoded = base64.b64encode(credentials.encode()).decode()
    return f"Basic {encoded}"


def _cookie_expires(morsel: Morsel) -> Optional[int]:
    """Expiry in epoch seconds from Max-Age or Expires, None for session cookies."""
    if morsel["max-age"]:
        try:
            return int(time.time()) + int(morsel["max-age"])
        except ValueError:
            logger.warning("Ignoring invalid cookie Max-Age: %s", morsel["max-age"])
    if morsel["expires"]:
        try:
            return int(parsedate_to_datetime(morsel["expires"]).timestamp())
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid cookie Expires: %s", morsel["expires"])
    return None


@dataclass
class ApiKeyAuthorization:
    """API key sent as a query parameter or a header.

    Attributes:
        name: Query parameter or header name
        value: The API key
        location: "query" or "header"
    """

    name: str
    value: str
    location: str = "header"

    @property
    def kind(self) -> str:
        return "apiKey"

    def apply(self, request: RequestDescriptor) -> bool:
        """Inject the key.

        A query key that is already present is left alone and reported as
        a failure. An existing header is left alone but counts as success.
        """
        if self.location == "query":
            if self.name in query_names(request.url):
                logger.debug("Query parameter %s already present, skipping", self.name)
                return False
            separator = "&" if "?" in request.url else "?"
            request.url = f"{request.url}{separator}{self.name}={self.value}"
            return True

        if self.location == "header":
            if self.name not in request.headers:
                request.headers[self.name] = self.value
            return True

        logger.warning("Unknown API key location: %s", self.location)
        return False


@dataclass
class CookieAuthorization:
    """Session cookie registered into the request's cookie jar.

    Attributes:
        cookie: Raw cookie string, e.g. "sid=abc; Path=/"
    """

    cookie: str

    @property
    def kind(self) -> str:
        return "cookie"

    def apply(self, request: RequestDescriptor) -> bool:
        jar = request.ensure_cookie_jar()
        parsed = SimpleCookie()
        parsed.load(self.cookie)
        for morsel in parsed.values():
            jar.set_cookie(
                create_cookie(
                    morsel.key,
                    morsel.value,
                    domain=morsel["domain"],
                    path=morsel["path"] or "/",
                    secure=bool(morsel["secure"]),
                    expires=_cookie_expires(morsel),
                    rest={"HttpOnly": morsel["httponly"]},
                )
            )
        return True


@dataclass
class PasswordAuthorization:
    """HTTP Basic credentials.

    Attributes:
        username: Username
        password: Password
    """

    username: str
    password: str

    @property
    def kind(self) -> str:
        return "basic"

    def apply(self, request: RequestDescriptor) -> bool:
        if "Authorization" not in request.headers:
            request.headers["Authorization"] = build_basic_auth_header(
                self.username, self.password
            )
        return True


Authorization = Union[
    ApiKeyAuthorization, CookieAuthorization, PasswordAuthorization, Oauth1Authorization
]

STRATEGY_TYPES = (
    ApiKeyAuthorization,
    CookieAuthorization,
    PasswordAuthorization,
    Oauth1Authorization,
)


def apply_authorization(strategy: Any, request: RequestDescriptor) -> bool:
    """Apply any supported strategy to a request.

    Args:
        strategy: ApiKeyAuthorization, CookieAuthorization,
            PasswordAuthorization or Oauth1Authorization
        request: Request descriptor to mutate

    Returns:
        The strategy's success flag, or False for an unknown strategy
    """
    if not isinstance(strategy, STRATEGY_TYPES):
        logger.warning("Unknown authorization strategy: %s", type(strategy).__name__)
        return False

    applied = bool(strategy.apply(request))
    logger.debug("Applied %s authorization (success=%s)", strategy.kind, applied)
    return applied
