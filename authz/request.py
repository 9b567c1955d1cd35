"""Mutable request descriptor that authorization strategies write into."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, MutableMapping, Optional, Union

from requests.cookies import RequestsCookieJar

if TYPE_CHECKING:
    from authz.registry import SwaggerAuthorizations

FORM_URLENCODED = "application/x-www-form-urlencoded"


@dataclass
class RequestDescriptor:
    """An outgoing request, owned by the caller and mutated in place.

    Attributes:
        url: Full URL, possibly with a query string
        method: HTTP verb, upper-cased on construction
        headers: Header mapping; keys are case-sensitive as provided
        body: Raw wire payload, or None. Binary payloads are bytes
        cookie_jar: Cookie store, created lazily by cookie strategies
        client_authorizations: Operation-scoped registry overriding the
            client-wide one. Its presence also enables OAuth1 signing.
    """

    url: str
    method: str = "GET"
    headers: MutableMapping[str, str] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = None
    cookie_jar: Optional[RequestsCookieJar] = None
    client_authorizations: Optional["SwaggerAuthorizations"] = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()

    @property
    def operation_scoped(self) -> bool:
        return self.client_authorizations is not None

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    def ensure_cookie_jar(self) -> RequestsCookieJar:
        """Return the cookie jar, creating it on first use."""
        if self.cookie_jar is None:
            self.cookie_jar = RequestsCookieJar()
        return self.cookie_jar
