"""Adapter that lets ``requests`` run a registry on outgoing requests."""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple, Union

from requests import PreparedRequest
from requests.auth import AuthBase

from authz.registry import SwaggerAuthorizations
from authz.request import RequestDescriptor

logger = logging.getLogger(__name__)


def _visible_body(body: Any) -> Tuple[Optional[Union[str, bytes]], bool]:
    """Return the body strategies may see, and whether it may be rewritten.

    Only text bodies are rewritable. Binary payloads are passed as bytes so
    they can still be hashed; streamed bodies are not visible at all.
    """
    if body is None or isinstance(body, str):
        return body, True
    if isinstance(body, bytes):
        try:
            return body.decode("utf-8"), True
        except UnicodeDecodeError:
            return body, False
    logger.debug("Streamed request body is not visible to authorizations")
    return None, False


class SwaggerAuth(AuthBase):
    """requests auth hook applying a SwaggerAuthorizations registry.

    Usage::

        session.get(url, auth=SwaggerAuth(registry, securities=[{"api_key": []}]))
    """

    def __init__(
        self,
        registry: SwaggerAuthorizations,
        securities: Any = None,
        operation_authorizations: Optional[SwaggerAuthorizations] = None,
    ):
        self.registry = registry
        self.securities = securities
        self.operation_authorizations = operation_authorizations
        self.status: Optional[bool] = None

    def __call__(self, r: PreparedRequest) -> PreparedRequest:
        body, rewritable = _visible_body(r.body)

        # Strategies write straight into the case-insensitive header mapping
        descriptor = RequestDescriptor(
            url=r.url or "",
            method=r.method or "GET",
            headers=r.headers,
            body=body,
            client_authorizations=self.operation_authorizations,
        )
        self.status = self.registry.apply(descriptor, self.securities)

        r.url = descriptor.url
        if rewritable and (descriptor.body or None) != (body or None):
            r.body = descriptor.body
            r.prepare_content_length(r.body)
        if descriptor.cookie_jar is not None:
            r.prepare_cookies(descriptor.cookie_jar)
        return r
