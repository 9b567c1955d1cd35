"""OAuth 1.0 request signing.

Implements HMAC-SHA1 / HMAC-SHA256 signatures (RFC 5849) for two kinds of
requests:
- form-urlencoded requests, where the oauth_ parameters and signature are
  written into the body
- every other request, where they are sent in an ``Authorization: OAuth``
  header together with an ``oauth_body_hash`` of the payload

The consumer secret is the only signing secret; this client has no token
secret, so the token part of the signing key is always empty.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Union

from authz.codec import encode_pairs, parse_pairs, rfc3986_quote, split_url
from authz.exceptions import UnsupportedSigningMethod
from authz.request import FORM_URLENCODED, RequestDescriptor

logger = logging.getLogger(__name__)

OAUTH_VERSION = "1.0"
OAUTH_CALLBACK = "about:blank"

# Signature method -> hashlib algorithm name
SIGNATURE_HASHES = {
    "HMAC-SHA1": "sha1",
    "HMAC-SHA256": "sha256",
}


def hash_name_for(signature_method: Optional[str]) -> str:
    """Return the hashlib name backing an OAuth1 signature method."""
    try:
        return SIGNATURE_HASHES[signature_method]  # type: ignore[index]
    except KeyError:
        raise UnsupportedSigningMethod(signature_method) from None


def generate_nonce() -> str:
    """Return a 32 character hex nonce."""
    return uuid.uuid4().hex


def oauth_parameters(
    consumer_key: str,
    signature_method: str,
    nonce: str,
    timestamp: str,
) -> Dict[str, str]:
    """Build the standard oauth_ protocol parameters."""
    return {
        "oauth_consumer_key": consumer_key,
        "oauth_signature_method": signature_method,
        "oauth_nonce": nonce,
        "oauth_timestamp": timestamp,
        "oauth_version": OAUTH_VERSION,
    }


def signature_base_string(http_method: str, url: str, params: Mapping[str, str]) -> str:
    """Build the signature base string.

    Names and values are RFC 3986 encoded, sorted, and encoded a second time
    as they are joined with ``%3D`` and ``%26``. The base URL drops the query
    string; its parameters must already be part of ``params``.

    Args:
        http_method: HTTP verb
        url: Request URL, with or without query string
        params: Every parameter taking part in the signature

    Returns:
        ``METHOD&encoded-base-url&encoded-parameters``
    """
    encoded = sorted((rfc3986_quote(k), rfc3986_quote(v)) for k, v in params.items())
    normalized = "%26".join(
        f"{rfc3986_quote(name)}%3D{rfc3986_quote(value)}" for name, value in encoded
    )
    base_url, _ = split_url(url)
    return "&".join([http_method.upper(), rfc3986_quote(base_url), normalized])


def signing_key(consumer_secret: str, token_secret: str = "") -> str:
    return f"{rfc3986_quote(consumer_secret)}&{rfc3986_quote(token_secret)}"


def hmac_signature(signature_method: str, key: str, base_string: str) -> str:
    """Compute the base64 HMAC signature of a base string."""
    digest = hmac.new(
        key.encode("utf-8"),
        base_string.encode("utf-8"),
        digestmod=hash_name_for(signature_method),
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def body_hash(signature_method: str, body: Union[str, bytes]) -> str:
    """Hex digest of a request body with the signature method's hash."""
    data = body if isinstance(body, bytes) else body.encode("utf-8")
    return hashlib.new(hash_name_for(signature_method), data).hexdigest()


@dataclass
class SigningContext:
    """Outcome of one signing attempt.

    Attributes:
        nonce: Nonce used for the attempt
        timestamp: Unix timestamp used for the attempt
        params: All parameters that were signed
        base_string: Signature base string
        signature: Base64 signature
        serialized: Body (form signing) or Authorization header value
    """

    nonce: str
    timestamp: str
    base_string: str
    signature: str
    serialized: str
    params: Dict[str, str] = field(default_factory=dict)


def _signed_params(url: str, extra: Mapping[str, str]) -> Dict[str, str]:
    _, query = split_url(url)
    params = parse_pairs(query)
    params.update(extra)
    return params


def sign_form_body(
    request: RequestDescriptor,
    consumer_key: str,
    consumer_secret: str,
    signature_method: str,
    nonce: str,
    timestamp: str,
) -> SigningContext:
    """Sign a form-urlencoded request.

    The body parameters, the oauth_ parameters (including
    ``oauth_callback``) and the URL query parameters are signed. The
    serialized result holds the body parameters, the oauth_ parameters and
    the signature, but not the query parameters.
    """
    data = parse_pairs(request.body or "")
    oauth = oauth_parameters(consumer_key, signature_method, nonce, timestamp)
    oauth["oauth_callback"] = OAUTH_CALLBACK
    data.update(oauth)

    params = _signed_params(request.url, data)
    base_string = signature_base_string(request.method, request.url, params)
    signature = hmac_signature(signature_method, signing_key(consumer_secret), base_string)
    data["oauth_signature"] = signature

    return SigningContext(
        nonce=nonce,
        timestamp=timestamp,
        base_string=base_string,
        signature=signature,
        serialized=encode_pairs(data),
        params=params,
    )


def sign_header(
    request: RequestDescriptor,
    consumer_key: str,
    consumer_secret: str,
    signature_method: str,
    nonce: str,
    timestamp: str,
) -> SigningContext:
    """Sign a request through the Authorization header.

    The body is covered by ``oauth_body_hash`` instead of being signed
    parameter by parameter.
    """
    oauth = oauth_parameters(consumer_key, signature_method, nonce, timestamp)
    oauth["oauth_body_hash"] = body_hash(signature_method, request.body or "")

    params = _signed_params(request.url, oauth)
    base_string = signature_base_string(request.method, request.url, params)
    signature = hmac_signature(signature_method, signing_key(consumer_secret), base_string)
    oauth["oauth_signature"] = signature

    header = "OAuth " + ",".join(
        f'{name}="{rfc3986_quote(oauth[name])}"' for name in sorted(oauth)
    )
    return SigningContext(
        nonce=nonce,
        timestamp=timestamp,
        base_string=base_string,
        signature=signature,
        serialized=header,
        params=params,
    )


class Oauth1Authorization:
    """OAuth1 signing strategy with a memoized signature.

    The signature computed for the first request is cached on the instance
    and reused until one of the invalidating branches clears it: a form body
    that is empty or already signed, or a request that already carries an
    Authorization header. Nothing else expires the cache, so a signer
    reused across requests with different bodies keeps producing the first
    signature.

    Not thread safe. Use one signer per in-flight request, or serialize
    access externally.
    """

    def __init__(
        self,
        username: str,
        password: str,
        method: str = "HMAC-SHA1",
        nonce_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the signer.

        Args:
            username: Consumer key
            password: Consumer secret
            method: "HMAC-SHA1" or "HMAC-SHA256"
            nonce_factory: Nonce source, defaults to a hex UUID4
            clock: Time source in Unix seconds, defaults to time.time

        Raises:
            UnsupportedSigningMethod: If the method is not supported
        """
        hash_name_for(method)
        self.username = username
        self.password = password
        self.method = method
        self._nonce_factory = nonce_factory or generate_nonce
        self._clock = clock or time.time
        self._signature: Optional[str] = None
        self.last_context: Optional[SigningContext] = None

    @property
    def kind(self) -> str:
        return "oauth1"

    @property
    def signature(self) -> Optional[str]:
        """Cached body or header value, None when unsigned."""
        return self._signature

    def invalidate(self) -> None:
        if self._signature is not None:
            logger.debug("Clearing cached OAuth1 signature")
        self._signature = None

    def _sign(self, signer, request: RequestDescriptor) -> str:
        context = signer(
            request,
            consumer_key=self.username,
            consumer_secret=self.password,
            signature_method=self.method,
            nonce=self._nonce_factory(),
            timestamp=str(int(self._clock())),
        )
        self.last_context = context
        self._signature = context.serialized
        return context.serialized

    def apply(self, request: RequestDescriptor) -> bool:
        """Sign an operation-scoped request; other requests are left untouched."""
        if not request.operation_scoped:
            return True

        if request.content_type == FORM_URLENCODED:
            body = request.body
            if isinstance(body, str) and body and "oauth_signature" not in body:
                if self._signature is None:
                    self._sign(sign_form_body, request)
                request.body = self._signature
            else:
                self.invalidate()
        elif "Authorization" not in request.headers:
            if self._signature is None:
                if request.body is None:
                    request.body = ""
                self._sign(sign_header, request)
            request.headers["Authorization"] = self._signature
        else:
            self.invalidate()

        return True
