"""URL-encoded key/value codec shared by query strings and form bodies."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Tuple, Union
from urllib.parse import parse_qsl, quote

Pairs = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def rfc3986_quote(value: object) -> str:
    """Percent-encode a value per RFC 3986.

    Only unreserved characters (letters, digits, ``-._~``) are left as-is,
    so ``!*'()`` are escaped as well.
    """
    return quote(str(value), safe="")


def parse_pairs(text: str) -> Dict[str, str]:
    """Parse an ``&``-joined ``key=value`` string into an ordered dict.

    Names and values are form-decoded. A segment without ``=`` gets an
    empty value and later duplicates win.
    """
    if not text:
        return {}
    return dict(parse_qsl(text, keep_blank_values=True))


def encode_pairs(pairs: Pairs) -> str:
    """Serialize pairs as ``&``-joined, RFC 3986 encoded ``key=value``."""
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    return "&".join(f"{rfc3986_quote(k)}={rfc3986_quote(v)}" for k, v in items)


def split_url(url: str) -> Tuple[str, str]:
    """Split a URL into its base (without query) and the raw query string."""
    base, _, query = url.partition("?")
    return base, query


def query_names(url: str) -> List[str]:
    """Return the raw parameter names present in a URL's query string."""
    _, query = split_url(url)
    if not query:
        return []
    return [part.split("=", 1)[0] for part in query.split("&")]
