"""Credential configuration loaded from YAML.

Example ``config/credentials.yaml``::

    authorizations:
      api_key:
        type: apiKey
        name: api_key
        value: abc123
        in: query
      basic:
        type: basic
        username: user
        password: secret
      session:
        type: cookie
        cookie: "sid=xyz; Path=/"
      signer:
        type: oauth1
        consumer_key: key
        consumer_secret: secret
        signature_method: HMAC-SHA256
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping

import yaml

from authz.exceptions import ConfigurationError
from authz.oauth1 import Oauth1Authorization
from authz.registry import SwaggerAuthorizations
from authz.strategies import (
    ApiKeyAuthorization,
    Authorization,
    CookieAuthorization,
    PasswordAuthorization,
)

logger = logging.getLogger(__name__)

CREDENTIALS_FILE = os.environ.get("AUTHZ_CREDENTIALS", "config/credentials.yaml")


def load_credentials(file_path: str = CREDENTIALS_FILE) -> Dict[str, Any]:
    if not os.path.exists(file_path):
        logger.error("Credentials file %s not found", file_path)
        return {}
    try:
        with open(file_path, "r") as file:
            return yaml.safe_load(file) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Error loading credentials file %s: %s", file_path, exc)
        return {}


def _require(name: str, entry: Mapping[str, Any], key: str) -> Any:
    if key not in entry:
        raise ConfigurationError(f"Authorization {name!r} is missing {key!r}")
    return entry[key]


def build_authorization(name: str, entry: Mapping[str, Any]) -> Authorization:
    """Build a strategy from one configuration entry.

    Raises:
        ConfigurationError: On an unknown type or a missing field
        UnsupportedSigningMethod: On an unknown OAuth1 signature method
    """
    kind = entry.get("type")

    if kind == "apiKey":
        return ApiKeyAuthorization(
            name=entry.get("name", name),
            value=str(_require(name, entry, "value")),
            location=entry.get("in", "header"),
        )
    if kind == "basic":
        return PasswordAuthorization(
            username=str(_require(name, entry, "username")),
            password=str(_require(name, entry, "password")),
        )
    if kind == "cookie":
        return CookieAuthorization(str(_require(name, entry, "cookie")))
    if kind == "oauth1":
        return Oauth1Authorization(
            username=str(_require(name, entry, "consumer_key")),
            password=str(_require(name, entry, "consumer_secret")),
            method=entry.get("signature_method", "HMAC-SHA1"),
        )

    raise ConfigurationError(f"Authorization {name!r} has unknown type {kind!r}")


def authorizations_from_config(config: Mapping[str, Any]) -> SwaggerAuthorizations:
    """Build a registry from the ``authorizations`` section of a configuration."""
    registry = SwaggerAuthorizations()
    for name, entry in (config.get("authorizations") or {}).items():
        registry.add_one(name, build_authorization(name, entry or {}))
    logger.debug("Loaded authorizations: %s", ", ".join(registry.names()))
    return registry
