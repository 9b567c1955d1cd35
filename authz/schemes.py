"""Security scheme dataclasses and Swagger/OpenAPI parser.

Parses Swagger 2.x and OpenAPI 3.x security schemes into typed objects and
turns them, together with user supplied credentials, into a registry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import yaml

from authz.registry import SwaggerAuthorizations
from authz.strategies import (
    ApiKeyAuthorization,
    Authorization,
    CookieAuthorization,
    PasswordAuthorization,
)

logger = logging.getLogger(__name__)


@dataclass
class APIKeyScheme:
    """API Key authentication scheme.

    Attributes:
        name: Security scheme name from the document
        location: Where the key is sent - "header", "query", or "cookie"
        parameter_name: The name of the header, query param, or cookie
        description: Optional description from the document
    """

    name: str
    location: str
    parameter_name: str
    description: Optional[str] = None

    @property
    def scheme_type(self) -> str:
        return "apiKey"


@dataclass
class HTTPScheme:
    """HTTP authentication scheme. Only "basic" can be applied."""

    name: str
    scheme: str
    description: Optional[str] = None

    @property
    def scheme_type(self) -> str:
        return "http"


SecurityScheme = Union[APIKeyScheme, HTTPScheme]


def load_api_documentation(file_path: str) -> Optional[Dict[str, Any]]:
    """Load a Swagger/OpenAPI document from a JSON or YAML file.

    Returns:
        The parsed document, or None if it cannot be read
    """
    try:
        with open(file_path, "r") as file:
            if file_path.endswith((".yaml", ".yml")):
                return yaml.safe_load(file)
            if file_path.endswith(".json"):
                return json.load(file)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Error loading API documentation %s: %s", file_path, exc)
        return None

    logger.error("Unsupported API documentation format: %s", file_path)
    return None


def _parse_security_scheme(name: str, scheme_data: Dict[str, Any]) -> Optional[SecurityScheme]:
    scheme_type = scheme_data.get("type", "")
    description = scheme_data.get("description")

    if scheme_type == "apiKey":
        return APIKeyScheme(
            name=name,
            location=scheme_data.get("in", "header"),
            parameter_name=scheme_data.get("name", name),
            description=description,
        )

    if scheme_type == "basic":
        # Swagger 2.x uses type: basic directly
        return HTTPScheme(name=name, scheme="basic", description=description)

    if scheme_type == "http":
        scheme = scheme_data.get("scheme", "").lower()
        if scheme == "basic":
            return HTTPScheme(name=name, scheme=scheme, description=description)
        logger.warning("Unsupported HTTP auth scheme %s for scheme %s", scheme, name)
        return None

    logger.warning("Unsupported security scheme type: %s for scheme %s", scheme_type, name)
    return None


def parse_security_schemes(api_documentation: Dict[str, Any]) -> Dict[str, SecurityScheme]:
    """Parse the applicable security schemes of a Swagger/OpenAPI document.

    Supports both Swagger 2.x (securityDefinitions) and OpenAPI 3.x
    (components/securitySchemes).

    Args:
        api_documentation: Parsed Swagger/OpenAPI document

    Returns:
        Dictionary mapping scheme names to SecurityScheme objects
    """
    is_swagger_v2 = str(api_documentation.get("swagger", "")).startswith("2.")
    if is_swagger_v2:
        schemes = api_documentation.get("securityDefinitions", {})
    else:
        schemes = api_documentation.get("components", {}).get("securitySchemes", {})

    result: Dict[str, SecurityScheme] = {}
    for name, scheme_data in (schemes or {}).items():
        scheme = _parse_security_scheme(name, scheme_data or {})
        if scheme:
            result[name] = scheme
    return result


def operation_securities(
    api_documentation: Dict[str, Any], path: str, method: str
) -> Optional[List[Any]]:
    """Return the security requirements of an operation.

    The operation's own ``security`` wins over the document-level one.
    None means the document declares no requirements at all.
    """
    operation = api_documentation.get("paths", {}).get(path, {}).get(method.lower()) or {}
    if "security" in operation:
        return operation["security"]
    return api_documentation.get("security")


def build_authorization_for_scheme(
    scheme: SecurityScheme, credentials: Dict[str, str]
) -> Optional[Authorization]:
    """Build a strategy for a scheme.

    Args:
        scheme: Parsed security scheme
        credentials: "api_key" (or "value") for API keys,
            "username" and "password" for basic auth

    Returns:
        The strategy, or None if the scheme cannot be applied
    """
    if isinstance(scheme, APIKeyScheme):
        api_key = credentials.get("api_key", credentials.get("value", ""))
        if scheme.location == "cookie":
            return CookieAuthorization(f"{scheme.parameter_name}={api_key}")
        if scheme.location in ("query", "header"):
            return ApiKeyAuthorization(scheme.parameter_name, api_key, scheme.location)
        logger.warning("Unknown API key location: %s", scheme.location)
        return None

    if isinstance(scheme, HTTPScheme) and scheme.scheme == "basic":
        return PasswordAuthorization(
            credentials.get("username", ""), credentials.get("password", "")
        )

    logger.warning("Cannot build authorization for scheme %s", scheme.name)
    return None


def authorizations_for_document(
    api_documentation: Dict[str, Any],
    credentials: Dict[str, Dict[str, str]],
) -> SwaggerAuthorizations:
    """Build a registry from a document's schemes and per-scheme credentials.

    Schemes without credentials are left out.
    """
    registry = SwaggerAuthorizations()
    for name, scheme in parse_security_schemes(api_documentation).items():
        scheme_creds = credentials.get(name)
        if not scheme_creds:
            continue
        strategy = build_authorization_for_scheme(scheme, scheme_creds)
        if strategy is not None:
            registry.add_one(name, strategy)
    return registry
