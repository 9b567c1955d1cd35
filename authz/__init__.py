"""Request authorization for Swagger/OpenAPI clients.

This package injects proof of identity into outgoing request descriptors:
- API keys in a query parameter or header
- HTTP Basic credentials
- Session cookies
- OAuth 1.0 HMAC signatures (form body or Authorization header)

A named registry picks the strategies an operation's security
requirements ask for and applies them in order.
"""

from authz.config import authorizations_from_config, build_authorization, load_credentials
from authz.exceptions import AuthorizationError, ConfigurationError, UnsupportedSigningMethod
from authz.oauth1 import Oauth1Authorization, SigningContext
from authz.registry import SwaggerAuthorizations, flatten_securities
from authz.request import RequestDescriptor
from authz.schemes import (
    APIKeyScheme,
    HTTPScheme,
    authorizations_for_document,
    load_api_documentation,
    operation_securities,
    parse_security_schemes,
)
from authz.strategies import (
    ApiKeyAuthorization,
    CookieAuthorization,
    PasswordAuthorization,
    apply_authorization,
)
from authz.transport import SwaggerAuth

__all__ = [
    # Request
    "RequestDescriptor",
    # Strategies
    "ApiKeyAuthorization",
    "CookieAuthorization",
    "PasswordAuthorization",
    "Oauth1Authorization",
    "SigningContext",
    "apply_authorization",
    # Registry
    "SwaggerAuthorizations",
    "flatten_securities",
    # Schemes
    "APIKeyScheme",
    "HTTPScheme",
    "authorizations_for_document",
    "load_api_documentation",
    "operation_securities",
    "parse_security_schemes",
    # Config
    "authorizations_from_config",
    "build_authorization",
    "load_credentials",
    # Transport
    "SwaggerAuth",
    # Errors
    "AuthorizationError",
    "ConfigurationError",
    "UnsupportedSigningMethod",
]
