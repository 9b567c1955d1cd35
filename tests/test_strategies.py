"""Tests for authz.strategies module."""

import base64
import calendar
import time

from requests.cookies import RequestsCookieJar

from authz.oauth1 import Oauth1Authorization
from authz.request import RequestDescriptor
from authz.strategies import (
    ApiKeyAuthorization,
    CookieAuthorization,
    PasswordAuthorization,
    apply_authorization,
    build_basic_auth_header,
)


class TestRequestDescriptor:
    """Tests for RequestDescriptor defaults."""

    def test_method_upper_cased(self):
        request = RequestDescriptor(url="http://x/y", method="post")
        assert request.method == "POST"

    def test_defaults(self):
        request = RequestDescriptor(url="http://x/y")
        assert request.headers == {}
        assert request.body is None
        assert request.cookie_jar is None
        assert not request.operation_scoped

    def test_content_type(self):
        request = RequestDescriptor(url="http://x/y", headers={"Content-Type": "text/plain"})
        assert request.content_type == "text/plain"


class TestApiKeyQuery:
    """Tests for query based API keys."""

    def test_appends_query(self):
        request = RequestDescriptor(url="http://x/y")
        auth = ApiKeyAuthorization("key", "abc123", "query")

        assert auth.apply(request) is True
        assert request.url == "http://x/y?key=abc123"

    def test_appends_to_existing_query(self):
        request = RequestDescriptor(url="http://x/y?a=1")
        ApiKeyAuthorization("key", "abc123", "query").apply(request)

        assert request.url == "http://x/y?a=1&key=abc123"

    def test_second_application_is_skipped(self):
        request = RequestDescriptor(url="http://x/y")
        auth = ApiKeyAuthorization("key", "abc123", "query")

        auth.apply(request)
        assert auth.apply(request) is False
        assert request.url == "http://x/y?key=abc123"

    def test_existing_parameter_not_updated(self):
        request = RequestDescriptor(url="http://x/y?key=old")

        assert ApiKeyAuthorization("key", "new", "query").apply(request) is False
        assert request.url == "http://x/y?key=old"

    def test_name_prefix_is_not_a_match(self):
        request = RequestDescriptor(url="http://x/y?keys=1")
        ApiKeyAuthorization("key", "abc", "query").apply(request)

        assert request.url == "http://x/y?keys=1&key=abc"


class TestApiKeyHeader:
    """Tests for header based API keys."""

    def test_sets_header(self):
        request = RequestDescriptor(url="http://x/y")

        assert ApiKeyAuthorization("X-API-Key", "abc").apply(request) is True
        assert request.headers == {"X-API-Key": "abc"}

    def test_existing_header_kept(self):
        request = RequestDescriptor(url="http://x/y", headers={"X-API-Key": "mine"})

        assert ApiKeyAuthorization("X-API-Key", "abc", "header").apply(request) is True
        assert request.headers["X-API-Key"] == "mine"

    def test_unknown_location(self):
        request = RequestDescriptor(url="http://x/y")

        assert ApiKeyAuthorization("k", "v", "body").apply(request) is False
        assert request.url == "http://x/y"
        assert request.headers == {}

    def test_kind(self):
        assert ApiKeyAuthorization("k", "v").kind == "apiKey"


class TestCookieAuthorization:
    """Tests for CookieAuthorization."""

    def test_creates_jar(self):
        request = RequestDescriptor(url="http://x/y")

        assert CookieAuthorization("sid=xyz").apply(request) is True
        assert isinstance(request.cookie_jar, RequestsCookieJar)
        assert request.cookie_jar.get("sid") == "xyz"

    def test_cookie_attributes(self):
        request = RequestDescriptor(url="http://x/y")
        CookieAuthorization("sid=xyz; Path=/api").apply(request)

        cookie = next(iter(request.cookie_jar))
        assert cookie.name == "sid"
        assert cookie.value == "xyz"
        assert cookie.path == "/api"

    def test_reuses_existing_jar(self):
        jar = RequestsCookieJar()
        jar.set("other", "1")
        request = RequestDescriptor(url="http://x/y", cookie_jar=jar)

        CookieAuthorization("sid=xyz").apply(request)

        assert request.cookie_jar is jar
        assert jar.get("other") == "1"
        assert jar.get("sid") == "xyz"

    def test_rfc1123_expires(self):
        request = RequestDescriptor(url="http://x/y")

        applied = CookieAuthorization(
            "sid=xyz; Path=/; Expires=Wed, 21 Oct 2037 07:28:00 GMT"
        ).apply(request)

        cookie = next(iter(request.cookie_jar))
        assert applied is True
        assert cookie.value == "xyz"
        assert cookie.expires == calendar.timegm((2037, 10, 21, 7, 28, 0))

    def test_max_age(self):
        request = RequestDescriptor(url="http://x/y")
        before = int(time.time())

        CookieAuthorization("sid=xyz; Max-Age=3600").apply(request)

        cookie = next(iter(request.cookie_jar))
        assert before + 3600 <= cookie.expires <= int(time.time()) + 3600

    def test_invalid_expires_ignored(self):
        request = RequestDescriptor(url="http://x/y")

        assert CookieAuthorization("sid=xyz; Expires=garbage").apply(request) is True
        assert next(iter(request.cookie_jar)).expires is None

    def test_domain_cookie(self):
        request = RequestDescriptor(url="http://example.com/y")

        CookieAuthorization("sid=xyz; Domain=example.com; Path=/").apply(request)

        cookie = next(iter(request.cookie_jar))
        assert cookie.domain == "example.com"
        assert request.cookie_jar.get("sid", domain="example.com") == "xyz"


class TestPasswordAuthorization:
    """Tests for PasswordAuthorization."""

    def test_basic_auth_header(self):
        request = RequestDescriptor(url="http://x/y")

        assert PasswordAuthorization("user", "pass").apply(request) is True
        expected = base64.b64encode(b"user:pass").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"

    def test_existing_authorization_kept(self):
        request = RequestDescriptor(url="http://x/y", headers={"Authorization": "Bearer t"})

        assert PasswordAuthorization("user", "pass").apply(request) is True
        assert request.headers["Authorization"] == "Bearer t"

    def test_build_basic_auth_header_special_characters(self):
        header = build_basic_auth_header("user@domain", "pass:word")

        expected = base64.b64encode(b"user@domain:pass:word").decode()
        assert header == f"Basic {expected}"


class TestApplyAuthorization:
    """Tests for the apply_authorization dispatch."""

    def test_dispatches_to_strategy(self):
        request = RequestDescriptor(url="http://x/y")

        assert apply_authorization(ApiKeyAuthorization("k", "v", "query"), request) is True
        assert request.url == "http://x/y?k=v"

    def test_oauth1_without_operation_scope(self):
        request = RequestDescriptor(url="http://x/y")

        assert apply_authorization(Oauth1Authorization("key", "secret"), request) is True
        assert request.headers == {}

    def test_unknown_strategy(self):
        request = RequestDescriptor(url="http://x/y")

        assert apply_authorization(object(), request) is False
