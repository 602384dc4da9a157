import pytest

from inkwell.auth.cookies import CSRF_COOKIE
from inkwell.auth.csrf import expire_token, get_or_create_token, requires_csrf, verify_csrf
from inkwell.auth.tokens import generate_token
from inkwell.errors import InvalidCsrfError


def test_creates_script_readable_token_when_absent() -> None:
    token, mutations = get_or_create_token({})
    assert len(token) == 64
    assert len(mutations) == 1
    cookie = mutations[0]
    assert cookie.name == CSRF_COOKIE
    assert cookie.value == token
    assert cookie.httponly is False
    assert cookie.samesite == "lax"
    assert cookie.max_age == 7 * 24 * 60 * 60


def test_existing_token_is_reused() -> None:
    existing = generate_token()
    token, mutations = get_or_create_token({CSRF_COOKIE: existing})
    assert token == existing
    assert mutations == []


def test_malformed_cookie_is_replaced() -> None:
    token, mutations = get_or_create_token({CSRF_COOKIE: "not-a-token"})
    assert token != "not-a-token"
    assert mutations[0].value == token


def test_expire_token() -> None:
    mutation = expire_token()
    assert mutation.name == CSRF_COOKIE
    assert mutation.is_delete


@pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS", "get"])
def test_safe_methods_skip_validation(method) -> None:
    verify_csrf(method=method, cookie_token=None, header_token=None)


@pytest.mark.parametrize(
    ("cookie_token", "header_token"),
    [
        (None, None),
        ("a" * 64, None),
        (None, "a" * 64),
        ("a" * 64, "b" * 64),
        ("a" * 64, "é" * 64),
        ("", ""),
    ],
)
def test_unsafe_methods_require_matching_tokens(cookie_token, header_token) -> None:
    with pytest.raises(InvalidCsrfError):
        verify_csrf(method="POST", cookie_token=cookie_token, header_token=header_token)


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
def test_matching_tokens_pass(method) -> None:
    token = generate_token()
    verify_csrf(method=method, cookie_token=token, header_token=token)


def test_requires_csrf_respects_exempt_prefixes(configure) -> None:
    assert requires_csrf("POST", "/webhooks/github") is True
    configure(csrf_exempt_prefixes=["/webhooks/"])
    assert requires_csrf("POST", "/webhooks/github") is False
    assert requires_csrf("POST", "/auth/logout") is True
    assert requires_csrf("GET", "/auth/logout") is False
