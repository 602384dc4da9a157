"""GitHub client tests against a mocked transport."""

import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from inkwell.db.models import AccountType
from inkwell.errors import InternalError
from inkwell.github import GITHUB_AUTHORIZE_URL, GitHubAppClient, GitHubError, authorization_url


def _handler(token_payload: dict):
    def handle(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login/oauth/access_token":
            body = json.loads(request.content)
            assert body["client_id"] == "Iv1.testclient"
            assert body["client_secret"] == "test-client-secret"
            return httpx.Response(200, json=token_payload)
        if request.url.path == "/user":
            assert request.headers["Authorization"] == "Bearer gho_abc"
            return httpx.Response(
                200, json={"id": 583231, "login": "octocat", "avatar_url": "https://a/o"}
            )
        if request.url.path == "/user/installations":
            return httpx.Response(
                200,
                json={
                    "total_count": 2,
                    "installations": [
                        {"id": 1, "account": {"login": "octocat", "type": "User"}},
                        {
                            "id": 2,
                            "account": {
                                "login": "acme",
                                "type": "Organization",
                                "avatar_url": "https://a/acme",
                            },
                        },
                    ],
                },
            )
        return httpx.Response(404)

    return handle


def test_authorization_url() -> None:
    url = authorization_url("s" * 64, "http://testserver/auth/callback")
    assert url.startswith(GITHUB_AUTHORIZE_URL)
    query = parse_qs(urlsplit(url).query)
    assert query == {
        "client_id": ["Iv1.testclient"],
        "redirect_uri": ["http://testserver/auth/callback"],
        "state": ["s" * 64],
    }


def test_authorization_url_requires_credentials(configure) -> None:
    configure(github_client_id="", github_client_secret="")
    with pytest.raises(InternalError, match="not configured"):
        authorization_url("state", "http://testserver/auth/callback")


@pytest.mark.asyncio
async def test_exchange_code_for_user() -> None:
    client = GitHubAppClient(transport=httpx.MockTransport(_handler({"access_token": "gho_abc"})))

    token, identity = await client.exchange_code_for_user("code-1")

    assert token == "gho_abc"
    assert identity.github_id == 583231
    assert identity.login == "octocat"
    assert identity.avatar_url == "https://a/o"


@pytest.mark.asyncio
async def test_exchange_code_error_payload() -> None:
    client = GitHubAppClient(
        transport=httpx.MockTransport(
            _handler({"error": "bad_verification_code", "error_description": "expired code"})
        )
    )
    with pytest.raises(GitHubError, match="expired code"):
        await client.exchange_code_for_user("stale")


@pytest.mark.asyncio
async def test_get_user_installations() -> None:
    client = GitHubAppClient(transport=httpx.MockTransport(_handler({})))

    installations = await client.get_user_installations("gho_abc")

    assert [(i.id, i.account_login, i.account_type) for i in installations] == [
        (1, "octocat", AccountType.USER),
        (2, "acme", AccountType.ORGANIZATION),
    ]
    assert installations[0].avatar_url == ""
    assert installations[1].avatar_url == "https://a/acme"


@pytest.mark.asyncio
async def test_get_user_installations_skips_unsupported_account_types() -> None:
    def handle(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "installations": [
                    {"id": 7, "account": {"login": "megacorp", "type": "Enterprise"}},
                    {"id": 8, "account": {"login": "acme", "type": "Organization"}},
                ]
            },
        )

    client = GitHubAppClient(transport=httpx.MockTransport(handle))

    installations = await client.get_user_installations("gho_abc")

    assert [(i.id, i.account_login) for i in installations] == [(8, "acme")]
