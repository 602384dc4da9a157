"""GitHub App user-authorization client.

Only the pieces the login flow needs: the authorize URL, the code-for-token
exchange, and the installations visible to the signed-in user.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel

from inkwell import config as config_module
from inkwell.auth.users import GitHubUserIdentity
from inkwell.db.models import AccountType
from inkwell.errors import InternalError

log = structlog.get_logger()

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"  # noqa: S105
GITHUB_API_URL = "https://api.github.com"


class GitHubError(Exception):
    """Raised when GitHub rejects or fails an authorization call."""


class GitHubInstallation(BaseModel):
    id: int
    account_login: str
    account_type: AccountType
    avatar_url: str = ""


def _client_credentials() -> tuple[str, str]:
    client_id = config_module.settings.github_client_id.get_secret_value()
    client_secret = config_module.settings.github_client_secret.get_secret_value()
    if not client_id or not client_secret:
        raise InternalError("GitHub OAuth is not configured")
    return client_id, client_secret


def authorization_url(state: str, redirect_uri: str) -> str:
    """Provider authorize URL. No scopes: repo access comes from the installation."""
    client_id, _ = _client_credentials()
    params = {"client_id": client_id, "redirect_uri": redirect_uri, "state": state}
    return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}"


class GitHubAppClient:
    """Thin async wrapper over the GitHub endpoints used at login."""

    def __init__(self, *, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def exchange_code_for_user(self, code: str) -> tuple[str, GitHubUserIdentity]:
        client_id, client_secret = _client_credentials()

        async with self._client() as client:
            resp = await client.post(
                GITHUB_TOKEN_URL,
                headers={"Accept": "application/json"},
                json={"client_id": client_id, "client_secret": client_secret, "code": code},
            )
            resp.raise_for_status()
            data = resp.json()

            if data.get("error"):
                log.error("OAuth token error", error=data.get("error"))
                raise GitHubError(str(data.get("error_description") or data["error"]))

            access_token = data.get("access_token")
            if not access_token:
                raise GitHubError("GitHub OAuth failed")

            user_resp = await client.get(
                f"{GITHUB_API_URL}/user",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                },
            )
            user_resp.raise_for_status()
            identity = GitHubUserIdentity.model_validate(user_resp.json())

        return str(access_token), identity

    async def get_user_installations(self, access_token: str) -> list[GitHubInstallation]:
        async with self._client() as client:
            resp = await client.get(
                f"{GITHUB_API_URL}/user/installations",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                },
            )
            resp.raise_for_status()
            payload = resp.json()

        installations = []
        for item in payload.get("installations", []):
            account = item["account"]
            try:
                account_type = AccountType(account["type"])
            except ValueError:
                log.warning(
                    "Skipping installation with unsupported account type",
                    installation_id=item["id"],
                    account_type=account["type"],
                )
                continue
            installations.append(
                GitHubInstallation(
                    id=item["id"],
                    account_login=account["login"],
                    account_type=account_type,
                    avatar_url=account.get("avatar_url") or "",
                )
            )
        return installations


def get_github_client() -> GitHubAppClient:
    """FastAPI dependency; overridden in tests."""
    return GitHubAppClient()
