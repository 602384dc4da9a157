"""Authentication endpoints."""

from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell import config as config_module
from inkwell.api.dependencies import get_session_accessor
from inkwell.api.errors import raise_internal_error
from inkwell.api.rate_limit import get_rate_limit, limiter
from inkwell.auth.cookies import OAUTH_STATE_COOKIE, CookieMutation, apply_cookie_mutations
from inkwell.auth.csrf import CSRF_HEADER, expire_token, get_or_create_token
from inkwell.auth.oauth_state import (
    OAuthStateError,
    clear_state_cookie,
    issue_state,
    verify_state,
)
from inkwell.auth.sessions import SessionAccessor
from inkwell.auth.users import UserManager
from inkwell.db.authorized import authorized_db
from inkwell.db.connection import get_session_dependency
from inkwell.errors import AuthorizationError, InkwellError
from inkwell.github import GitHubAppClient, authorization_url, get_github_client

log = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


def _absolute(path: str) -> str:
    return config_module.settings.public_url.rstrip("/") + path


def _login_redirect(
    *, error: str | None = None, installed: bool = False, mutations: list[CookieMutation] | None = None
) -> RedirectResponse:
    params = {}
    if installed:
        params["installed"] = "true"
    if error:
        params["error"] = error
    url = _absolute("/login")
    if params:
        url += f"?{urlencode(params)}"
    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    apply_cookie_mutations(response, mutations or [])
    return response


@router.get("/start")
@limiter.limit(get_rate_limit("auth"))
async def start(request: Request) -> Response:
    """Begin the GitHub login: persist a state nonce and redirect to the provider."""
    record, cookie = issue_state(request.query_params.get("redirect"))
    url = authorization_url(record.state, config_module.settings.callback_url)

    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    apply_cookie_mutations(response, [cookie])
    log.debug("OAuth flow started", redirect_to=record.redirect_to)
    return response


@router.get("/callback")
@limiter.limit(get_rate_limit("auth"))
async def callback(
    request: Request,
    session: AsyncSession = Depends(get_session_dependency),
    github: GitHubAppClient = Depends(get_github_client),
) -> Response:
    params = request.query_params
    code = params.get("code")
    state = params.get("state")

    # App installed straight from GitHub: no login in flight, start one
    if params.get("installation_id") and params.get("setup_action") and not state:
        log.info(
            "App installation callback, redirecting to login",
            installation_id=params.get("installation_id"),
            setup_action=params.get("setup_action"),
        )
        return _login_redirect(installed=True)

    if params.get("error"):
        log.warning("OAuth error from GitHub", error=params.get("error"))
        return _login_redirect(error="Authentication was cancelled or failed")

    if not code or not state:
        return _login_redirect(error="Invalid authentication response")

    try:
        record = verify_state(
            cookie_value=request.cookies.get(OAUTH_STATE_COOKIE),
            returned_state=state,
        )
    except OAuthStateError as e:
        log.info("OAuth state rejected", reason=str(e))
        return _login_redirect(error=str(e), mutations=[clear_state_cookie()])

    try:
        access_token, identity = await github.exchange_code_for_user(code)
        user = await UserManager(session).upsert_from_github(identity)

        db = authorized_db(session, user.id)
        for installation in await github.get_user_installations(access_token):
            try:
                await db.installations.upsert(
                    installation_id=installation.id,
                    account_login=installation.account_login,
                    account_type=installation.account_type,
                    account_avatar=installation.avatar_url,
                )
            except AuthorizationError:
                continue

        session_cookies = await SessionAccessor(session, request.cookies).start_session(user.id)
    except Exception as e:
        log.error("Authentication failed", error_type=type(e).__name__, error=str(e))
        await session.rollback()
        return _login_redirect(
            error="Authentication failed. Please try again.",
            mutations=[clear_state_cookie()],
        )

    log.info("User authenticated", user_id=user.id, login=user.login)

    response = RedirectResponse(url=_absolute(record.redirect_to), status_code=status.HTTP_302_FOUND)
    apply_cookie_mutations(response, [clear_state_cookie(), expire_token(), *session_cookies])
    return response


@router.get("/session")
@limiter.limit(get_rate_limit("auth"))
async def session_info(
    request: Request,
    accessor: SessionAccessor = Depends(get_session_accessor),
) -> Response:
    """Session bootstrap: current user (or null) plus the CSRF token."""
    summary, mutations = await accessor.session_summary()
    token, csrf_mutations = get_or_create_token(request.cookies)

    response = JSONResponse({"data": summary})
    response.headers[CSRF_HEADER] = token
    apply_cookie_mutations(response, [*mutations, *csrf_mutations])
    return response


@router.post("/logout")
@limiter.limit(get_rate_limit("auth"))
async def logout(
    request: Request,
    accessor: SessionAccessor = Depends(get_session_accessor),
) -> Response:
    """Destroy the current session. CSRF-checked by middleware."""
    try:
        mutations = await accessor.end_session()
    except InkwellError:
        raise
    except Exception as e:
        raise_internal_error(e, context="logging out", message="Failed to log out")

    log.info("User logged out")
    response = JSONResponse({"success": True})
    apply_cookie_mutations(response, [*mutations, expire_token()])
    return response
