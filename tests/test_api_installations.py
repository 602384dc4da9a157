from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from inkwell.api.dependencies import get_authorized_db
from inkwell.auth.cookies import SESSION_COOKIE
from inkwell.db.authorized import authorized_db
from inkwell.db.connection import get_session_dependency
from inkwell.db.models import AccountType
from inkwell.errors import InternalError


@pytest.mark.asyncio
async def test_requires_session_and_never_queries(app, client) -> None:
    session = AsyncMock()

    async def _session():
        yield session

    app.dependency_overrides[get_session_dependency] = _session

    response = await client.get("/installations")

    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized", "message": "Authentication required"}
    session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_forged_session_is_unauthorized(client) -> None:
    client.cookies.set(SESSION_COOKIE, f"{'b' * 64}.forged")
    response = await client.get("/installations")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_lists_only_own_installations(client, create_login, session_factory) -> None:
    alice, alice_cookie = await create_login("alice", github_id=1)
    bob, _bob_cookie = await create_login("bob", github_id=2)
    async with session_factory() as session:
        await authorized_db(session, alice.id).installations.upsert(
            installation_id=11,
            account_login="alice",
            account_type=AccountType.USER,
            account_avatar="https://a.example/alice",
        )
        await authorized_db(session, bob.id).installations.upsert(
            installation_id=22,
            account_login="bob-org",
            account_type=AccountType.ORGANIZATION,
            account_avatar="",
        )
        await session.commit()

    client.cookies.set(SESSION_COOKIE, alice_cookie)
    response = await client.get("/installations")

    assert response.status_code == 200
    assert response.json() == {
        "data": [
            {
                "id": 11,
                "accountLogin": "alice",
                "accountType": "User",
                "avatarUrl": "https://a.example/alice",
            }
        ]
    }


@pytest.mark.asyncio
async def test_unexpected_failure_is_generic_500(app, client) -> None:
    db = MagicMock()
    db.owner_id = "user-1"
    db.installations.find_all = AsyncMock(side_effect=RuntimeError("pool exhausted at 10.0.0.5"))
    app.dependency_overrides[get_authorized_db] = lambda: db

    response = await client.get("/installations")

    assert response.status_code == 500
    assert response.json() == {
        "error": "internal_error",
        "message": "Failed to fetch installations",
    }
    assert "10.0.0.5" not in response.text


@pytest.mark.asyncio
async def test_storage_failure_is_generic_500(app, client) -> None:
    db = MagicMock()
    db.owner_id = "user-1"
    db.installations.find_all = AsyncMock(side_effect=InternalError())
    app.dependency_overrides[get_authorized_db] = lambda: db

    response = await client.get("/installations")

    assert response.status_code == 500
    assert response.json()["message"] == "An internal error occurred. Please try again later."


@pytest.mark.asyncio
async def test_database_error_during_auth_is_500(app, client, create_login) -> None:
    _user, cookie = await create_login()
    session = AsyncMock()
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

    async def _session():
        yield session

    app.dependency_overrides[get_session_dependency] = _session
    client.cookies.set(SESSION_COOKIE, cookie)

    response = await client.get("/installations")

    assert response.status_code == 500
    assert response.json()["error"] == "internal_error"
    assert "db down" not in response.text


def _direct_dependencies(app, path: str) -> set:
    route = next(r for r in app.routes if getattr(r, "path", None) == path)
    return {dep.call for dep in route.dependant.dependencies}


def test_signed_in_routes_only_take_the_scoped_accessor(app) -> None:
    assert _direct_dependencies(app, "/installations") == {get_authorized_db}


def test_callback_takes_a_raw_session_before_login(app) -> None:
    assert get_session_dependency in _direct_dependencies(app, "/auth/callback")
