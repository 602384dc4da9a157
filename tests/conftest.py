"""Shared fixtures: isolated settings, an in-memory database and an ASGI client."""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from inkwell import config as config_module
from inkwell.auth.sessions import SessionAccessor
from inkwell.auth.users import GitHubUserIdentity, UserManager
from inkwell.config import Settings
from inkwell.db import models  # noqa: F401 - register tables on the metadata
from inkwell.db.models import User
from inkwell.github import GitHubInstallation

TEST_SESSION_SECRET = "test-session-secret-" + "x" * 32


def make_settings(**overrides) -> Settings:
    values = {
        "session_secret": TEST_SESSION_SECRET,
        "github_client_id": "Iv1.testclient",
        "github_client_secret": "test-client-secret",
        "public_url": "http://testserver",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def test_settings() -> Iterator[Settings]:
    original = config_module.settings
    config_module.settings = make_settings()  # type: ignore[assignment]
    yield config_module.settings
    config_module.settings = original  # type: ignore[assignment]


@pytest.fixture(autouse=True)
def _rate_limits_off():
    from inkwell.api.rate_limit import limiter

    previous = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = previous


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


class FakeGitHubClient:
    """Stands in for `GitHubAppClient` at the HTTP boundary."""

    def __init__(self) -> None:
        self.identity = GitHubUserIdentity(
            id=583231, login="octocat", avatar_url="https://avatars.example/octocat"
        )
        self.installations: list[GitHubInstallation] = []
        self.fail_with: Exception | None = None
        self.codes: list[str] = []

    async def exchange_code_for_user(self, code: str) -> tuple[str, GitHubUserIdentity]:
        self.codes.append(code)
        if self.fail_with is not None:
            raise self.fail_with
        return "gho_test_token", self.identity

    async def get_user_installations(self, access_token: str) -> list[GitHubInstallation]:
        return list(self.installations)


@pytest.fixture
def github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def app(session_factory, github):
    from inkwell.api.app import create_app
    from inkwell.db.connection import get_session_dependency
    from inkwell.github import get_github_client

    application = create_app()

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_session_dependency] = _session
    application.dependency_overrides[get_github_client] = lambda: github
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest.fixture
def create_login(session_factory) -> Callable[..., Awaitable[tuple[User, str]]]:
    """Persist a user with a live session; returns the user and `__session` cookie value."""

    async def _create(login: str = "octocat", github_id: int = 583231) -> tuple[User, str]:
        async with session_factory() as session:
            identity = GitHubUserIdentity(
                id=github_id, login=login, avatar_url=f"https://a.example/{login}"
            )
            user = await UserManager(session).upsert_from_github(identity)
            mutations = await SessionAccessor(session, {}).start_session(user.id)
            await session.commit()
        return user, mutations[0].value or ""

    return _create


@pytest.fixture
def set_cookies() -> Callable[..., list[str]]:
    """Set-Cookie headers on a response for one cookie name."""

    def _find(response, name: str) -> list[str]:
        return [h for h in response.headers.get_list("set-cookie") if h.startswith(f"{name}=")]

    return _find


@pytest.fixture
def configure() -> Callable[..., Settings]:
    """Swap in settings with overrides for the rest of the test."""

    def _configure(**overrides) -> Settings:
        config_module.settings = make_settings(**overrides)  # type: ignore[assignment]
        return config_module.settings

    return _configure
