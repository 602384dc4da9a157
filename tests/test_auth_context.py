from datetime import datetime

from inkwell.auth.context import AuthContext
from inkwell.auth.sessions import SessionPrincipal


def test_auth_context_properties() -> None:
    principal = SessionPrincipal(
        id="user-1",
        login="octocat",
        avatar_url="",
        session_id="a" * 64,
        expires_at=datetime(2030, 1, 1),
    )
    ctx = AuthContext(principal=principal)
    assert ctx.owner_id == "user-1"
