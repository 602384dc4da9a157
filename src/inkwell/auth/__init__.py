"""Authentication and authorization primitives for Inkwell."""

from inkwell.auth.context import AuthContext
from inkwell.auth.cookies import CookieMutation, apply_cookie_mutations
from inkwell.auth.csrf import get_or_create_token, verify_csrf
from inkwell.auth.oauth_state import OAuthStateError, StateRecord, issue_state, verify_state
from inkwell.auth.sessions import SessionAccessor, SessionManager, SessionPrincipal
from inkwell.auth.tokens import generate_token
from inkwell.auth.users import GitHubUserIdentity, UserManager

__all__ = [
    "AuthContext",
    "CookieMutation",
    "GitHubUserIdentity",
    "OAuthStateError",
    "SessionAccessor",
    "SessionManager",
    "SessionPrincipal",
    "StateRecord",
    "UserManager",
    "apply_cookie_mutations",
    "generate_token",
    "get_or_create_token",
    "issue_state",
    "verify_csrf",
    "verify_state",
]
