"""AuthContext: resolved principal + data-access scope for a request."""

from __future__ import annotations

from dataclasses import dataclass

from inkwell.auth.sessions import SessionPrincipal


@dataclass(frozen=True)
class AuthContext:
    principal: SessionPrincipal

    @property
    def owner_id(self) -> str:
        """Predicate value applied to every scoped query for this request."""
        return self.principal.id
