"""Fake auth service — development stub for AuthService.

Accepts any non-empty token and returns a configurable test user. Empty
tokens return None (simulates a missing/invalid Authorization header).

TEAM: Replace this with your real auth provider (session cookie, JWT,
OAuth). Subclass AuthService from namewizard.hooks.interfaces.

Usage:
    from namewizard.hooks.auth import FakeAuthService

    auth = FakeAuthService()                        # default: user
    auth = FakeAuthService(default_role="admin")    # admin user
"""

from namewizard.hooks.interfaces import AuthService
from namewizard.schemas import User

_ROLE_NAMES: dict[str, str] = {
    "user": "Test User",
    "admin": "Test Admin",
}


class FakeAuthService(AuthService):
    """STUB — returns a test user for any non-empty token.

    Args:
        default_role: The role assigned to all returned users,
            "user" or "admin".
    """

    def __init__(self, default_role: str = "user") -> None:
        self._default_role = default_role

    async def validate_token(self, token: str) -> User | None:
        """Returns a test user for any non-empty token, None for empty."""
        if not token:
            return None
        return User(
            id="fake-user-1",
            role=self._default_role,  # type: ignore[arg-type]
            name=_ROLE_NAMES.get(self._default_role, "Test User"),
        )
