"""Hook interfaces — abstract base classes for swappable services.

The analysis API never validates credentials itself. It asks an
AuthService and gets a User back. A stub implementation lets the service
run end-to-end locally; the team wires in a production implementation
when ready.

Tier 1 leaf module: imports only from abc (stdlib) and
namewizard.schemas (also Tier 1).

TEAM: To implement a real service, subclass the ABC and implement every
abstract method. Python will raise TypeError at instantiation if any
method is missing.

Usage:
    from namewizard.hooks.interfaces import AuthService
"""

from abc import ABC, abstractmethod

from namewizard.schemas import User


class AuthService(ABC):
    """Validates auth tokens.

    TEAM: Replace the stub (FakeAuthService) with your auth provider.
    The stub accepts any token and returns a configurable test user.
    """

    @abstractmethod
    async def validate_token(self, token: str) -> User | None:
        """Validates an auth token and returns the associated user.

        Args:
            token: Auth token from the request.

        Returns:
            The User if the token is valid and not expired, None otherwise.
        """
        ...
