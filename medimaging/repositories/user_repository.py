"""Repository for User-specific operations."""

from collections.abc import Iterable

from medimaging.exceptions import UserNotFoundError
from medimaging.models import User
from medimaging.repositories.base import InMemoryRepository


class UserRepository(InMemoryRepository[User]):
    """Repository for the static user table."""

    def __init__(self, users: Iterable[User] = ()):
        """Initialize user repository with the user table."""
        super().__init__(User, items=users, unique_fields=("username",))

    def _not_found(self, id: int) -> UserNotFoundError:
        return UserNotFoundError(id)

    async def find_by_username(self, username: str) -> User | None:
        """Find user by username.

        The comparison is exact and case-sensitive.

        Args:
            username: Username to search for

        Returns:
            User if found, None otherwise
        """
        return await self.get_by(username=username)
