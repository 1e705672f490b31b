"""Service layer for user business logic."""

import asyncio

from medimaging.api.security import TokenManager
from medimaging.exceptions import InvalidCredentialsError
from medimaging.models import LoginResponse, User, UserRead
from medimaging.repositories.user_repository import UserRepository
from medimaging.utils.auth import verify_password
from medimaging.utils.logger import logger


class UserService:
    """Service for user-related business logic."""

    def __init__(self, user_repo: UserRepository, tokens: TokenManager):
        """Initialize user service.

        Args:
            user_repo: User repository instance
            tokens: Token manager used to sign session tokens
        """
        self.user_repo = user_repo
        self.tokens = tokens

    async def get_user(self, user_id: int) -> UserRead:
        """Get user by ID, without the password hash.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        user = await self.user_repo.get(user_id)
        return UserRead.model_validate(user.model_dump(exclude={"hashed_password"}))

    async def authenticate(self, username: str, password: str) -> User:
        """Authenticate user with username and password.

        Unknown usernames and wrong passwords raise the same error.

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        user = await self.user_repo.find_by_username(username)
        if user is None:
            logger.info(f"Login failed, unknown user: {username}")
            raise InvalidCredentialsError()
        # bcrypt is CPU-bound, keep it off the event loop
        if not await asyncio.to_thread(verify_password, password, user.hashed_password):
            logger.info(f"Login failed, wrong password for user: {username}")
            raise InvalidCredentialsError()
        return user

    async def login(self, username: str, password: str, expires_in: str) -> LoginResponse:
        """Authenticate and issue a session token."""
        logger.info(f"Login attempt: {username}")
        user = await self.authenticate(username, password)
        token = self.tokens.create_access_token(user)
        logger.info(f"Login successful for user: {username}")

        return LoginResponse(
            user=UserRead.model_validate(user.model_dump(exclude={"hashed_password"})),
            token=token,
            expires_in=expires_in,
        )
