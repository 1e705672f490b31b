"""Repository layer for data access operations."""

from medimaging.repositories.base import BaseRepository, InMemoryRepository
from medimaging.repositories.study_repository import StudyRepository
from medimaging.repositories.user_repository import UserRepository

__all__ = ["BaseRepository", "InMemoryRepository", "StudyRepository", "UserRepository"]
