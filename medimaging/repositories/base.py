"""Base repository with common CRUD operations."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any

from medimaging.exceptions import EntityAlreadyExistsError, EntityNotFoundError
from medimaging.models import BaseModel

type FilterValueT = str | int | float | None


class BaseRepository[ModelT: BaseModel](ABC):
    """Storage interface used by the services.

    Handlers and services only talk to this interface, so the in-memory
    implementation can be swapped for a real datastore.
    """

    @abstractmethod
    async def get(self, id: Any) -> ModelT:
        """Get entity by ID or raise EntityNotFoundError."""

    @abstractmethod
    async def get_by(self, **filters: FilterValueT) -> ModelT | None:
        """Get the first entity whose fields equal the given values."""

    @abstractmethod
    async def list_all(self, **filters: FilterValueT) -> Sequence[ModelT]:
        """List all entities matching filters, in insertion order."""

    @abstractmethod
    async def create(self, entity: ModelT) -> ModelT:
        """Store a new entity and return the stored version."""

    @abstractmethod
    async def update(self, id: Any, update_data: dict[str, Any]) -> ModelT:
        """Apply field updates to a stored entity and return it."""

    @abstractmethod
    async def delete(self, id: Any) -> ModelT:
        """Remove an entity and return it."""

    async def count(self, **filters: FilterValueT) -> int:
        """Count entities matching filters."""
        return len(await self.list_all(**filters))


class InMemoryRepository[ModelT: BaseModel](BaseRepository[ModelT]):
    """Process-local repository guarded by an asyncio lock.

    Mutations (and the uniqueness checks preceding them) run under one lock,
    so concurrent requests cannot assign the same id or business key twice.
    Entities are copied on the way in and out; callers never hold a
    reference to stored state.

    Args:
        model_class: Model class this repository stores
        items: Initial entities
        id_field: Name of the identity attribute
        unique_fields: Attributes that must be unique across stored entities
        auto_id: Assign integer ids from a monotonic counter on create
    """

    def __init__(
        self,
        model_class: type[ModelT],
        items: Iterable[ModelT] = (),
        id_field: str = "id",
        unique_fields: Sequence[str] = (),
        auto_id: bool = False,
    ):
        self.model_class = model_class
        self.id_field = id_field
        self.unique_fields = tuple(unique_fields)
        self.auto_id = auto_id
        self._items: dict[Any, ModelT] = {}
        self._lock = asyncio.Lock()

        for item in items:
            self._items[getattr(item, id_field)] = item.model_copy(deep=True)
        self._next_id = len(self._items) + 1

    def _not_found(self, id: Any) -> EntityNotFoundError:
        return EntityNotFoundError(f"{self.model_class.__name__} with ID {id} not found")

    def _conflict(self, field: str, value: Any) -> EntityAlreadyExistsError:
        return EntityAlreadyExistsError(
            f"{self.model_class.__name__} with {field} '{value}' already exists"
        )

    @staticmethod
    def _matches(entity: ModelT, filters: dict[str, FilterValueT]) -> bool:
        return all(
            getattr(entity, field) == value
            for field, value in filters.items()
            if hasattr(entity, field)
        )

    async def get(self, id: Any) -> ModelT:
        entity = self._items.get(id)
        if entity is None:
            raise self._not_found(id)
        return entity.model_copy(deep=True)

    async def get_by(self, **filters: FilterValueT) -> ModelT | None:
        for entity in self._items.values():
            if self._matches(entity, filters):
                return entity.model_copy(deep=True)
        return None

    async def list_all(self, **filters: FilterValueT) -> Sequence[ModelT]:
        return [
            entity.model_copy(deep=True)
            for entity in self._items.values()
            if self._matches(entity, filters)
        ]

    async def create(self, entity: ModelT) -> ModelT:
        async with self._lock:
            for field in self.unique_fields:
                value = getattr(entity, field)
                if any(getattr(stored, field) == value for stored in self._items.values()):
                    raise self._conflict(field, value)

            if self.auto_id:
                entity = entity.model_copy(update={self.id_field: self._next_id})
                self._next_id += 1

            key = getattr(entity, self.id_field)
            if key in self._items:
                raise self._conflict(self.id_field, key)

            self._items[key] = entity.model_copy(deep=True)
            return entity.model_copy(deep=True)

    async def update(self, id: Any, update_data: dict[str, Any]) -> ModelT:
        async with self._lock:
            entity = self._items.get(id)
            if entity is None:
                raise self._not_found(id)

            fields = {
                field: value
                for field, value in update_data.items()
                if field in self.model_class.model_fields and field != self.id_field
            }
            updated = entity.model_copy(update=fields)
            self._items[id] = updated
            return updated.model_copy(deep=True)

    async def delete(self, id: Any) -> ModelT:
        async with self._lock:
            entity = self._items.pop(id, None)
            if entity is None:
                raise self._not_found(id)
            return entity
