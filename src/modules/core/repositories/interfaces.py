"""Generic repository contract shared by every module.

Services depend on these abstractions and receive concrete Django ORM
implementations through their constructors, which keeps the service
layer testable with plain mocks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base repository contract.

    ``T`` is the aggregate managed by the repository (``Product``,
    ``Cart``, ``Order`` ...).  Look-ups return ``None`` for missing rows;
    deciding whether that is an error belongs to the service layer.
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[T]:
        """List entities with optional ORM look-ups."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""

    @abstractmethod
    def delete(self, id: Any) -> bool:
        """Remove an entity by ID. Returns ``False`` when nothing matched."""
