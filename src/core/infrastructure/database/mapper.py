"""Base mapper for entity-document conversion."""

from abc import ABC, abstractmethod
from typing import TypeVar

E = TypeVar("E")  # Entity type
D = TypeVar("D")  # Stored representation type


class BaseMapper[E, D](ABC):
    """Base mapper for converting between domain entities and their stored form."""

    @abstractmethod
    def to_domain(self, data: D) -> E:
        """Convert stored data to a domain entity."""
        pass

    @abstractmethod
    def to_storage(self, entity: E) -> D:
        """Convert a domain entity to its stored form."""
        pass
