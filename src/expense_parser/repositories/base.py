from abc import ABC, abstractmethod
from typing import Optional

from expense_parser.domain.models import MappingEntry, MappingSnapshot

class DuplicateMappingError(Exception):
    """Raised when adding a keyword that is already mapped."""
    pass

class MappingNotFoundError(Exception):
    """Raised when a keyword has no mapping."""
    pass

class MappingRepository(ABC):
    """
    Abstract repository for the biller keyword -> category table.

    The extraction engine never talks to a repository directly. Callers
    take a snapshot() and hand it to the engine for the duration of a parse.
    """

    @abstractmethod
    def snapshot(self) -> MappingSnapshot:
        """
        Point-in-time copy of the whole table.

        Returns:
            MappingSnapshot in insertion order
        """
        pass

    @abstractmethod
    def get(self, keyword: str) -> Optional[MappingEntry]:
        """
        Look up a keyword, case-insensitively.

        Returns:
            MappingEntry if found, None otherwise
        """
        pass

    @abstractmethod
    def add(self, keyword: str, category: str) -> MappingEntry:
        """
        Add a new keyword.

        Raises:
            DuplicateMappingError: If the keyword is already mapped
            ValueError: If the keyword is empty
        """
        pass

    @abstractmethod
    def update(self, keyword: str, category: str) -> MappingEntry:
        """
        Change the category of an existing keyword.

        Raises:
            MappingNotFoundError: If the keyword isn't mapped
        """
        pass

    @abstractmethod
    def delete(self, keyword: str) -> bool:
        """
        Delete a keyword.

        Returns:
            True if deleted, False if not found
        """
        pass
