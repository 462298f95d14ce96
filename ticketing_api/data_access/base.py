from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ticketing_api.models import Category, PaginatedCategories


class CategoryRepository(ABC):
    """Contract for category data access."""

    @abstractmethod
    async def find_all(self, *, page: int, limit: int) -> PaginatedCategories:
        """Returns one 1-indexed page of categories plus paging totals."""

    @abstractmethod
    async def find_by_id(self, category_id: int) -> Category | None:
        pass

    @abstractmethod
    async def find_by_name(self, name: str) -> Category | None:
        pass

    @abstractmethod
    async def find_by_names(self, names: Iterable[str]) -> list[Category]:
        pass

    @abstractmethod
    async def find_by_parent_id(self, parent_id: int | None) -> list[Category]:
        """Returns direct children of ``parent_id``, or root categories for None."""

    @abstractmethod
    async def find_by_parent_name(self, parent_name: str) -> list[Category]:
        """Returns direct children of the named category; empty if it does not exist."""

    @abstractmethod
    async def save(self, category: Category) -> Category:
        """Inserts when ``category.id`` is None, otherwise updates. Returns the stored row."""

    @abstractmethod
    async def delete_by_id(self, category_id: int) -> bool:
        """Returns True iff a row was removed."""

    @abstractmethod
    async def fetch_all(self) -> list[Category]:
        pass

    @abstractmethod
    async def find_by_ids(self, category_ids: Iterable[int]) -> list[Category]:
        pass

    @abstractmethod
    async def find_all_descendant_ids(self, category_ids: Iterable[int]) -> set[int]:
        """Returns the transitive set of descendants of ``category_ids``."""
