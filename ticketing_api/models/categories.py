from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from ticketing_api.errors import ValidationError


@dataclass(frozen=True, slots=True)
class CategoryName:
    """Display name of a category.

    Whitespace is not trimmed here; request schemas strip input before it
    reaches the domain.
    """

    value: str

    MIN_LENGTH = 1
    MAX_LENGTH = 30

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValidationError("Category name must be a string.")
        if not self.MIN_LENGTH <= len(self.value) <= self.MAX_LENGTH:
            raise ValidationError(
                f"Category name must be between {self.MIN_LENGTH} and "
                f"{self.MAX_LENGTH} characters."
            )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Category:
    """A node in the single-parent category hierarchy.

    ``children`` is only filled in by the tree builder. It is not part of
    equality and is never written back to storage.
    """

    id: int | None
    name: CategoryName
    parent_id: int | None = None
    children: list[Category] = field(default_factory=list, compare=False, repr=False)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def with_changes(self, **changes: object) -> Category:
        """Return a copy with ``changes`` applied and no materialized children."""
        changes.setdefault("children", [])
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class PaginatedCategories:
    categories: list[Category]
    total_items: int
    current_page: int
    items_per_page: int
    total_pages: int

    @classmethod
    def build(
        cls, categories: list[Category], *, total_items: int, page: int, limit: int
    ) -> PaginatedCategories:
        return cls(
            categories=categories,
            total_items=total_items,
            current_page=page,
            items_per_page=limit,
            total_pages=math.ceil(total_items / limit) if limit > 0 else 0,
        )


@dataclass(frozen=True, slots=True)
class CreateCategoryCommand:
    name: str
    parent_id: int | None = None


@dataclass(frozen=True, slots=True)
class UpdateCategoryCommand:
    # Keys present in ``updates`` are changed; "parent_id": None moves the
    # category to the root level.
    id: int
    updates: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class DeleteCategoryCommand:
    id: int


@dataclass(frozen=True, slots=True)
class GetCategoryByIdQuery:
    id: int


@dataclass(frozen=True, slots=True)
class GetAllCategoriesQuery:
    page: int = 1
    limit: int = 10


@dataclass(frozen=True, slots=True)
class ResolveCategoryFilterQuery:
    category_ids: tuple[int, ...] = ()
    category_names: tuple[str, ...] = ()


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ..., min_length=CategoryName.MIN_LENGTH, max_length=CategoryName.MAX_LENGTH
    )
    parent_id: int | None = None


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(
        None, min_length=CategoryName.MIN_LENGTH, max_length=CategoryName.MAX_LENGTH
    )
    parent_id: int | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    parent_id: int | None

    @classmethod
    def from_domain(cls, category: Category) -> CategoryResponse:
        return cls(id=category.id, name=category.name.value, parent_id=category.parent_id)


class CategoryTreeNodeResponse(BaseModel):
    id: int
    name: str
    parent_id: int | None
    children: list[CategoryTreeNodeResponse] = []

    @classmethod
    def from_domain(cls, category: Category) -> CategoryTreeNodeResponse:
        return cls(
            id=category.id,
            name=category.name.value,
            parent_id=category.parent_id,
            children=[cls.from_domain(child) for child in category.children],
        )


class PaginatedCategoriesResponse(BaseModel):
    categories: list[CategoryResponse]
    total_items: int
    current_page: int
    items_per_page: int
    total_pages: int

    @classmethod
    def from_domain(cls, page: PaginatedCategories) -> PaginatedCategoriesResponse:
        return cls(
            categories=[CategoryResponse.from_domain(c) for c in page.categories],
            total_items=page.total_items,
            current_page=page.current_page,
            items_per_page=page.items_per_page,
            total_pages=page.total_pages,
        )


class CategoryFilterResponse(BaseModel):
    category_ids: list[int]
