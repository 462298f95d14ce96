from __future__ import annotations

import logging

from fastapi import Depends

from ticketing_api.config import get_general_category_name
from ticketing_api.data_access import CategoriesDataAccess, CategoryRepository
from ticketing_api.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ticketing_api.hierarchy import build_category_tree, collect_subtree_ids
from ticketing_api.models import (
    Category,
    CategoryName,
    CreateCategoryCommand,
    DeleteCategoryCommand,
    GetAllCategoriesQuery,
    GetCategoryByIdQuery,
    PaginatedCategories,
    ResolveCategoryFilterQuery,
    UpdateCategoryCommand,
)

logger = logging.getLogger(__name__)


async def _require_category(
    categories_store: CategoryRepository, category_id: int
) -> Category:
    category = await categories_store.find_by_id(category_id)
    if category is None:
        raise NotFoundError(f"Category with ID {category_id} not found.")
    return category


async def _ensure_name_available(
    categories_store: CategoryRepository,
    name: CategoryName,
    *,
    category_id: int | None = None,
) -> None:
    existing_category = await categories_store.find_by_name(name.value)
    if existing_category is not None and existing_category.id != category_id:
        raise ConflictError("Category name already exists.")


async def _validate_parent_id(
    categories_store: CategoryRepository,
    parent_id: int | None,
    *,
    category_id: int | None = None,
) -> None:
    if parent_id is None:
        return

    if category_id is not None and parent_id == category_id:
        raise ConflictError("Category cannot be its own parent.")

    parent = await categories_store.find_by_id(parent_id)
    if parent is None:
        raise ValidationError("Parent category not found.")

    if category_id is not None:
        descendant_ids = await categories_store.find_all_descendant_ids([category_id])
        if parent_id in descendant_ids:
            raise ConflictError(
                "Category cannot be moved under one of its own descendants."
            )


class CreateCategoryHandler:
    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
    ) -> None:
        self._categories_store = categories_store

    async def execute(self, command: CreateCategoryCommand) -> Category:
        name = CategoryName(command.name)
        await _ensure_name_available(self._categories_store, name)
        await _validate_parent_id(self._categories_store, command.parent_id)

        category = await self._categories_store.save(
            Category(id=None, name=name, parent_id=command.parent_id)
        )
        logger.info(
            "Created category %s (%r) under parent %s.",
            category.id,
            category.name.value,
            category.parent_id,
        )
        return category


class GetCategoryByIdHandler:
    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
    ) -> None:
        self._categories_store = categories_store

    async def execute(self, query: GetCategoryByIdQuery) -> Category:
        return await _require_category(self._categories_store, query.id)


class GetAllCategoriesHandler:
    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
    ) -> None:
        self._categories_store = categories_store

    async def execute(self, query: GetAllCategoriesQuery) -> PaginatedCategories:
        return await self._categories_store.find_all(page=query.page, limit=query.limit)


class GetCategoryTreeHandler:
    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
    ) -> None:
        self._categories_store = categories_store

    async def execute(self) -> list[Category]:
        categories = await self._categories_store.fetch_all()
        roots = build_category_tree(categories)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Built category tree: %d roots, %d nodes.",
                len(roots),
                sum(len(collect_subtree_ids(root)) for root in roots),
            )
        return roots


class UpdateCategoryHandler:
    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
        general_category_name: str = Depends(get_general_category_name),
    ) -> None:
        self._categories_store = categories_store
        self._general_category_name = general_category_name

    async def execute(self, command: UpdateCategoryCommand) -> Category:
        category = await _require_category(self._categories_store, command.id)
        updates = command.updates

        name = category.name
        if "name" in updates:
            new_name = CategoryName(updates["name"])
            if new_name != category.name:
                if category.name.value == self._general_category_name:
                    raise ValidationError(
                        f'The "{self._general_category_name}" category cannot be renamed.'
                    )
                await _ensure_name_available(
                    self._categories_store, new_name, category_id=category.id
                )
                name = new_name

        parent_id = category.parent_id
        if "parent_id" in updates:
            new_parent_id = updates["parent_id"]
            if new_parent_id is not None and not isinstance(new_parent_id, int):
                raise ValidationError("Parent category not found.")
            if new_parent_id != category.parent_id:
                await _validate_parent_id(
                    self._categories_store, new_parent_id, category_id=category.id
                )
                parent_id = new_parent_id

        if name == category.name and parent_id == category.parent_id:
            return category

        updated_category = await self._categories_store.save(
            category.with_changes(name=name, parent_id=parent_id)
        )
        logger.info("Updated category %s.", updated_category.id)
        return updated_category


class DeleteCategoryHandler:
    """Deletes a category after moving its direct children under the general category.

    The general category is the fallback parent and can never be deleted
    itself.
    """

    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
        general_category_name: str = Depends(get_general_category_name),
    ) -> None:
        self._categories_store = categories_store
        self._general_category_name = general_category_name

    async def execute(self, command: DeleteCategoryCommand) -> bool:
        category = await _require_category(self._categories_store, command.id)

        if category.name.value == self._general_category_name:
            raise ValidationError(
                f'The "{self._general_category_name}" category cannot be deleted.'
            )

        general_category = await self._categories_store.find_by_name(
            self._general_category_name
        )
        if general_category is None:
            raise ConfigurationError(
                f'The "{self._general_category_name}" category is missing.'
            )

        for child in await self._categories_store.find_by_parent_id(category.id):
            if child.id == general_category.id:
                logger.warning(
                    "General category %s was a child of %s; moving it to the root.",
                    child.id,
                    category.id,
                )
                new_parent_id = None
            else:
                new_parent_id = general_category.id
            await self._categories_store.save(child.with_changes(parent_id=new_parent_id))

        deleted = await self._categories_store.delete_by_id(category.id)
        if not deleted:
            raise NotFoundError(f"Category with ID {category.id} not found.")
        logger.info("Deleted category %s.", category.id)
        return True


class ResolveCategoryFilterHandler:
    """Expands an event-search category filter to include every sub-category."""

    def __init__(
        self,
        categories_store: CategoryRepository = Depends(CategoriesDataAccess),
    ) -> None:
        self._categories_store = categories_store

    async def execute(self, query: ResolveCategoryFilterQuery) -> list[int]:
        start_ids = set(query.category_ids)
        if query.category_names:
            named_categories = await self._categories_store.find_by_names(
                query.category_names
            )
            start_ids.update(category.id for category in named_categories)

        if not start_ids:
            return []

        descendant_ids = await self._categories_store.find_all_descendant_ids(start_ids)
        return sorted(start_ids | descendant_ids)


async def ensure_general_category(
    categories_store: CategoryRepository, general_category_name: str
) -> Category:
    """Create the fallback root category if it does not exist yet."""
    general_category = await categories_store.find_by_name(general_category_name)
    if general_category is not None:
        return general_category

    general_category = await categories_store.save(
        Category(id=None, name=CategoryName(general_category_name), parent_id=None)
    )
    logger.info(
        'Seeded "%s" category with id %s.', general_category_name, general_category.id
    )
    return general_category
