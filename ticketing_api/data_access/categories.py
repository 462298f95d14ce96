from __future__ import annotations

from typing import Iterable

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing_api import db
from ticketing_api.data_access.base import CategoryRepository
from ticketing_api.hierarchy import resolve_descendant_ids
from ticketing_api.models import Category, CategoryName, PaginatedCategories
from ticketing_api.tables import CategoriesTable


class CategoriesDataAccess(CategoryRepository):
    def __init__(self, session: AsyncSession = Depends(db.get_session)) -> None:
        self._session = session

    async def find_all(self, *, page: int, limit: int) -> PaginatedCategories:
        total_items = await self._session.scalar(
            select(func.count()).select_from(CategoriesTable)
        )
        result = await self._session.execute(
            select(CategoriesTable)
            .order_by(CategoriesTable.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return PaginatedCategories.build(
            [_to_category(category) for category in result.scalars()],
            total_items=total_items or 0,
            page=page,
            limit=limit,
        )

    async def find_by_id(self, category_id: int) -> Category | None:
        category = await self._session.get(CategoriesTable, category_id)
        if category is None:
            return None
        return _to_category(category)

    async def find_by_name(self, name: str) -> Category | None:
        result = await self._session.execute(
            select(CategoriesTable).where(CategoriesTable.name == name)
        )
        category = result.scalar_one_or_none()
        if category is None:
            return None
        return _to_category(category)

    async def find_by_names(self, names: Iterable[str]) -> list[Category]:
        names = list(names)
        if not names:
            return []
        result = await self._session.execute(
            select(CategoriesTable)
            .where(CategoriesTable.name.in_(names))
            .order_by(CategoriesTable.id)
        )
        return [_to_category(category) for category in result.scalars()]

    async def find_by_parent_id(self, parent_id: int | None) -> list[Category]:
        if parent_id is None:
            condition = CategoriesTable.parent_id.is_(None)
        else:
            condition = CategoriesTable.parent_id == parent_id
        result = await self._session.execute(
            select(CategoriesTable).where(condition).order_by(CategoriesTable.id)
        )
        return [_to_category(category) for category in result.scalars()]

    async def find_by_parent_name(self, parent_name: str) -> list[Category]:
        parent = await self.find_by_name(parent_name)
        if parent is None:
            return []
        return await self.find_by_parent_id(parent.id)

    async def save(self, category: Category) -> Category:
        if category.id is None:
            row = CategoriesTable(
                name=category.name.value,
                parent_id=category.parent_id,
            )
            self._session.add(row)
        else:
            row = await self._session.get(CategoriesTable, category.id)
            if row is None:
                raise LookupError(f"Category {category.id} does not exist.")
            row.name = category.name.value
            row.parent_id = category.parent_id
        await self._session.flush()
        await self._session.refresh(row)
        return _to_category(row)

    async def delete_by_id(self, category_id: int) -> bool:
        category = await self._session.get(CategoriesTable, category_id)
        if category is None:
            return False
        await self._session.delete(category)
        await self._session.flush()
        return True

    async def fetch_all(self) -> list[Category]:
        result = await self._session.execute(
            select(CategoriesTable).order_by(CategoriesTable.id)
        )
        return [_to_category(category) for category in result.scalars()]

    async def find_by_ids(self, category_ids: Iterable[int]) -> list[Category]:
        category_ids = list(category_ids)
        if not category_ids:
            return []
        result = await self._session.execute(
            select(CategoriesTable)
            .where(CategoriesTable.id.in_(category_ids))
            .order_by(CategoriesTable.id)
        )
        return [_to_category(category) for category in result.scalars()]

    async def find_all_descendant_ids(self, category_ids: Iterable[int]) -> set[int]:
        category_ids = set(category_ids)
        if not category_ids:
            return set()
        result = await self._session.execute(
            select(CategoriesTable.id, CategoriesTable.parent_id)
        )
        return resolve_descendant_ids(result.all(), category_ids)


def _to_category(category: CategoriesTable) -> Category:
    return Category(
        id=category.id,
        name=CategoryName(category.name),
        parent_id=category.parent_id,
    )
