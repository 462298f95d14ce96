from fastapi import APIRouter, Depends, Query, status

from ticketing_api.models import (
    CategoryCreate,
    CategoryFilterResponse,
    CategoryResponse,
    CategoryTreeNodeResponse,
    CategoryUpdate,
    CreateCategoryCommand,
    DeleteCategoryCommand,
    GetAllCategoriesQuery,
    GetCategoryByIdQuery,
    PaginatedCategoriesResponse,
    ResolveCategoryFilterQuery,
    UpdateCategoryCommand,
)
from ticketing_api.routers.utils import extract_updates
from ticketing_api.services import (
    CreateCategoryHandler,
    DeleteCategoryHandler,
    GetAllCategoriesHandler,
    GetCategoryByIdHandler,
    GetCategoryTreeHandler,
    ResolveCategoryFilterHandler,
    UpdateCategoryHandler,
)

router = APIRouter(prefix="/categories")

MAX_PAGE_SIZE = 100


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    handler: CreateCategoryHandler = Depends(),
) -> CategoryResponse:
    category = await handler.execute(
        CreateCategoryCommand(name=payload.name, parent_id=payload.parent_id)
    )
    return CategoryResponse.from_domain(category)


@router.get("", response_model=PaginatedCategoriesResponse)
async def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    handler: GetAllCategoriesHandler = Depends(),
) -> PaginatedCategoriesResponse:
    result = await handler.execute(GetAllCategoriesQuery(page=page, limit=limit))
    return PaginatedCategoriesResponse.from_domain(result)


@router.get("/tree", response_model=list[CategoryTreeNodeResponse])
async def get_category_tree(
    handler: GetCategoryTreeHandler = Depends(),
) -> list[CategoryTreeNodeResponse]:
    roots = await handler.execute()
    return [CategoryTreeNodeResponse.from_domain(root) for root in roots]


@router.get("/descendants", response_model=CategoryFilterResponse)
async def resolve_category_filter(
    category_ids: list[int] = Query([]),
    category_names: list[str] = Query([]),
    handler: ResolveCategoryFilterHandler = Depends(),
) -> CategoryFilterResponse:
    resolved_ids = await handler.execute(
        ResolveCategoryFilterQuery(
            category_ids=tuple(category_ids),
            category_names=tuple(name.strip() for name in category_names),
        )
    )
    return CategoryFilterResponse(category_ids=resolved_ids)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    handler: GetCategoryByIdHandler = Depends(),
) -> CategoryResponse:
    category = await handler.execute(GetCategoryByIdQuery(id=category_id))
    return CategoryResponse.from_domain(category)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    handler: UpdateCategoryHandler = Depends(),
) -> CategoryResponse:
    updates = extract_updates(payload, nullable=frozenset({"parent_id"}))
    category = await handler.execute(
        UpdateCategoryCommand(id=category_id, updates=updates)
    )
    return CategoryResponse.from_domain(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    handler: DeleteCategoryHandler = Depends(),
) -> None:
    await handler.execute(DeleteCategoryCommand(id=category_id))
