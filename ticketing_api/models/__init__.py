from .categories import (
    Category,
    CategoryCreate,
    CategoryFilterResponse,
    CategoryName,
    CategoryResponse,
    CategoryTreeNodeResponse,
    CategoryUpdate,
    CreateCategoryCommand,
    DeleteCategoryCommand,
    GetAllCategoriesQuery,
    GetCategoryByIdQuery,
    PaginatedCategories,
    PaginatedCategoriesResponse,
    ResolveCategoryFilterQuery,
    UpdateCategoryCommand,
)
