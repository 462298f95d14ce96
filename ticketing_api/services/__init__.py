from .categories import (
    CreateCategoryHandler,
    DeleteCategoryHandler,
    GetAllCategoriesHandler,
    GetCategoryByIdHandler,
    GetCategoryTreeHandler,
    ResolveCategoryFilterHandler,
    UpdateCategoryHandler,
    ensure_general_category,
)
