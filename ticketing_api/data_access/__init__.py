from .base import CategoryRepository
from .categories import CategoriesDataAccess
