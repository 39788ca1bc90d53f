"""
Category management service.
"""
from typing import List
from sqlalchemy.orm import Session

from htasks.models import Category
from htasks.schemas import CategoryCreate
from htasks.repositories.completion_repository import CategoryRepository
from htasks.exceptions import CategoryNotFoundException, InvalidArgumentException


class CategoryService:
    """Service for managing chore categories"""

    def __init__(self, db: Session):
        self.db = db
        self.category_repo = CategoryRepository()

    def get_categories(self) -> List[Category]:
        return self.category_repo.get_all(self.db)

    def get_category(self, category_id: int) -> Category:
        category = self.category_repo.get_by_id(self.db, category_id)
        if not category:
            raise CategoryNotFoundException(category_id)
        return category

    def create_category(self, category_data: CategoryCreate) -> Category:
        """Create a new category (names are unique)"""
        name = category_data.name.strip()
        if not name:
            raise InvalidArgumentException("name", "must not be blank")
        if self.category_repo.get_by_name(self.db, name):
            raise InvalidArgumentException("name", f"category '{name}' already exists")

        category = Category(name=name, color=category_data.color)
        return self.category_repo.create(self.db, category)

    def count(self) -> int:
        return self.category_repo.count(self.db)
