# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.category import Category
from models.expense import Expense
from models.income import Income
from models.budget import Budget, BudgetCategoryLimit

__all__ = [
    "User",
    "Category",
    "Expense",
    "Income",
    "Budget",
    "BudgetCategoryLimit",
]
