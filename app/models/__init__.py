from app.models.user import User
from app.models.person import Person
from app.models.project import Project
from app.models.catalog import Item, Unit
from app.models.debt import Debt, DebtLine
from app.models.transaction import Transaction
from app.models.allocation import Allocation
from app.models.document import DebtDocument, TransactionDocument

__all__ = [
    "User",
    "Person",
    "Project",
    "Item",
    "Unit",
    "Debt",
    "DebtLine",
    "Transaction",
    "Allocation",
    "DebtDocument",
    "TransactionDocument",
]
