"""SQLAlchemy ORM models — one file per table."""

from customer_records.models.customer import Customer
from customer_records.models.user import User

__all__ = [
    "Customer",
    "User",
]
