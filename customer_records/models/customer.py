"""customers table."""

import uuid

from sqlalchemy import Boolean, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from customer_records.core.database import Base

NAME_MAX_LENGTH = 200
DOCUMENT_MAX_LENGTH = 14


class Customer(Base):
    __tablename__ = "customers"

    # Caller-supplied (or generated by the service); no server default.
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    document: Mapped[str] = mapped_column(String(DOCUMENT_MAX_LENGTH), nullable=False)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )

    def __repr__(self) -> str:
        return f"Customer(id={self.id!s}, name={self.name!r})"
