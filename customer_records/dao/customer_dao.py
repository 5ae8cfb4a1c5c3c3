"""CustomerDAO — customers table operations.

Mutations are issued as Core statements so the caller sees the number of
rows the database reports as affected. Zero rows is a normal return value;
driver and connectivity errors are left to propagate.
"""

import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from customer_records.dao.base import BaseDAO
from customer_records.models.customer import Customer


class CustomerDAO(BaseDAO[Customer]):
    model = Customer

    async def find_by_id(self, session: AsyncSession, customer_id: uuid.UUID) -> Customer | None:
        """Point lookup returning a detached snapshot.

        The row is read from the database and expunged, so later writes in
        the same session neither see nor modify the returned object.
        """
        self._require_pk(customer_id)
        stmt = (
            select(Customer)
            .where(Customer.id == customer_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        customer = result.scalars().first()
        if customer is not None:
            session.expunge(customer)
        return customer

    async def list_all(self, session: AsyncSession) -> list[Customer]:
        """Return every stored customer, in whatever order the database yields."""
        result = await session.execute(select(Customer))
        return list(result.scalars().all())

    async def insert(self, session: AsyncSession, customer: Customer) -> int:
        """Insert *customer*; an existing id is skipped and reports 0 rows."""
        stmt = (
            insert(Customer)
            .values(
                id=customer.id,
                name=customer.name,
                document=customer.document,
                active=customer.active,
            )
            .on_conflict_do_nothing(index_elements=["id"])
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def replace(self, session: AsyncSession, customer: Customer) -> int:
        """Overwrite every mutable column of the row with ``customer.id``."""
        self._require_pk(customer.id)
        stmt = (
            update(Customer)
            .where(Customer.id == customer.id)
            .values(
                name=customer.name,
                document=customer.document,
                active=customer.active,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def delete(self, session: AsyncSession, customer: Customer) -> int:
        self._require_pk(customer.id)
        stmt = (
            delete(Customer)
            .where(Customer.id == customer.id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount
