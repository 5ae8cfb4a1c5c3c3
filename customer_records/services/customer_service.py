"""CustomerService — list, read, create, replace and delete customers.

Authorization happens before any method here is called. Each mutating call
makes exactly one pass through existence check, validation and persistence,
in that order where they apply; nothing is retried.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from customer_records.dao.customer_dao import CustomerDAO
from customer_records.models.customer import Customer
from customer_records.services import (
    CustomerValidationError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
)
from customer_records.services.customer_validation import CustomerInput, CustomerValidator

log = structlog.get_logger(__name__)

_SAVE_FAILED = "an error occurred while saving the record"


def parse_customer_id(raw_id: str | uuid.UUID) -> uuid.UUID:
    """Parse a route identifier. Raises :class:`InvalidInputError` if malformed."""
    if isinstance(raw_id, uuid.UUID):
        return raw_id
    try:
        return uuid.UUID(raw_id)
    except (ValueError, AttributeError, TypeError):
        raise InvalidInputError(f"invalid customer id: {raw_id!r}")


class CustomerService:
    """Stateless service orchestrating validation and store calls."""

    def __init__(self, customer_dao: CustomerDAO, validator: CustomerValidator) -> None:
        self._customer_dao = customer_dao
        self._validator = validator

    async def list(self, session: AsyncSession) -> list[Customer]:
        return await self._customer_dao.list_all(session)

    async def get(self, session: AsyncSession, raw_id: str | uuid.UUID) -> Customer:
        """Return one customer.

        Raises :class:`InvalidInputError` for a malformed id and
        :class:`NotFoundError` if no customer has it.
        """
        customer_id = parse_customer_id(raw_id)
        customer = await self._customer_dao.find_by_id(session, customer_id)
        if customer is None:
            raise NotFoundError("customer not found")
        return customer

    async def create(self, session: AsyncSession, payload: CustomerInput) -> Customer:
        """Validate and insert a new customer.

        Validation runs before the store is touched; an invalid payload never
        reaches it. A missing id is generated here.
        """
        errors = self._validator.validate(payload)
        if errors:
            log.info("customer.create_rejected", fields=sorted(errors))
            raise CustomerValidationError(errors)

        customer = Customer(
            id=payload.id or uuid.uuid4(),
            name=payload.name,
            document=payload.document,
            active=payload.active,
        )
        affected = await self._customer_dao.insert(session, customer)
        if affected < 1:
            log.warning("customer.create_no_rows", customer_id=str(customer.id))
            raise PersistenceError(_SAVE_FAILED)

        log.info("customer.created", customer_id=str(customer.id))
        return customer

    async def update(
        self,
        session: AsyncSession,
        raw_id: str | uuid.UUID,
        payload: CustomerInput,
    ) -> None:
        """Replace an existing customer with *payload*.

        The existence check comes first, so an unknown id reports
        :class:`NotFoundError` even when the payload is also invalid.
        """
        customer_id = parse_customer_id(raw_id)
        existing = await self._customer_dao.find_by_id(session, customer_id)
        if existing is None:
            raise NotFoundError("customer not found")

        errors = self._validator.validate(payload, expected_id=customer_id)
        if errors:
            log.info(
                "customer.update_rejected",
                customer_id=str(customer_id),
                fields=sorted(errors),
            )
            raise CustomerValidationError(errors)

        replacement = Customer(
            id=customer_id,
            name=payload.name,
            document=payload.document,
            active=payload.active,
        )
        affected = await self._customer_dao.replace(session, replacement)
        if affected < 1:
            log.warning("customer.update_no_rows", customer_id=str(customer_id))
            raise PersistenceError(_SAVE_FAILED)

        log.info("customer.updated", customer_id=str(customer_id))

    async def delete(self, session: AsyncSession, raw_id: str | uuid.UUID) -> None:
        customer_id = parse_customer_id(raw_id)
        existing = await self._customer_dao.find_by_id(session, customer_id)
        if existing is None:
            raise NotFoundError("customer not found")

        affected = await self._customer_dao.delete(session, existing)
        if affected < 1:
            log.warning("customer.delete_no_rows", customer_id=str(customer_id))
            raise PersistenceError(_SAVE_FAILED)

        log.info("customer.deleted", customer_id=str(customer_id))
