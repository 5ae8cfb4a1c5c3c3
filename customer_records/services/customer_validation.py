"""Structural validation of customer payloads."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from customer_records.models.customer import DOCUMENT_MAX_LENGTH, NAME_MAX_LENGTH


@dataclass
class CustomerInput:
    """Customer fields as submitted by a caller, before validation."""

    id: uuid.UUID | None = None
    name: str | None = None
    document: str | None = None
    active: bool = False


class CustomerValidator:
    """Checks the invariants every stored customer must satisfy.

    Returns a mapping of field name to violated-rule messages; an empty
    mapping means the payload is valid.
    """

    def validate(
        self,
        payload: CustomerInput,
        *,
        expected_id: uuid.UUID | None = None,
    ) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}

        if expected_id is not None and payload.id is not None and payload.id != expected_id:
            errors.setdefault("id", []).append("id must match the customer being updated")

        self._check_text(errors, "name", payload.name, NAME_MAX_LENGTH)
        self._check_text(errors, "document", payload.document, DOCUMENT_MAX_LENGTH)
        return errors

    @staticmethod
    def _check_text(
        errors: dict[str, list[str]],
        field: str,
        value: str | None,
        max_length: int,
    ) -> None:
        if value is None or not value.strip():
            errors.setdefault(field, []).append(f"{field} is required")
            return
        if len(value) > max_length:
            errors.setdefault(field, []).append(
                f"{field} must be at most {max_length} characters"
            )
