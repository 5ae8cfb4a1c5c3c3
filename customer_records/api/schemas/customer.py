"""Customer request/response schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict

from customer_records.services.customer_validation import CustomerInput


class CustomerRequest(BaseModel):
    """Body of POST /customer and PUT /customer/{id}.

    Only JSON types are checked here; presence and length rules belong to
    the service validator so they are reported together per field.
    """

    id: uuid.UUID | None = None
    name: str | None = None
    document: str | None = None
    active: bool = False

    def to_input(self) -> CustomerInput:
        return CustomerInput(
            id=self.id,
            name=self.name,
            document=self.document,
            active=self.active,
        )


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    document: str
    active: bool
