"""Customers router.

Each endpoint declares its gate first so a denied caller never opens a
session or reaches the service.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from customer_records.api.deps import get_customer_service, get_session, require
from customer_records.api.schemas.customer import CustomerRequest, CustomerResponse
from customer_records.services.auth_service import Identity
from customer_records.services.authorization import Operation
from customer_records.services.customer_service import CustomerService

router = APIRouter()


@router.get("/customers", response_model=list[CustomerResponse], name="get_customers")
async def list_customers(
    _identity: Identity | None = Depends(require(Operation.LIST_CUSTOMERS)),
    session: AsyncSession = Depends(get_session),
    svc: CustomerService = Depends(get_customer_service),
) -> list[CustomerResponse]:
    customers = await svc.list(session)
    return [CustomerResponse.model_validate(c) for c in customers]


@router.get("/customer/{customer_id}", response_model=CustomerResponse, name="get_customer_by_id")
async def get_customer(
    customer_id: str,
    _identity: Identity | None = Depends(require(Operation.GET_CUSTOMER)),
    session: AsyncSession = Depends(get_session),
    svc: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    customer = await svc.get(session, customer_id)
    return CustomerResponse.model_validate(customer)


@router.post(
    "/customer",
    response_model=CustomerResponse,
    status_code=201,
    name="post_customer",
)
async def create_customer(
    body: CustomerRequest,
    request: Request,
    response: Response,
    _identity: Identity | None = Depends(require(Operation.CREATE_CUSTOMER)),
    session: AsyncSession = Depends(get_session),
    svc: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    customer = await svc.create(session, body.to_input())
    response.headers["Location"] = str(
        request.url_for("get_customer_by_id", customer_id=str(customer.id))
    )
    return CustomerResponse.model_validate(customer)


@router.put("/customer/{customer_id}", status_code=204, name="put_customer")
async def update_customer(
    customer_id: str,
    body: CustomerRequest,
    _identity: Identity | None = Depends(require(Operation.UPDATE_CUSTOMER)),
    session: AsyncSession = Depends(get_session),
    svc: CustomerService = Depends(get_customer_service),
) -> Response:
    await svc.update(session, customer_id, body.to_input())
    return Response(status_code=204)


@router.delete("/customer/{customer_id}", status_code=204, name="delete_customer")
async def delete_customer(
    customer_id: str,
    _identity: Identity | None = Depends(require(Operation.DELETE_CUSTOMER)),
    session: AsyncSession = Depends(get_session),
    svc: CustomerService = Depends(get_customer_service),
) -> Response:
    await svc.delete(session, customer_id)
    return Response(status_code=204)
