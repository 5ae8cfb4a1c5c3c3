"""Seed customers from a JSON file into the database.

The file holds a list of objects shaped like the API body
(``id``, ``name``, ``document``, ``active``). Every entry goes through
CustomerService, so invalid entries are reported and skipped and ids that
already exist are left untouched.

Usage::

    python scripts/seed_customers.py customers.json
"""

import asyncio
import json
import os
import sys
import uuid
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

load_dotenv(ROOT / ".env")

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from customer_records.core.database import Base
from customer_records.core.logging import setup_logging
from customer_records.dao.customer_dao import CustomerDAO
from customer_records.services import CustomerValidationError, PersistenceError
from customer_records.services.customer_service import CustomerService
from customer_records.services.customer_validation import CustomerInput, CustomerValidator

log = structlog.get_logger("seed_customers")


def _load(path: Path) -> list[CustomerInput]:
    entries = json.loads(path.read_text())
    return [
        CustomerInput(
            id=uuid.UUID(e["id"]) if e.get("id") else None,
            name=e.get("name"),
            document=e.get("document"),
            active=bool(e.get("active", False)),
        )
        for e in entries
    ]


async def main(path: Path) -> int:
    url = os.environ.get(
        "CUSTOMER_RECORDS_DATABASE_URL", "postgresql+asyncpg://localhost/customer_records"
    )
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    service = CustomerService(CustomerDAO(), CustomerValidator())
    factory = async_sessionmaker(engine, expire_on_commit=False)

    created = 0
    for payload in _load(path):
        async with factory() as session:
            async with session.begin():
                try:
                    customer = await service.create(session, payload)
                except CustomerValidationError as exc:
                    log.warning("seed.invalid", name=payload.name, errors=exc.errors)
                    continue
                except PersistenceError:
                    log.info("seed.exists", customer_id=str(payload.id))
                    continue
        created += 1
        log.info("seed.created", customer_id=str(customer.id))

    await engine.dispose()
    log.info("seed.done", created=created)
    return created


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(f"usage: {sys.argv[0]} <customers.json>", file=sys.stderr)
        sys.exit(2)
    setup_logging()
    asyncio.run(main(Path(sys.argv[1])))
