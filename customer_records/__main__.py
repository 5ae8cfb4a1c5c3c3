"""Run the API with uvicorn: ``python -m customer_records``."""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "customer_records.api:create_app",
        factory=True,
        host=os.environ.get("CUSTOMER_RECORDS_HOST", "127.0.0.1"),
        port=int(os.environ.get("CUSTOMER_RECORDS_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
