"""Service layer — business logic orchestration."""


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found (-> HTTP 404)."""


class ConflictError(ServiceError):
    """Business rule conflict (-> HTTP 409)."""


class ValidationError(ServiceError):
    """Input validation error (-> HTTP 400)."""


class CustomerValidationError(ValidationError):
    """Structural rule violations on a customer payload (-> HTTP 400).

    ``errors`` maps each offending field to the messages of the rules it broke.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__("validation failed")
        self.errors = errors


class InvalidInputError(ServiceError):
    """Malformed identifier or argument (-> HTTP 400)."""


class PersistenceError(ServiceError):
    """The store accepted the call but affected no rows (-> HTTP 400)."""


class AuthenticationError(ServiceError):
    """Authentication failure (-> HTTP 401)."""


class ForbiddenError(ServiceError):
    """Authenticated caller lacks a required claim (-> HTTP 403)."""
