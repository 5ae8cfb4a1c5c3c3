"""Authorization gate — operation requirements evaluated against claim sets.

Every customer operation has exactly one static requirement. Evaluation is a
pure function of the requirement and the caller's proven claims; ``None``
claims means the caller presented no valid identity at all.
"""

from __future__ import annotations

import enum
from collections.abc import Collection
from dataclasses import dataclass

DELETE_CUSTOMER_CLAIM = "DeleteCustomer"


class Operation(str, enum.Enum):
    LIST_CUSTOMERS = "list_customers"
    GET_CUSTOMER = "get_customer"
    CREATE_CUSTOMER = "create_customer"
    UPDATE_CUSTOMER = "update_customer"
    DELETE_CUSTOMER = "delete_customer"


# ---------------------------------------------------------------------------
# Requirements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Anonymous:
    """Anyone may call, with or without a credential."""


@dataclass(frozen=True)
class Authenticated:
    """Any valid proven identity."""


@dataclass(frozen=True)
class RequiresClaim:
    """A valid identity whose claim set contains ``claim``."""

    claim: str


Requirement = Anonymous | Authenticated | RequiresClaim

REQUIREMENTS: dict[Operation, Requirement] = {
    Operation.LIST_CUSTOMERS: Anonymous(),
    Operation.GET_CUSTOMER: Anonymous(),
    Operation.CREATE_CUSTOMER: Authenticated(),
    Operation.UPDATE_CUSTOMER: Authenticated(),
    Operation.DELETE_CUSTOMER: RequiresClaim(DELETE_CUSTOMER_CLAIM),
}


def requirement_for(operation: Operation) -> Requirement:
    return REQUIREMENTS[operation]


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


class DenyReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Decision:
    """Outcome of a gate evaluation. ``reason`` is set only on deny."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> Decision:
        return cls(allowed=False, reason=reason)


def evaluate(requirement: Requirement, claims: Collection[str] | None) -> Decision:
    """Decide whether *claims* satisfy *requirement*."""
    if isinstance(requirement, Anonymous):
        return Decision.allow()
    if claims is None:
        return Decision.deny(DenyReason.UNAUTHENTICATED)
    if isinstance(requirement, Authenticated):
        return Decision.allow()
    if isinstance(requirement, RequiresClaim):
        if requirement.claim in claims:
            return Decision.allow()
        return Decision.deny(DenyReason.FORBIDDEN)
    raise TypeError(f"unknown requirement: {requirement!r}")


def authorize(operation: Operation, claims: Collection[str] | None) -> Decision:
    """Shortcut: look up the requirement for *operation* and evaluate it."""
    return evaluate(requirement_for(operation), claims)
