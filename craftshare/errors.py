"""Error taxonomy for CraftShare core operations.

Every ledger and rollup failure is raised as a ``CraftShareError`` subclass
carrying a stable ``kind`` so the request layer can map it to a response
category without inspecting messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Stable error categories exposed to API consumers."""

    NOT_FOUND = "not_found"
    INVALID_QUANTITY = "invalid_quantity"
    INSUFFICIENT_STOCK = "insufficient_stock"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class CraftShareError(Exception):
    """Base class for errors surfaced by the core."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind.value, "message": self.message}


class NotFoundError(CraftShareError):
    """Referenced project, resource, binding or task does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidQuantityError(CraftShareError):
    """Requested quantity is non-positive or out of range."""

    kind = ErrorKind.INVALID_QUANTITY


class InsufficientStockError(CraftShareError):
    """Requested quantity exceeds the owner's uncommitted stock."""

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, message: str, requested: int | None = None, available: int | None = None):
        super().__init__(message)
        self.requested = requested
        self.available = available


class ConflictError(CraftShareError):
    """Uniqueness violation (duplicate binding, duplicate project title)."""

    kind = ErrorKind.CONFLICT


class InternalError(CraftShareError):
    """Persistence or unexpected failure."""

    kind = ErrorKind.INTERNAL
