# app/core/exceptions.py

from decimal import Decimal
from typing import Optional


class DomainError(Exception):
    """Error de negocio recuperable: se devuelve al cliente con su código."""

    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class InvalidAmount(DomainError):
    code = "INVALID_AMOUNT"


class InvalidRequest(DomainError):
    code = "INVALID_REQUEST"


class AllocationNotAllowed(DomainError):
    code = "ALLOCATION_NOT_ALLOWED"


class DuplicateAllocation(DomainError):
    code = "DUPLICATE_ALLOCATION"
    status_code = 409


class DuplicateCode(DomainError):
    code = "DUPLICATE_CODE"
    status_code = 409


class OverAllocation(DomainError):
    code = "OVER_ALLOCATION"

    def __init__(self, side: str, remaining: Decimal, message: Optional[str] = None):
        self.side = side  # "debt" o "transaction"
        self.remaining = remaining
        super().__init__(
            message or f"El monto cubierto excede el saldo pendiente de la {'deuda' if side == 'debt' else 'transacción'}. Pendiente: {remaining}"
        )


class NotOwned(DomainError):
    code = "NOT_OWNED"


class HasAttachments(DomainError):
    code = "HAS_ATTACHMENTS"


class AllocationExists(DomainError):
    code = "ALLOCATION_EXISTS"


class ConflictingDuplicate(DomainError):
    code = "CONFLICTING_DUPLICATE"
    status_code = 409
