"""Custom exceptions for the storefront."""
from __future__ import annotations

from enum import Enum


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class ValidationCode(str, Enum):
    """Checkout validation failures, in the order they are checked."""

    NAME_TOO_SHORT = "name_too_short"
    PHONE_TOO_SHORT = "phone_too_short"
    ADDRESS_TOO_SHORT = "address_too_short"
    CART_EMPTY = "cart_empty"


class CheckoutValidationError(StorefrontException):
    """Customer input rejected before anything is sent to the API."""

    def __init__(self, code: ValidationCode, message: str) -> None:
        super().__init__(message)
        self.code = code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckoutValidationError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def __repr__(self) -> str:
        return f"CheckoutValidationError({self.code.name}, {self.message!r})"


class SubmitErrorKind(str, Enum):
    """Why an order could not be placed."""

    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    SERVER_REJECTED = "server_rejected"
    IN_PROGRESS = "in_progress"


class SubmitError(StorefrontException):
    """Order placement failed; the user may trigger submission again."""

    def __init__(self, kind: SubmitErrorKind, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status

    def __repr__(self) -> str:
        return f"SubmitError({self.kind.name}, {self.message!r}, status={self.status})"


class CatalogLoadError(StorefrontException):
    """Product list could not be fetched and no fresh cache exists."""

    pass
