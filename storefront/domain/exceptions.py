from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    BAD_REQUEST = "BadRequestError"
    AUTHENTICATION = "AuthenticationError"
    NOT_FOUND = "NotFoundError"


class DomainException(Exception):
    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DomainException):
    kind = ErrorKind.VALIDATION


class BadRequestError(DomainException):
    kind = ErrorKind.BAD_REQUEST


class AuthenticationError(DomainException):
    kind = ErrorKind.AUTHENTICATION


class NotFoundError(DomainException):
    kind = ErrorKind.NOT_FOUND


class InsufficientStockError(BadRequestError):
    def __init__(self, product_name: str, available: int, required: int):
        self.product_name = product_name
        self.available = available
        self.required = required
        super().__init__(f"Insufficient stock for product: {product_name}")


class OrderNotFoundError(NotFoundError):
    def __init__(self, message: str = "Order not found"):
        super().__init__(message)
