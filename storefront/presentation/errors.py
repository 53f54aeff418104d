import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.domain.exceptions import DomainException, ErrorKind


logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def error_body(message: str, kind: str, errors: list[str] | None = None) -> dict:
    body = {"message": message, "type": kind}
    if errors:
        body["errors"] = errors
    return {"error": body}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path}: {exc.kind.value}: {exc.message}")
    return JSONResponse(
        status_code=STATUS_BY_KIND[exc.kind],
        content=error_body(exc.message, exc.kind.value)
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path}: неверное тело запроса: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request payload", ErrorKind.VALIDATION.value, errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Необработанная ошибка {request.method} {request.url.path}: {exc}", exc_info=exc)
    message = "Internal Server Error" if settings.is_production else str(exc) or "Internal Server Error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"message": message}}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
