from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.exceptions import (
    AppError,
    ConflictError,
    EmptySymbolError,
    NotFoundError,
    ResponseValidationError,
    SymbolRejectedError,
    UpstreamError,
)


def _error_response(status_code: int, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message, "severity": exc.severity},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(500, exc)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(404, exc)


async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return _error_response(409, exc)


async def unprocessable_symbol_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(422, exc)


async def bad_gateway_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(502, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(EmptySymbolError, unprocessable_symbol_handler)
    app.add_exception_handler(SymbolRejectedError, unprocessable_symbol_handler)
    app.add_exception_handler(UpstreamError, bad_gateway_handler)
    app.add_exception_handler(ResponseValidationError, bad_gateway_handler)
    app.add_exception_handler(AppError, app_error_handler)
