from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mybank.core.exceptions import DatabaseError, MyBankError
from mybank.core.logging import LogContext, get_logger
from mybank.schemas.response import ErrorResponse

logger = get_logger(__name__)

GENERIC_MESSAGE = "An internal error occurred. Please try again later."


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(DatabaseError)
    async def database_exception_handler(request: Request, exc: DatabaseError):
        """
        Every data-layer failure becomes the same generic 500.
        """
        with LogContext(method=request.method, path=request.url.path):
            logger.error(f"Database failure: {exc.message}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=GENERIC_MESSAGE,
                code="INTERNAL_ERROR",
                details=None
            ).model_dump()
        )

    @app.exception_handler(MyBankError)
    async def mybank_exception_handler(request: Request, exc: MyBankError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.message,
                code=exc.code,
                details=exc.details
            ).model_dump()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code="HTTP_ERROR",
                details=None
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        with LogContext(method=request.method, path=request.url.path):
            logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

        settings = request.app.state.settings
        message = GENERIC_MESSAGE if settings.is_production else str(exc)

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=message,
                code="INTERNAL_ERROR",
                details=None
            ).model_dump()
        )
