from fastapi import Request
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger("api")


class DashboardException(Exception):
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidRequestException(DashboardException):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class AuthenticationFailedException(DashboardException):
    def __init__(self, message: str):
        super().__init__(message, status_code=401)


class AccountNotFoundException(DashboardException):
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


async def dashboard_exception_handler(request: Request, exc: DashboardException):
    logger.warning(
        "Request rejected",
        error=exc.message,
        status_code=exc.status_code,
        path=request.url.path
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message}
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )
