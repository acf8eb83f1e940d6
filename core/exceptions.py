from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from utils.logger import get_logger
from utils.log_shipper import log_shipper

logger = get_logger("Global_Exception")

class AppException(HTTPException):
    def __init__(self, status_code: int, detail: str, extra: dict | None = None):
        super().__init__(status_code=status_code, detail=detail)
        self.extra = extra or {}

class ValidationError(AppException):
    def __init__(self, detail: str = "invalid request"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)

class Unauthorized(AppException):
    def __init__(self, detail: str = "unauthorized"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)

class Forbidden(AppException):
    def __init__(self, detail: str = "forbidden"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)

class NotFound(AppException):
    def __init__(self, detail: str = "not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)

class Conflict(AppException):
    def __init__(self, detail: str = "conflict"):
        super().__init__(status.HTTP_409_CONFLICT, detail)

class UpstreamFailure(AppException):
    """The pizza factory rejected or could not take the order."""
    def __init__(self, detail: str, report_url: str | None = None):
        super().__init__(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail,
            extra={"followLinkToEndChaos": report_url}
        )

async def http_exception_handler(request: Request, exc: HTTPException):
    body = {"message": exc.detail}
    body.update(getattr(exc, "extra", {}))
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", []) if p != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    message = "; ".join(problems) or "invalid request"
    logger.warning(f"Validation failed on {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})

async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path}
    )
    log_shipper.log_error(exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"}
    )
