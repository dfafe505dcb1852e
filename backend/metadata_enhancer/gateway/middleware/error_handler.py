"""
Error Handling Middleware

Centralized error handling and response formatting.
"""
import os
import traceback
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from fastapi import HTTPException, status
from ...core.logging_config import get_logger
from ...api.exceptions import handle_business_exception

logger = get_logger(__name__)


def _error_response(request: Request, status_code: int, detail, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": detail,
            "status_code": status_code,
            "path": request.url.path,
            "request_id": getattr(request.state, "request_id", None),
            **extra,
        },
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Converts exceptions escaping the routers into JSON error responses.
    
    Business exceptions map to their HTTP status through
    handle_business_exception; anything else becomes a 500 that carries
    the message and traceback outside production.
    """
    
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException as e:
            logger.debug(f"HTTP exception for {request.method} {request.url.path}: {e.status_code} - {e.detail}")
            return _error_response(request, e.status_code, e.detail)
        except Exception as e:
            http_exception = handle_business_exception(e)
            if http_exception.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
                logger.warning(
                    f"Business exception for {request.method} {request.url.path}: {http_exception.detail}"
                )
                return _error_response(request, http_exception.status_code, http_exception.detail)
            
            is_development = os.getenv("ENVIRONMENT", "development") != "production"
            logger.error(f"Error for {request.method} {request.url.path}: {e}", exc_info=True)
            
            detail = http_exception.detail if is_development else "Internal server error"
            error_traceback = traceback.format_exc() if is_development else None
            return _error_response(
                request, http_exception.status_code, detail, traceback=error_traceback
            )
