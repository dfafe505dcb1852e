"""
Request ID Middleware

Adds a unique request ID to each request for tracing and debugging.
"""
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an ID.
    
    An incoming X-Request-ID (from an upstream proxy) is reused; otherwise
    a UUID4 is generated. The ID is stored in request.state.request_id and
    echoed back in the response header.
    """
    
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        
        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
