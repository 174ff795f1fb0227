"""
Error handling middleware for vidproxy.

Catches anything the route handlers did not turn into a response and
answers with a uniform JSON body. Stack traces are only included when the
application runs in development mode.
"""

import time
import logging
import traceback
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.exceptions import VidProxyException
from app.models.response import ClientErrorResponse


logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling application errors with consistent formatting.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next) -> Response:
        """
        Process request and handle any errors that occur.

        Args:
            request: FastAPI request object
            call_next: Next middleware/endpoint in the chain

        Returns:
            Response object with error handling applied
        """
        start_time = time.time()

        try:
            return await call_next(request)

        except VidProxyException as e:
            return self._handle_vidproxy_exception(request, e, start_time)

        except Exception as e:
            return self._handle_unexpected_exception(request, e, start_time)

    def _handle_vidproxy_exception(
        self,
        request: Request,
        exc: VidProxyException,
        start_time: float
    ) -> JSONResponse:
        """Handle taxonomy exceptions that escaped a route."""
        response_time = (time.time() - start_time) * 1000

        log_data = {
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "response_time_ms": round(response_time, 2),
        }
        if exc.status_code >= 500:
            logger.error(f"Request failed: {exc.message}", extra=log_data)
        else:
            logger.warning(f"Request failed: {exc.message}", extra=log_data)

        return JSONResponse(
            status_code=exc.status_code,
            content=self._body(exc.message, exc),
        )

    def _handle_unexpected_exception(
        self,
        request: Request,
        exc: Exception,
        start_time: float
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        response_time = (time.time() - start_time) * 1000

        logger.error(
            f"Unexpected error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
            extra={"response_time_ms": round(response_time, 2)},
        )

        return JSONResponse(
            status_code=500,
            content=self._body(str(exc), exc),
        )

    def _body(self, message: str, exc: Exception) -> dict:
        stack = None
        if self.debug:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return ClientErrorResponse(message=message, stack=stack).model_dump(exclude_none=True)
