"""Request logging middleware."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .constants import REQUEST_ID_HEADER, UNLOGGED_PATHS


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one structured line per request with its status and duration.

    A request id is taken from the incoming X-Request-ID header (or generated),
    bound into the structlog context for the duration of the request and,
    optionally, echoed back on the response.
    """

    def __init__(
        self,
        app,
        service_name: str,
        logger,
        add_request_id_header: bool = True,
        ignored_paths=UNLOGGED_PATHS,
    ):
        super().__init__(app)
        self.service_name = service_name
        self.logger = logger
        self.add_request_id_header = add_request_id_header
        self.ignored_paths = set(ignored_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        path = request.url.path

        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(
                "Request failed",
                service=self.service_name,
                method=request.method,
                path=path,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        if path not in self.ignored_paths:
            self.logger.info(
                "Request handled",
                service=self.service_name,
                request_id=request_id,
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )

        if self.add_request_id_header:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response
