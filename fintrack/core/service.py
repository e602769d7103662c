"""Minimal FastAPI service base shared by FinTrack services."""

import functools
import inspect
from contextlib import asynccontextmanager
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from urllib3.util.url import parse_url

from .exceptions import AuthError, FinTrackError, ServerError
from .logger import get_logger
from .types import Envelope, Scope


def current_user_id(request: Request) -> str:
    """FastAPI dependency returning the caller's user id, or raising AuthError when anonymous."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise AuthError("authentication required")
    return user_id


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=Envelope(success=False, error=message).model_dump(),
    )


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


class Service:
    """FastAPI application wrapper with endpoint registration, logging and envelope responses.

    Subclasses register handlers with ``add_endpoint``; handlers return plain data
    (models, lists, None) which is wrapped into ``{"success": true, "data": ...}``.
    Raised ``FinTrackError`` subclasses become ``{"success": false, "error": ...}``
    with the matching HTTP status.
    """

    def __init__(
        self,
        *,
        url: str = "http://localhost:8080",
        summary: str = "",
        description: str = "",
        name: str | None = None,
        log_dir: str | None = None,
        log_level: str = "INFO",
        log_json: bool = True,
    ):
        self.name = name or type(self).__name__
        self._url = parse_url(url)
        self._endpoints: List[str] = []

        self.logger = get_logger(
            self.name.lower(),
            use_structlog=True,
            structlog_json=log_json,
            log_dir=log_dir,
            stream_level=log_level,
            structlog_bind={"service": self.name},
        )

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self.startup()
            self.logger.info("Service started", url=str(self._url))
            try:
                yield
            finally:
                await self.shutdown_cleanup()
                self.logger.info("Service stopped")

        self.app = FastAPI(title=self.name, summary=summary, description=description, lifespan=lifespan)
        self._register_exception_handlers()

    @property
    def url(self):
        return self._url

    @property
    def endpoints(self) -> List[str]:
        return list(self._endpoints)

    # -------------------------------------------------------------------------
    # Endpoint registration
    # -------------------------------------------------------------------------

    def add_endpoint(
        self,
        path: str,
        func: Callable[..., Any],
        methods: list[str] | None = None,
        scope: Scope = Scope.PUBLIC,
        api_route_kwargs: Optional[dict] = None,
    ) -> None:
        """Register a handler at ``path``; AUTHENTICATED endpoints reject anonymous callers with 401."""
        methods = methods or ["POST"]
        api_route_kwargs = dict(api_route_kwargs or {})
        if scope == Scope.AUTHENTICATED:
            api_route_kwargs.setdefault("dependencies", []).append(Depends(current_user_id))

        self._endpoints.append(f"{','.join(methods)} {path}")
        self.app.add_api_route(
            path,
            endpoint=self._enveloped(func),
            methods=methods,
            response_model=Envelope,
            **api_route_kwargs,
        )

    @staticmethod
    def _enveloped(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            result = func(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return Envelope(success=True, data=jsonable_encoder(result))

        return wrapper

    # -------------------------------------------------------------------------
    # Error handling
    # -------------------------------------------------------------------------

    def _register_exception_handlers(self) -> None:
        @self.app.exception_handler(FinTrackError)
        async def _handle_fintrack_error(request: Request, exc: FinTrackError):
            if isinstance(exc, ServerError):
                self.logger.error("Server error", path=request.url.path, error=exc.message)
            else:
                self.logger.info(
                    "Request rejected",
                    path=request.url.path,
                    error_type=type(exc).__name__,
                    error=exc.message,
                )
            return _error_response(exc.status_code, exc.message)

        @self.app.exception_handler(RequestValidationError)
        async def _handle_request_validation(request: Request, exc: RequestValidationError):
            message = _format_validation_error(exc)
            self.logger.info("Request rejected", path=request.url.path, error_type="ValidationError", error=message)
            return _error_response(400, message)

        @self.app.exception_handler(PyMongoError)
        async def _handle_store_error(request: Request, exc: PyMongoError):
            self.logger.exception("Store failure", path=request.url.path)
            return _error_response(ServerError.status_code, ServerError.default_message)

        @self.app.exception_handler(Exception)
        async def _handle_unexpected(request: Request, exc: Exception):
            self.logger.exception("Unhandled error", path=request.url.path)
            return _error_response(ServerError.status_code, ServerError.default_message)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def startup(self) -> None:
        """Hook run before the first request is served."""
        pass

    async def shutdown_cleanup(self) -> None:
        """Hook run on shutdown."""
        pass

    @classmethod
    def launch(cls, url: str | None = None, **kwargs) -> None:
        """Create the service and serve it with uvicorn (blocking)."""
        service = cls(url=url, **kwargs)
        uvicorn.run(
            service.app,
            host=service.url.host or "localhost",
            port=service.url.port or 8080,
            log_level="warning",
        )
