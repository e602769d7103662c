"""Identity middleware for FinTrack."""

from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .security import InvalidToken, decode_token


class IdentityMiddleware(BaseHTTPMiddleware):
    """
    Middleware that resolves the bearer token, if any, into a user identity.

    - No Authorization header: the request proceeds anonymously.
    - Valid token: ``request.state.user_id`` and ``request.state.identity`` are set.
    - Invalid or expired token: the request proceeds anonymously and the failure reason is logged.

    It never rejects a request; endpoints registered with ``Scope.AUTHENTICATED``
    do that when no identity is attached.
    """

    def __init__(self, app, logger=None):
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.user_id = None
        request.state.identity = None

        token = self._extract_token(request.headers.get("Authorization"))
        if token is not None:
            result = decode_token(token)
            if isinstance(result, InvalidToken):
                if self.logger is not None:
                    self.logger.info(
                        "Ignoring invalid bearer token",
                        reason=result.reason.value,
                        path=request.url.path,
                    )
            else:
                request.state.user_id = result.sub
                request.state.identity = result

        return await call_next(request)

    @staticmethod
    def _extract_token(auth_header: Optional[str]) -> Optional[str]:
        """Return the token from a ``Bearer <token>`` header, or None."""
        if not auth_header:
            return None
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None
        return parts[1]
