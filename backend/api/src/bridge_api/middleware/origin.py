"""Origin allow-list guard with CORS response headers.

Browser requests carrying an Origin header are checked against the configured
allow-list. Requests without an Origin (same-origin or server-to-server) pass
through untouched. Accepted origins are echoed back with fixed CORS headers and
pre-flight requests are answered here without reaching the routes.
"""

import logging
from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.status import HTTP_204_NO_CONTENT
from starlette.types import ASGIApp

from bridge_api.exceptions import error_response
from bridge_shared.models.errors import BridgeError, ErrorCode

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET,POST,OPTIONS"
ALLOWED_HEADERS = "Content-Type,Idempotency-Key,X-Idempotency-Key"


class OriginPolicy:
    """Allow-list check for the Origin header.

    An empty allow-list accepts every origin. Strict mode forbids an empty
    list at startup (see Settings), so this only happens in development.
    """

    def __init__(self, allowed_origins: Iterable[str]) -> None:
        self._allowed = frozenset(allowed_origins)

    @property
    def allowed_origins(self) -> frozenset[str]:
        return self._allowed

    def is_allowed(self, origin: str) -> bool:
        return not self._allowed or origin in self._allowed

    def cors_headers(self, origin: str) -> dict[str, str]:
        """Check an origin and build the CORS headers to send back.

        Args:
            origin: Value of the request's Origin header

        Returns:
            Headers echoing the origin with the allowed methods and headers

        Raises:
            BridgeError: ORIGIN_REJECTED if the origin is not allowed
        """
        if not self.is_allowed(origin):
            raise BridgeError(ErrorCode.ORIGIN_REJECTED)
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        }


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Applies OriginPolicy to every path except ``exempt_paths``."""

    def __init__(
        self,
        app: ASGIApp,
        policy: OriginPolicy,
        *,
        strict: bool,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self._policy = policy
        self._strict = strict
        self._exempt_paths = frozenset(exempt_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        origin = request.headers.get("origin")
        if not origin:
            return await call_next(request)

        try:
            cors_headers = self._policy.cors_headers(origin)
        except BridgeError as exc:
            logger.warning("Rejected origin %s on %s", origin, request.url.path)
            return error_response(exc, strict=self._strict)

        if request.method == "OPTIONS":
            preflight = Response(status_code=HTTP_204_NO_CONTENT, headers=cors_headers)
            preflight.headers.add_vary_header("Origin")
            return preflight

        response = await call_next(request)
        response.headers.update(cors_headers)
        response.headers.add_vary_header("Origin")
        return response
