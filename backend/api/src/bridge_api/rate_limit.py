"""Per-app rate limiting on top of a SlowAPI Limiter.

Each app built by ``create_app`` gets its own Limiter (in-memory counters,
enabled flag from Settings), stored on ``app.state.limiter``. The middleware
charges every guarded request to the read limit, including pre-flights and
requests the origin guard rejects; the mutating routes are additionally
charged to the write limit. A request refused by the read limit is not
charged to the write limit. The webhook path is exempt since Stripe owns its
delivery rate.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from bridge_api.exceptions import error_response
from bridge_shared.config import Settings
from bridge_shared.models.errors import BridgeError, ErrorCode

logger = logging.getLogger(__name__)

READ_RATE_LIMIT = "180 per 15 minutes"
WRITE_RATE_LIMIT = "40 per 15 minutes"

WRITE_PATHS = frozenset({"/create-customer", "/create-setup-intent"})


@dataclass(frozen=True)
class RateLimitRule:
    """A limit applied to requests matching ``methods`` and ``paths``.

    ``None`` for either matcher means "any".
    """

    name: str
    limit: RateLimitItem
    methods: frozenset[str] | None = None
    paths: frozenset[str] | None = None

    def applies_to(self, request: Request) -> bool:
        if self.methods is not None and request.method not in self.methods:
            return False
        return self.paths is None or request.url.path in self.paths


def default_rules() -> list[RateLimitRule]:
    return [
        RateLimitRule("read", parse(READ_RATE_LIMIT)),
        RateLimitRule("write", parse(WRITE_RATE_LIMIT), frozenset({"POST"}), WRITE_PATHS),
    ]


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        storage_uri="memory://",
        enabled=settings.rate_limit_enabled,
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies ``rules`` in order; the first exhausted rule answers 429."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: Limiter,
        *,
        rules: Iterable[RateLimitRule] | None = None,
        key_func: Callable[[Request], str] = get_remote_address,
        exempt_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self._limiter = limiter
        self._rules = list(default_rules() if rules is None else rules)
        self._key_func = key_func
        self._exempt_paths = frozenset(exempt_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self._limiter.enabled or request.url.path in self._exempt_paths:
            return await call_next(request)

        key = self._key_func(request)
        for rule in self._rules:
            if not rule.applies_to(request):
                continue
            if not self._limiter.limiter.hit(rule.limit, rule.name, key):
                logger.warning(
                    "Rate limit %s (%s) exceeded by %s on %s",
                    rule.name,
                    rule.limit,
                    key,
                    request.url.path,
                )
                return error_response(BridgeError(ErrorCode.RATE_LIMITED), strict=True)

        return await call_next(request)
