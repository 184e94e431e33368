"""Starlette middleware for the bridge API."""

from bridge_api.middleware.correlation import CorrelationIdMiddleware
from bridge_api.middleware.origin import OriginGuardMiddleware, OriginPolicy
from bridge_api.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "OriginGuardMiddleware",
    "OriginPolicy",
    "SecurityHeadersMiddleware",
]
