# ===== slotwise/api/middleware/rate_limit_middleware.py =====
import logging
import math
import time
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence

from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from slotwise.config.settings import Settings, get_settings
from slotwise.services.rate_limit.rate_limit_store import RateLimitStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    name: str
    path_prefix: str
    max_requests: int
    window_seconds: int
    methods: Optional[FrozenSet[str]] = None  # None = every method

    def matches(self, method: str, path: str) -> bool:
        if self.methods is not None and method not in self.methods:
            return False
        return path.startswith(self.path_prefix)


def default_rules(settings: Optional[Settings] = None) -> Sequence[RateLimitRule]:
    """Presets ordered most specific first; the first matching rule applies"""
    settings = settings or get_settings()

    auth = (settings.RATE_LIMIT_AUTH_MAX_REQUESTS, settings.RATE_LIMIT_AUTH_WINDOW_SECONDS)
    api = (settings.RATE_LIMIT_API_MAX_REQUESTS, settings.RATE_LIMIT_API_WINDOW_SECONDS)
    public = (settings.RATE_LIMIT_PUBLIC_MAX_REQUESTS, settings.RATE_LIMIT_PUBLIC_WINDOW_SECONDS)
    post = frozenset({"POST"})

    return (
        RateLimitRule("auth", "/api/v1/auth/login", *auth, methods=post),
        RateLimitRule("auth", "/api/v1/auth/register", *auth, methods=post),
        RateLimitRule("auth", "/api/v1/auth/forgot-password", *auth, methods=post),
        RateLimitRule("auth", "/api/v1/auth/reset-password", *auth, methods=post),
        RateLimitRule("api", "/api/v1/public/bookings", *api, methods=post),
        RateLimitRule("public", "/api/v1/public", *public),
        RateLimitRule("api", "/api/v1/", *api),
    )


def client_identifier(request: Request, user_id: Optional[str] = None) -> str:
    if user_id:
        return f"user:{user_id}"

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")

    return f"ip:{ip}"


def _token_subject(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window rate limiting per client and rule.

    The store is passed in by the application factory, so tests and
    multi-process deployments choose its backing (memory or Redis).
    """

    def __init__(self, app, store: RateLimitStore, rules: Optional[Sequence[RateLimitRule]] = None):
        super().__init__(app)
        self.store = store
        self.rules = tuple(rules) if rules is not None else tuple(default_rules())

    def _rule_for(self, request: Request) -> Optional[RateLimitRule]:
        for rule in self.rules:
            if rule.matches(request.method, request.url.path):
                return rule
        return None

    async def dispatch(self, request: Request, call_next):
        rule = self._rule_for(request)
        if rule is None:
            return await call_next(request)

        identifier = client_identifier(request, _token_subject(request))
        result = await self.store.hit(f"{rule.name}:{identifier}", rule.max_requests, rule.window_seconds)
        reset_header = str(math.ceil(result.reset_at))

        if result.limited:
            retry_after = max(1, math.ceil(result.reset_at - time.time()))
            logger.warning(f"Rate limit exceeded for {identifier} on {rule.name} ({request.url.path})")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(rule.max_requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset_header,
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rule.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = reset_header
        return response
