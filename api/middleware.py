"""Request-scoped middleware for API requests."""

from uuid import UUID, uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from api.base import ErrorCodes
from api.errors import error_json
from utils.request_context import RequestContext, set_current_context, clear_current_context


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Sets the request context from the identity headers of the gateway.

    Authentication happens upstream; the gateway forwards who is acting as
    X-Tenant-Id, X-Company-Id and X-User-Id. Requests without all three
    (outside PUBLIC_PATHS) are refused. The context is cleared after the
    request completes.
    """

    PUBLIC_PATHS = [
        "/health",
        "/docs",
        "/openapi.json",
    ]

    HEADERS = {
        "tenant_id": "X-Tenant-Id",
        "company_id": "X-Company-Id",
        "user_id": "X-User-Id",
    }

    def _is_public_path(self, path: str) -> bool:
        return any(path == p or path.startswith(p) for p in self.PUBLIC_PATHS)

    async def dispatch(self, request: Request, call_next):
        if self._is_public_path(request.url.path):
            return await call_next(request)

        try:
            ids = {field: UUID(request.headers[header]) for field, header in self.HEADERS.items()}
        except (KeyError, ValueError):
            return error_json(
                ErrorCodes.MISSING_CONTEXT,
                f"Headers {', '.join(self.HEADERS.values())} with valid UUIDs are required",
            )

        ctx = RequestContext(**ids)
        set_current_context(ctx)
        request.state.context = ctx

        try:
            return await call_next(request)
        finally:
            clear_current_context()
