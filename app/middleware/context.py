# app/middleware/context.py
"""
Middleware binding per-request context.

Puts the application's cache manager into ``cache_manager_ctx`` so the
caching decorators can reach it without a ``Request`` parameter, and binds a
request id to the structured logging context.
"""

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.context import cache_manager_ctx
from app.managers.cache_manager import CacheManager
from app.monitoring import bind_request_id, clear_context

REQUEST_ID_HEADER = "X-Request-ID"


class ContextMiddleware(BaseHTTPMiddleware):
    """
    Set context variables for the request lifecycle.

    Both the cache manager binding and the logging context are reset after
    the response, even when the handler raises.

    Examples
    --------
    >>> app.add_middleware(ContextMiddleware)
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Bind context and process request.

        Parameters
        ----------
        request : Request
            The incoming HTTP request.
        call_next : RequestResponseEndpoint
            The next middleware/endpoint in the chain.

        Returns
        -------
        Response
            The downstream response, tagged with its request id.
        """
        cache_manager: CacheManager | None = getattr(request.app.state, "cache_manager", None)
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex

        token = cache_manager_ctx.set(cache_manager)
        bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            cache_manager_ctx.reset(token)
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
