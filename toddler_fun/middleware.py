# toddler_fun/middleware.py
import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from toddler_fun.config import Settings

logger = logging.getLogger(__name__)

GATED_PATH = "/activities"
GATED_METHODS = {"POST", "PUT", "DELETE"}


class WriteGateMiddleware(BaseHTTPMiddleware):
    """Reject catalog edits in production unless ALLOW_PRODUCTION_WRITES is set.

    Only the /activities collection is gated. POST /activities/{id}/completions
    stays open so activities can be marked done in production, even though a
    PUT with completionCount on the same column is blocked.
    """

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    def is_blocked(self, method: str, path: str) -> bool:
        if path.rstrip("/") != GATED_PATH or method.upper() not in GATED_METHODS:
            return False
        return not self.settings.writes_enabled

    async def dispatch(self, request, call_next):
        if self.is_blocked(request.method, request.url.path):
            logger.warning(
                f"Blocked {request.method} {request.url.path} "
                f"(environment={self.settings.environment}, writes not allowed)"
            )
            return JSONResponse(
                status_code=403,
                content={
                    "error": "Writing activities is only allowed in development mode",
                    "hint": "Set ALLOW_PRODUCTION_WRITES=true in your environment to enable writes in production.",
                },
            )
        return await call_next(request)
