import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and processing time."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Error processing {request.method} {request.url.path}",
                exc_info=True
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"status={response.status_code} time={process_time:.4f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
