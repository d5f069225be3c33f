import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logging.basicConfig(level=settings.LOG_LEVEL.upper())

logger = logging.getLogger("subscriptions-api")

REQUEST_ID_HEADER = "X-Request-ID"

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"Request: {request_id} | "
            f"Method: {request.method} | "
            f"Path: {request.url.path} | "
            f"Query: {request.url.query} | "
            f"Status: {response.status_code} | "
            f"Process Time: {process_time:.4f}s"
        )

        return response
