"""Request monitoring middleware for correlation ids and timing logs."""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from tradelog.monitoring.logger import get_performance_logger


class RequestMonitoringMiddleware(BaseHTTPMiddleware):
    """Stamp every request with an id and log how long it took."""

    def __init__(self, app, enable_detailed_logging: bool = False):
        super().__init__(app)
        self.enable_detailed_logging = enable_detailed_logging
        self.performance_logger = get_performance_logger()

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = self._get_client_ip(request)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            self.performance_logger.log_request(
                method=request.method,
                path=request.url.path,
                status_code=500,
                duration=time.perf_counter() - start_time,
                request_id=request_id,
                ip_address=client_ip,
                error=str(e)
            )
            raise

        duration = time.perf_counter() - start_time
        extra = {}
        if self.enable_detailed_logging:
            extra["user_agent"] = request.headers.get("User-Agent", "")
            extra["response_size"] = response.headers.get("content-length")

        self.performance_logger.log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            request_id=request_id,
            ip_address=client_ip,
            **extra
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}"
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"
