import json
import time
from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from services.metrics_service import metrics
from utils.log_shipper import log_shipper
from utils.logger import get_logger

logger = get_logger("Middleware")

def _json_or_none(raw: bytes):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None

class TelemetryMiddleware(BaseHTTPMiddleware):
    """Counts every request and ships an http log event once the response is built."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        metrics.record_request(request.method)
        req_body = _json_or_none(await request.body()) if log_shipper.enabled else None

        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code} in {duration_ms:.1f}ms")
        if not log_shipper.enabled:
            return response

        # drain the streamed body so it can be logged, then rebuild the response
        raw = b"".join([chunk async for chunk in response.body_iterator])
        log_shipper.log_http(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            auth="authorization" in request.headers,
            req_body=req_body,
            res_body=_json_or_none(raw),
            ip=request.client.host if request.client else None,
            duration_ms=duration_ms,
        )
        return Response(
            content=raw,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
