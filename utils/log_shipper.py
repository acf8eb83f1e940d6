"""
Ships structured log events to the remote log collector.

Every call is fire-and-forget: the event is posted from a background task and
any failure is only written to the local logger. Nothing here raises into a
request handler.
"""
import asyncio
import copy
import traceback
from datetime import datetime, timezone
import httpx
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("Log_Shipper")

SENSITIVE_FIELDS = ("password", "token")

def sanitize(obj):
    """Return a copy of obj with sensitive top-level fields masked."""
    if not obj or not isinstance(obj, dict):
        return obj
    clone = copy.deepcopy(obj)
    for field in SENSITIVE_FIELDS:
        if clone.get(field):
            clone[field] = "***"
    return clone

class LogShipper:
    def __init__(self):
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(settings.LOGGING_URL)

    async def send(self, event: dict):
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.LOGGING_USER_ID}:{settings.LOGGING_API_KEY}",
        }
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                res = await client.post(settings.LOGGING_URL, json=event, headers=headers)
            if res.is_error:
                logger.warning(f"Failed to ship log event: {res.status_code} {res.text}")
        except httpx.HTTPError as e:
            logger.warning(f"Error shipping log event: {e}")

    def emit(self, event: dict):
        if not self.enabled:
            return
        event = {"time": datetime.now(timezone.utc).isoformat(), "source": settings.LOGGING_SOURCE, **event}
        try:
            task = asyncio.get_running_loop().create_task(self.send(event))
        except RuntimeError:
            logger.debug("No running event loop, log event dropped")
            return
        # hold a reference until the task finishes
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self):
        """Wait for in-flight log events to finish sending."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def log_http(self, method: str, path: str, status_code: int, auth: bool, req_body, res_body, ip, duration_ms: float):
        self.emit({
            "level": "info" if status_code < 500 else "error",
            "type": "http",
            "method": method,
            "path": path,
            "status": status_code,
            "auth": auth,
            "req": sanitize(req_body),
            "res": sanitize(res_body),
            "ip": ip,
            "durationMs": round(duration_ms, 2),
        })

    def log_db(self, operation: str, params=None):
        self.emit({"level": "info", "type": "db", "query": operation, "params": sanitize(params)})

    def log_factory(self, request_body, response_body):
        self.emit({"level": "info", "type": "factory", "req": sanitize(request_body), "res": sanitize(response_body)})

    def log_error(self, exc: BaseException):
        self.emit({
            "level": "error",
            "type": "exception",
            "message": str(exc),
            "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        })

log_shipper = LogShipper()
