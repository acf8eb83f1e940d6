# services/metrics_service.py
import asyncio
import os
import time
import httpx
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("Metrics_Service")

TRACKED_METHODS = ("GET", "POST", "PUT", "DELETE")

def cpu_usage_percentage() -> float:
    load = os.getloadavg()[0] / (os.cpu_count() or 1)
    return round(load * 100, 2)

def memory_usage_percentage() -> float:
    total = os.sysconf("SC_PHYS_PAGES")
    free = os.sysconf("SC_AVPHYS_PAGES")
    if total <= 0:
        return 0.0
    return round((total - free) / total * 100, 2)

class MetricsRegistry:
    """In-process counters, pushed to the metrics collector on a timer."""

    def __init__(self):
        self.reset()
        self._reporter: asyncio.Task | None = None

    def reset(self):
        self.total_requests = 0
        self.requests_by_method = {m: 0 for m in TRACKED_METHODS}
        self.auth_attempts = 0
        self.auth_successes = 0
        self.auth_failures = 0
        self.active_users = 0
        self.pizzas_sold = 0
        self.pizza_failures = 0
        self.revenue = 0.0
        self.pizza_latency_ms = 0.0

    def record_request(self, method: str):
        self.total_requests += 1
        if method in self.requests_by_method:
            self.requests_by_method[method] += 1

    def record_auth_attempt(self, success: bool):
        self.auth_attempts += 1
        if success:
            self.auth_successes += 1
            self.active_users += 1
        else:
            self.auth_failures += 1

    def record_logout(self):
        if self.active_users > 0:
            self.active_users -= 1

    def record_pizza_purchase(self, success: bool, latency_ms: float, price: float):
        if success:
            self.pizzas_sold += 1
            self.revenue += price
        else:
            self.pizza_failures += 1
        self.pizza_latency_ms += latency_ms

    def snapshot(self) -> list[tuple[str, float, str, str]]:
        """(name, value, type, unit) for every reported metric."""
        metrics = [
            ("cpu_usage", cpu_usage_percentage(), "gauge", "%"),
            ("memory_usage", memory_usage_percentage(), "gauge", "%"),
            ("http_requests_total", self.total_requests, "sum", "1"),
        ]
        metrics += [(f"http_requests_{m}", c, "sum", "1") for m, c in self.requests_by_method.items()]
        metrics += [
            ("auth_attempts_total", self.auth_attempts, "sum", "1"),
            ("auth_success_total", self.auth_successes, "sum", "1"),
            ("auth_fail_total", self.auth_failures, "sum", "1"),
            ("active_users", self.active_users, "gauge", "1"),
            ("pizzas_sold", self.pizzas_sold, "sum", "1"),
            ("pizza_failures", self.pizza_failures, "sum", "1"),
            ("pizza_revenue", self.revenue, "sum", "USD"),
            ("pizza_latency_total", self.pizza_latency_ms, "sum", "ms"),
        ]
        return metrics

    @staticmethod
    def build_payload(name: str, value: float, metric_type: str, unit: str) -> dict:
        """OTLP/JSON body for a single data point."""
        data = {"dataPoints": [{"asDouble": float(value), "timeUnixNano": time.time_ns()}]}
        if metric_type == "sum":
            data["aggregationTemporality"] = "AGGREGATION_TEMPORALITY_CUMULATIVE"
            data["isMonotonic"] = True
        return {
            "resourceMetrics": [{
                "resource": {
                    "attributes": [{"key": "service.name", "value": {"stringValue": settings.METRICS_SOURCE}}]
                },
                "scopeMetrics": [{"metrics": [{"name": name, "unit": unit, metric_type: data}]}],
            }]
        }

    async def push(self, client: httpx.AsyncClient):
        headers = {"Authorization": f"Bearer {settings.METRICS_API_KEY}", "Content-Type": "application/json"}
        for name, value, metric_type, unit in self.snapshot():
            try:
                res = await client.post(settings.METRICS_URL, json=self.build_payload(name, value, metric_type, unit), headers=headers)
                if res.is_error:
                    logger.warning(f"Failed to push {name}: {res.text}")
            except httpx.HTTPError as e:
                logger.warning(f"Error sending metric {name}: {e}")

    async def _report_forever(self, period: float):
        async with httpx.AsyncClient(timeout=5.0) as client:
            while True:
                await asyncio.sleep(period)
                try:
                    await self.push(client)
                    logger.debug("Metrics sent")
                except Exception as e:
                    logger.error("Error building metrics", exc_info=e)

    def start_periodic_reporting(self, period: float | None = None):
        if not settings.METRICS_URL:
            logger.info("METRICS_URL not set, periodic metrics reporting disabled")
            return
        if self._reporter and not self._reporter.done():
            return
        self._reporter = asyncio.get_running_loop().create_task(
            self._report_forever(period or settings.METRICS_PERIOD_SECONDS)
        )
        logger.info("Periodic metrics reporting started")

    async def stop_periodic_reporting(self):
        if self._reporter is None:
            return
        self._reporter.cancel()
        try:
            await self._reporter
        except asyncio.CancelledError:
            pass
        self._reporter = None

metrics = MetricsRegistry()
