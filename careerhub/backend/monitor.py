"""
API monitoring for tracking response times and error rates.

Metrics are kept in a bounded in-memory buffer for the monitoring
dashboard and persisted to the backend in debounced batches.
"""

import threading
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel, Field

from careerhub.utils.logger import get_logger
from careerhub.utils.math_utils import round_half_up


logger = get_logger(__name__)


# Map endpoint hosts to service names for tracking
SERVICE_HOSTS = {
    "api.github.com": "github_api",
    "gmail.googleapis.com": "gmail_api",
    "api.linkedin.com": "linkedin_api",
    "api.mapbox.com": "mapbox",
    "nominatim.openstreetmap.org": "nominatim",
    "router.project-osrm.org": "osrm",
    "api.bls.gov": "bls_api",
    "timeapi.io": "timeapi",
}

MAX_FIELD_LENGTH = 500


class ApiMetric(BaseModel):
    """A single recorded API call."""
    endpoint: str
    method: str
    status_code: int
    duration: int
    success: bool
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    error_message: Optional[str] = None
    service_name: Optional[str] = None


class ApiMonitor:
    """Track API response times and error rates."""

    def __init__(
        self,
        max_metrics: int = 500,
        slow_threshold_ms: int = 5000,
        flush_delay: float = 2.0,
        persist: bool = True,
    ):
        self.max_metrics = max_metrics
        self.slow_threshold_ms = slow_threshold_ms
        self.flush_delay = flush_delay
        self.persist = persist

        self._metrics: List[ApiMetric] = []
        self._pending_writes: List[ApiMetric] = []
        self._write_timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._client = None
        self._service_hosts: Dict[str, str] = dict(SERVICE_HOSTS)

    @classmethod
    def from_settings(cls, settings) -> "ApiMonitor":
        cfg = settings.monitor
        return cls(
            max_metrics=cfg.max_metrics,
            slow_threshold_ms=cfg.slow_threshold_ms,
            flush_delay=cfg.flush_delay_seconds,
            persist=cfg.persist,
        )

    def attach_client(self, client) -> None:
        """Set the backend client used to persist metrics."""
        self._client = client

    def register_service(self, host_fragment: str, service_name: str) -> None:
        self._service_hosts[host_fragment] = service_name

    def service_name_for(self, endpoint: str) -> str:
        for host, name in self._service_hosts.items():
            if host in endpoint:
                return name
        return "unknown"

    def record_metric(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        duration: int,
        success: bool,
        error_message: Optional[str] = None,
        service_name: Optional[str] = None,
    ) -> ApiMetric:
        """Record one API call, log it, and queue it for persistence."""
        metric = ApiMetric(
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            duration=duration,
            success=success,
            error_message=error_message,
            service_name=service_name or self.service_name_for(endpoint),
        )

        with self._lock:
            self._metrics.append(metric)
            if len(self._metrics) > self.max_metrics:
                self._metrics.pop(0)

        if success:
            logger.debug(f"API {method} {endpoint} completed ({status_code}, {duration}ms)")
        else:
            logger.error(f"API {method} {endpoint} failed ({status_code}): {error_message}")

        if duration > self.slow_threshold_ms:
            logger.warning(f"🐢 Slow API response detected: {method} {endpoint} took {duration}ms")

        self._queue_write(metric)
        return metric

    # -- persistence -------------------------------------------------------

    def _queue_write(self, metric: ApiMetric) -> None:
        if not self.persist or self._client is None:
            return

        with self._lock:
            self._pending_writes.append(metric)
            # Debounce: restart the timer on every new metric
            if self._write_timer is not None:
                self._write_timer.cancel()
            self._write_timer = threading.Timer(self.flush_delay, self.flush)
            self._write_timer.daemon = True
            self._write_timer.start()

    def flush(self) -> int:
        """Write pending metrics to ``api_usage_logs`` and update the daily aggregates."""
        with self._lock:
            to_write = list(self._pending_writes)
            self._pending_writes = []
            self._write_timer = None

        if not to_write or self._client is None:
            return 0

        rows = [
            {
                "service_name": m.service_name or "unknown",
                "endpoint": m.endpoint[:MAX_FIELD_LENGTH],
                "method": m.method,
                "status_code": m.status_code,
                "response_time_ms": m.duration,
                "success": m.success,
                "error_message": m.error_message[:MAX_FIELD_LENGTH] if m.error_message else None,
                "created_at": m.timestamp,
            }
            for m in to_write
        ]

        try:
            self._client.table("api_usage_logs").insert(rows, returning=False).without_monitoring().execute()
            self.update_daily_aggregates(to_write)
        except Exception as e:
            # Metrics are best effort and never break the request path
            logger.error(f"Error persisting API metrics: {e}")
            return 0

        logger.debug(f"Persisted {len(rows)} API metrics")
        return len(rows)

    def force_flush(self) -> int:
        """Cancel the pending timer and write immediately (e.g. on shutdown)."""
        with self._lock:
            if self._write_timer is not None:
                self._write_timer.cancel()
                self._write_timer = None
        return self.flush()

    def update_daily_aggregates(self, metrics: List[ApiMetric]) -> None:
        today = datetime.now(timezone.utc).date().isoformat()

        by_service: Dict[str, Dict] = defaultdict(
            lambda: {"total": 0, "success": 0, "failed": 0, "total_time": 0, "times": []}
        )
        for m in metrics:
            stats = by_service[m.service_name or "unknown"]
            stats["total"] += 1
            stats["total_time"] += m.duration
            stats["times"].append(m.duration)
            if m.success:
                stats["success"] += 1
            else:
                stats["failed"] += 1

        for service_name, stats in by_service.items():
            existing = (
                self._client.table("api_usage_daily")
                .select("*")
                .eq("service_name", service_name)
                .eq("date", today)
                .maybe_single()
                .without_monitoring()
                .execute()
                .data
            )

            avg_time = round_half_up(stats["total_time"] / stats["total"])
            p95 = percentile_95(stats["times"]) or avg_time

            if existing:
                new_total = (existing.get("total_requests") or 0) + stats["total"]
                new_total_time = (existing.get("total_response_time_ms") or 0) + stats["total_time"]
                values = {
                    "total_requests": new_total,
                    "successful_requests": (existing.get("successful_requests") or 0) + stats["success"],
                    "failed_requests": (existing.get("failed_requests") or 0) + stats["failed"],
                    "total_response_time_ms": new_total_time,
                    "avg_response_time_ms": round_half_up(new_total_time / new_total),
                    "p95_response_time_ms": max(existing.get("p95_response_time_ms") or 0, p95),
                }
                self._client.table("api_usage_daily").update(values).eq(
                    "id", existing["id"]
                ).without_monitoring().execute()
            else:
                self._client.table("api_usage_daily").insert({
                    "service_name": service_name,
                    "date": today,
                    "total_requests": stats["total"],
                    "successful_requests": stats["success"],
                    "failed_requests": stats["failed"],
                    "total_response_time_ms": stats["total_time"],
                    "avg_response_time_ms": avg_time,
                    "p95_response_time_ms": p95,
                }).without_monitoring().execute()

    # -- queries -----------------------------------------------------------

    def get_metrics(self) -> List[ApiMetric]:
        with self._lock:
            return list(self._metrics)

    def get_metrics_by_endpoint(self, endpoint: str) -> List[ApiMetric]:
        return [m for m in self.get_metrics() if endpoint in m.endpoint]

    def get_stats(self) -> Dict:
        """
        Summary statistics over the buffered metrics.

        Returns:
            Dict with total_requests, success_rate, average_response_time,
            error_rate, slow_request_rate (all percentages rounded) and
            per-endpoint count / avg_time / error_rate keyed by "METHOD url".
        """
        metrics = self.get_metrics()
        total = len(metrics)
        if total == 0:
            return {
                "total_requests": 0,
                "success_rate": 100,
                "average_response_time": 0,
                "error_rate": 0,
                "slow_request_rate": 0,
                "by_endpoint": {},
            }

        successful = sum(1 for m in metrics if m.success)
        total_duration = sum(m.duration for m in metrics)
        slow = sum(1 for m in metrics if m.duration > self.slow_threshold_ms)

        grouped: Dict[str, Dict[str, int]] = defaultdict(lambda: {"count": 0, "total_time": 0, "errors": 0})
        for m in metrics:
            entry = grouped[f"{m.method} {m.endpoint}"]
            entry["count"] += 1
            entry["total_time"] += m.duration
            if not m.success:
                entry["errors"] += 1

        by_endpoint = {
            key: {
                "count": data["count"],
                "avg_time": round_half_up(data["total_time"] / data["count"]),
                "error_rate": round_half_up(data["errors"] / data["count"] * 100),
            }
            for key, data in grouped.items()
        }

        return {
            "total_requests": total,
            "success_rate": round_half_up(successful / total * 100),
            "average_response_time": round_half_up(total_duration / total),
            "error_rate": round_half_up((total - successful) / total * 100),
            "slow_request_rate": round_half_up(slow / total * 100),
            "by_endpoint": by_endpoint,
        }

    def get_recent_errors(self, limit: int = 20) -> List[ApiMetric]:
        """Most recent failures, newest first."""
        errors = [m for m in self.get_metrics() if not m.success]
        return list(reversed(errors[-limit:]))

    def clear_metrics(self) -> None:
        with self._lock:
            self._metrics = []


def percentile_95(values: List[int]) -> Optional[int]:
    """Nearest-rank 95th percentile: ``sorted[floor(n * 0.95)]``."""
    if not values:
        return None
    ordered = sorted(values)
    index = min(int(len(ordered) * 0.95), len(ordered) - 1)
    return ordered[index]


_monitor: Optional[ApiMonitor] = None


def get_api_monitor() -> ApiMonitor:
    """Process-wide monitor instance."""
    global _monitor
    if _monitor is None:
        _monitor = ApiMonitor()
    return _monitor


def monitored_request(
    method: str,
    url: str,
    service_name: Optional[str] = None,
    monitor: Optional[ApiMonitor] = None,
    session: Optional[requests.Session] = None,
    **kwargs,
) -> requests.Response:
    """
    Wrapper around ``requests`` that records a metric for every call.

    Exceptions from ``requests`` are recorded as failures (status 0) and re-raised.
    """
    monitor = monitor or get_api_monitor()
    sender = session or requests
    kwargs.setdefault("timeout", 30)
    start = time.perf_counter()

    try:
        response = sender.request(method, url, **kwargs)
    except requests.RequestException as e:
        duration = round((time.perf_counter() - start) * 1000)
        monitor.record_metric(
            endpoint=url, method=method, status_code=0, duration=duration,
            success=False, error_message=str(e), service_name=service_name,
        )
        raise

    duration = round((time.perf_counter() - start) * 1000)
    monitor.record_metric(
        endpoint=url,
        method=method,
        status_code=response.status_code,
        duration=duration,
        success=response.ok,
        error_message=None if response.ok else response.reason,
        service_name=service_name,
    )
    return response
