"""Backend-as-a-service client, API monitor and cache."""

from .client import AuthSession, BackendClient, QueryBuilder, QueryResult
from .monitor import ApiMetric, ApiMonitor, get_api_monitor, monitored_request
from .cache import AppCache

__all__ = [
    "AuthSession",
    "BackendClient",
    "QueryBuilder",
    "QueryResult",
    "ApiMetric",
    "ApiMonitor",
    "get_api_monitor",
    "monitored_request",
    "AppCache",
]
