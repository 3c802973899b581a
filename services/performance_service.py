"""Process-wide request and call timing.

Collected entries are kept in memory and mirrored into a small JSON store
(``METRICS_STORE_PATH``) holding the last 100 entries per metric type.
Collection is a no-op unless the service runs in production.
"""
import functools
import json
import logging
import os
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

import requests

from config import ANALYTICS_ENDPOINT, APP_ENV, METRICS_STORE_PATH, is_production

logger = logging.getLogger(__name__)

MAX_ENTRIES_PER_TYPE = 100
METRIC_CATEGORIES = ("pageLoads", "apiCalls", "errors", "userInteractions")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _empty_metrics() -> Dict[str, List[dict]]:
    return {category: [] for category in METRIC_CATEGORIES}


class PerformanceService:
    def __init__(
        self,
        enabled: Optional[bool] = None,
        store_path: str = METRICS_STORE_PATH,
        analytics_endpoint: Optional[str] = ANALYTICS_ENDPOINT,
        max_entries: int = MAX_ENTRIES_PER_TYPE,
    ):
        self.is_enabled = is_production() if enabled is None else enabled
        self.store_path = store_path
        self.analytics_endpoint = analytics_endpoint
        self.max_entries = max_entries
        self.metrics = _empty_metrics()
        self._session_id: Optional[str] = None
        self._lock = threading.Lock()
        self._original_session_request = None
        self._analytics_pool: Optional[ThreadPoolExecutor] = None

    # --- recording --------------------------------------------------------

    def _remember(self, category: str, entry: dict):
        with self._lock:
            bucket = self.metrics.setdefault(category, [])
            bucket.append(entry)
            if len(bucket) > self.max_entries:
                del bucket[: len(bucket) - self.max_entries]

    def send_metrics(self, metric_type: str, data: dict):
        if not self.is_enabled:
            return

        try:
            with self._lock:
                stored = self._read_store()
                entries = stored.setdefault(metric_type, [])
                entries.append(data)
                # keep only the last N entries per type
                if len(entries) > self.max_entries:
                    stored[metric_type] = entries[-self.max_entries:]
                self._write_store(stored)
        except Exception as e:
            logger.error(f"Failed to send performance metrics: {e}")
            return

        if self.analytics_endpoint:
            self.queue_analytics(metric_type, data)

    def record_request(self, method: str, path: str, duration: float, status_code: int, user_id: Any = None):
        if not self.is_enabled:
            return
        entry = {
            "timestamp": _now_ms(),
            "url": path,
            "method": method,
            "duration": round(duration, 2),
            "status": status_code,
            "userId": user_id,
        }
        self._remember("apiCalls", entry)
        self.send_metrics("apiRequest", entry)

    def record_error(self, message: str, **context):
        if not self.is_enabled:
            return
        entry = {"timestamp": _now_ms(), "message": message, **context}
        self._remember("errors", entry)
        self.send_metrics("error", entry)

    def record_user_interaction(self, interaction_type: str, target: str = "unknown", url: Optional[str] = None):
        if not self.is_enabled:
            return
        entry = {"timestamp": _now_ms(), "type": interaction_type, "target": target or "unknown", "url": url}
        self._remember("userInteractions", entry)

    # --- call instrumentation ---------------------------------------------

    def _timed_call(self, fn: Callable, url: Any, method: str, *args, **kwargs):
        start = time.perf_counter()
        try:
            response = fn(*args, **kwargs)
        except Exception as error:
            duration = (time.perf_counter() - start) * 1000
            if self.is_enabled:
                entry = {
                    "timestamp": _now_ms(),
                    "url": str(url),
                    "method": method,
                    "duration": duration,
                    "error": str(error),
                }
                self._remember("apiCalls", entry)
                self.send_metrics("apiError", entry)
            raise

        duration = (time.perf_counter() - start) * 1000
        if self.is_enabled:
            entry = {
                "timestamp": _now_ms(),
                "url": str(url),
                "method": method,
                "duration": duration,
                "status": getattr(response, "status_code", getattr(response, "status", None)),
                "statusText": getattr(response, "reason", None),
            }
            self._remember("apiCalls", entry)
            self.send_metrics("apiCall", entry)
        return response

    def wrap_fetch(self, fetch: Callable) -> Callable:
        """Wrap a ``fetch(url, method=..., ...)`` style callable with timing."""

        @functools.wraps(fetch)
        def wrapper(*args, **kwargs):
            url = args[0] if args else kwargs.get("url")
            method = str(kwargs.get("method", "GET")).upper()
            return self._timed_call(fetch, url, method, *args, **kwargs)

        wrapper.__wrapped_fetch__ = fetch
        return wrapper

    def monitor_api_calls(self):
        """Time every outgoing call made through ``requests``."""
        if self._original_session_request is not None:
            return
        original = requests.Session.request
        service = self

        @functools.wraps(original)
        def request(session, method, url, *args, **kwargs):
            return service._timed_call(original, url, str(method).upper(), session, method, url, *args, **kwargs)

        self._original_session_request = original
        requests.Session.request = request

    def restore_api_calls(self):
        if self._original_session_request is None:
            return
        requests.Session.request = self._original_session_request
        self._original_session_request = None

    def measure_time(self, name: str, fn: Callable, *args, **kwargs):
        start = time.perf_counter()
        result = fn(*args, **kwargs)
        duration = (time.perf_counter() - start) * 1000
        self.send_metrics("custom", {"timestamp": _now_ms(), "name": name, "duration": duration})
        return result

    async def measure_async_time(self, name: str, async_fn: Callable, *args, **kwargs):
        start = time.perf_counter()
        result = await async_fn(*args, **kwargs)
        duration = (time.perf_counter() - start) * 1000
        self.send_metrics("custom", {"timestamp": _now_ms(), "name": name, "duration": duration})
        return result

    # --- analytics --------------------------------------------------------

    def queue_analytics(self, metric_type: str, data: dict) -> Optional[Future]:
        """Forward ``data`` to analytics on a worker thread."""
        if not self.analytics_endpoint:
            return None
        with self._lock:
            if self._analytics_pool is None:
                self._analytics_pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="analytics")
            pool = self._analytics_pool
        return pool.submit(self.send_to_analytics, metric_type, data)

    def shutdown(self, wait: bool = True):
        with self._lock:
            pool, self._analytics_pool = self._analytics_pool, None
        if pool is not None:
            pool.shutdown(wait=wait)

    def send_to_analytics(self, metric_type: str, data: dict):
        if not self.analytics_endpoint:
            return
        payload = {
            "type": metric_type,
            "data": data,
            "timestamp": _now_ms(),
            "sessionId": self.get_session_id(),
        }
        # bypass our own wrapper so analytics traffic is not timed
        send = self._original_session_request or requests.Session.request
        try:
            with requests.Session() as session:
                send(session, "POST", self.analytics_endpoint, json=payload, timeout=5)
        except requests.RequestException as e:
            logger.error(f"Failed to send analytics: {e}")

    def get_session_id(self) -> str:
        if not self._session_id:
            self._session_id = f"session_{_now_ms()}_{uuid.uuid4().hex[:9]}"
        return self._session_id

    # --- reporting --------------------------------------------------------

    def get_performance_report(self) -> Dict[str, Any]:
        with self._lock:
            metrics = {k: list(v) for k, v in self.metrics.items()}
        return {
            "timestamp": _now_ms(),
            "environment": APP_ENV,
            "enabled": self.is_enabled,
            "sessionId": self.get_session_id(),
            "metrics": metrics,
        }

    def clear_metrics(self):
        with self._lock:
            self.metrics = _empty_metrics()
            if os.path.exists(self.store_path):
                os.remove(self.store_path)

    def get_stored_metrics(self) -> Dict[str, List[dict]]:
        try:
            with self._lock:
                return self._read_store()
        except Exception as e:
            logger.error(f"Failed to parse stored metrics: {e}")
            return {}

    def _read_store(self) -> Dict[str, List[dict]]:
        if not os.path.exists(self.store_path):
            return {}
        with open(self.store_path, "r", encoding="utf-8") as fh:
            content = fh.read()
        return json.loads(content) if content.strip() else {}

    def _write_store(self, stored: Dict[str, List[dict]]):
        directory = os.path.dirname(self.store_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.store_path, "w", encoding="utf-8") as fh:
            json.dump(stored, fh, default=str)


performance_service = PerformanceService()
