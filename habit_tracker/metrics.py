"""
Модуль для экспорта метрик в формате Prometheus
Отслеживает количество запросов, время ответа, ошибки и бизнес-метрики привычек
"""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

# Метрики запросов
http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method"],
)

# Метрики ошибок
http_errors_total = Counter(
    "http_errors_total",
    "Total number of HTTP errors",
    ["method", "endpoint", "status_code"],
)

# Метрики аутентификации
auth_requests_total = Counter(
    "auth_requests_total",
    "Total number of authentication requests",
    ["endpoint", "status"],
)

auth_failures_total = Counter(
    "auth_failures_total", "Total number of authentication failures", ["reason"]
)

# Метрики бизнес-логики
habits_created_total = Counter("habits_created_total", "Total number of habits created")

habits_deleted_total = Counter("habits_deleted_total", "Total number of habits deleted")

completions_toggled_total = Counter(
    "completions_toggled_total",
    "Total number of completion toggles",
    ["direction"],
)

stats_computation_duration_seconds = Histogram(
    "stats_computation_duration_seconds",
    "Time spent computing habit statistics in seconds",
)

users_registered_total = Counter("users_registered_total", "Total number of users registered")


def _endpoint_label(request: Request) -> str:
    """Шаблон маршрута (/habits/{habit_id}) вместо конкретного пути"""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware для автоматического сбора метрик HTTP запросов
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Игнорируем метрики для самого endpoint метрик
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        http_requests_in_progress.labels(method=method).inc()
        start_time = time.time()

        try:
            response = await call_next(request)
            status_code = response.status_code
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)

            http_requests_total.labels(
                method=method, endpoint=endpoint, status_code=status_code
            ).inc()

            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

            # Отслеживаем ошибки (4xx и 5xx)
            if status_code >= 400:
                http_errors_total.labels(
                    method=method, endpoint=endpoint, status_code=status_code
                ).inc()

            return response

        finally:
            http_requests_in_progress.labels(method=method).dec()


def metrics_endpoint() -> Response:
    """
    Endpoint для экспорта метрик в формате Prometheus

    Returns:
        Response с метриками в формате Prometheus
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def track_auth_request(endpoint: str, success: bool):
    """
    Отслеживание запросов аутентификации

    Args:
        endpoint: Endpoint аутентификации (login, register)
        success: Успешность запроса
    """
    status = "success" if success else "failure"
    auth_requests_total.labels(endpoint=endpoint, status=status).inc()


def track_auth_failure(reason: str):
    """Отслеживание неудачных попыток аутентификации"""
    auth_failures_total.labels(reason=reason).inc()


def track_habit_created():
    habits_created_total.inc()


def track_habit_deleted():
    habits_deleted_total.inc()


def track_completion_toggled(completed: bool):
    """Отслеживание переключения отметки (on - создана, off - удалена)"""
    completions_toggled_total.labels(direction="on" if completed else "off").inc()


def track_stats_computed(duration: float):
    stats_computation_duration_seconds.observe(duration)


def track_user_registered():
    users_registered_total.inc()
