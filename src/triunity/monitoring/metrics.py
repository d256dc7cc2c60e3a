# File: src/triunity/monitoring/metrics.py

from typing import Optional
from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server


class MetricsCollector:
    def __init__(self, registry: Optional[CollectorRegistry] = None):
        # Private registry so several apps (tests) can coexist in one process
        self.registry = registry or CollectorRegistry()

        self.requests = Counter(
            'triunity_api_requests',
            'API requests by operation, method and status code',
            ['operation', 'method', 'status'],
            registry=self.registry
        )
        self.request_latency = Histogram(
            'triunity_api_request_seconds',
            'Time spent synthesizing a response',
            ['operation'],
            registry=self.registry
        )
        self.generator_errors = Counter(
            'triunity_generator_errors',
            'Unhandled generator exceptions',
            ['operation'],
            registry=self.registry
        )

    def record_request(self, operation: str, method: str, status: int, duration: Optional[float] = None):
        self.requests.labels(operation=operation, method=method, status=str(status)).inc()
        if duration is not None:
            self.request_latency.labels(operation=operation).observe(duration)

    def record_error(self, operation: str):
        self.generator_errors.labels(operation=operation).inc()

    def request_count(self, operation: str, method: str, status: int) -> float:
        value = self.registry.get_sample_value(
            'triunity_api_requests_total',
            {'operation': operation, 'method': method, 'status': str(status)}
        )
        return value or 0.0

    def start_server(self, port: int):
        start_http_server(port, registry=self.registry)
