"""
Runtime Monitoring
Prometheus-based metrics collection
"""

from .metrics import MetricsCollector, metrics_collector

__all__ = [
    "MetricsCollector",
    "metrics_collector",
]
