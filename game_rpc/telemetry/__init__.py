"""
OpenTelemetry Integration Module

Provides tracing and metrics collection for the RPC client and server:
- tracer: span creation and OTLP export
- metrics: counters and latency histograms
"""

from .tracer import setup_tracer, create_span
from .metrics import setup_metrics, increment_counter, record_latency


__all__ = [
    "setup_tracer",
    "create_span",
    "setup_metrics",
    "increment_counter",
    "record_latency",
]
