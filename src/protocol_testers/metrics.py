from __future__ import annotations

from typing import Any, Tuple

from prometheus_client import Counter, Histogram, start_http_server

from protocol_testers.config import Config

tester_requests_total = Counter(
    "tester_requests_total",
    "Executor invocations by protocol and outcome",
    ["protocol", "outcome"],
)

tester_latency_seconds = Histogram(
    "tester_latency_seconds",
    "Wall time of one executor invocation, validation included",
    ["protocol"],
)


def start_metrics_server(cfg: Config) -> Tuple[Any, Any]:
    """Returns the (server, thread) pair so callers can shut the exporter down."""
    return start_http_server(cfg.metrics_port, addr=cfg.metrics_bind)
