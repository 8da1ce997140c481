# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from account_service.shared.config import load_config

_config = load_config()

RPC_LATENCY = Histogram(
    "account_service_rpc_latency_seconds",
    "RPC handler latency",
    labelnames=("pattern",),
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
RPC_COUNTER = Counter(
    "account_service_rpc_requests_total",
    "Number of dispatched RPC messages",
    labelnames=("pattern", "status"),
)


@contextmanager
def track_latency(pattern: str, status_getter: Callable[[], str]) -> Iterator[None]:
    if not _config.observability.metrics_enabled:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        RPC_LATENCY.labels(pattern=pattern).observe(duration)
        RPC_COUNTER.labels(pattern=pattern, status=status_getter()).inc()


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST


__all__ = [
    "RPC_COUNTER",
    "RPC_LATENCY",
    "render_metrics",
    "track_latency",
]
