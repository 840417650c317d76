# SPDX-License-Identifier: Apache-2.0
"""Prometheus metrics for trigger dispatch."""
from __future__ import annotations

from prometheus_client import Counter, Histogram

TRIGGER_OUTCOMES = Counter(
    "sensor_trigger_outcomes_total",
    "Final dispatch outcome per trigger",
    labelnames=("trigger", "type", "outcome"),
)

TRIGGER_RETRIES = Counter(
    "sensor_trigger_retries_total",
    "Retries scheduled by trigger policies",
    labelnames=("trigger", "type"),
)

TRIGGER_EXECUTE_LATENCY = Histogram(
    "sensor_trigger_execute_latency_ms",
    "Latency of the execute stage (milliseconds)",
    labelnames=("type",),
    buckets=(1, 2, 5, 10, 20, 50, 100, 200, 500, 1000, 2000, 5000, 10000),
)
