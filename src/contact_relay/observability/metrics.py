"""Prometheus metrics instrumentation for the contact relay.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI app,
  exposing ``/metrics`` with HTTP request duration/count.
- ``SUBMISSIONS``: Counter of handled contact requests, labelled by outcome.
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

SUBMISSIONS: Counter = Counter(
    "contact_submissions_total",
    "Contact requests handled, by terminal outcome",
    ["outcome"],
)


def record_outcome(outcome: str) -> None:
    """Count one handled request under *outcome* (e.g. ``sent``, ``honeypot``)."""
    SUBMISSIONS.labels(outcome=outcome).inc()


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation to avoid
    noise in dashboards.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
