"""
monitoring/logger.py
structlog setup and the Prometheus series the quote pipeline reports into.

Nothing here talks to a collector until ``start_metrics_server`` runs; the
metric objects are built on first use so importing a pipeline module in a
test never registers anything twice.
"""
import functools
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from config.settings import settings


def get_logger(name: str):
    import structlog
    return structlog.get_logger(name)


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console renderer once; ``level`` defaults to LOG_LEVEL."""
    import structlog
    level_name = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format="%(message)s")
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


# Prometheus

class _LabelledMetric:
    """A labelled Prometheus metric registered on the first ``labels()`` call."""

    def __init__(self, kind: str, name: str, doc: str, labelnames, **options):
        self.kind = kind
        self.name = name
        self._doc = doc
        self._labelnames = tuple(labelnames)
        self._options = options
        self._metric = None

    def labels(self, **values):
        if self._metric is None:
            import prometheus_client
            factory = getattr(prometheus_client, self.kind)
            self._metric = factory(self.name, self._doc, self._labelnames, **self._options)
        return self._metric.labels(**values)


QUOTE_REQUESTS = _LabelledMetric(
    "Counter", "freight_quote_requests_total",
    "Manual quote requests by mode and outcome", ["mode", "status"],
)
QUOTE_LATENCY = _LabelledMetric(
    "Histogram", "freight_quote_duration_seconds",
    "Time spent per pipeline stage", ["stage"],
    # routing calls can take several seconds before timing out
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0),
)
DISTANCE_LOOKUPS = _LabelledMetric(
    "Counter", "freight_distance_resolutions_total",
    "Ground distances resolved, by source", ["source"],
)
PROVIDER_FAILURES = _LabelledMetric(
    "Counter", "freight_geo_provider_failures_total",
    "Geocoding/routing calls that failed", ["provider"],
)
GUARDRAIL_FAILURES = _LabelledMetric(
    "Counter", "freight_guardrail_failures_total",
    "Input or output guardrail violations", ["check_type"],
)


def start_metrics_server(port: Optional[int] = None) -> bool:
    """Expose /metrics on ``port`` (METRICS_PORT by default). Returns False if the port is taken."""
    from prometheus_client import start_http_server
    port = port or settings.metrics_port
    log = get_logger(__name__)
    try:
        start_http_server(port)
    except OSError as exc:
        log.warning("Metrics server not started", port=port, error=str(exc))
        return False
    log.info("Metrics server listening", port=port)
    return True


@contextmanager
def stage_timer(stage: str) -> Iterator[None]:
    started = time.perf_counter()
    try:
        yield
    finally:
        QUOTE_LATENCY.labels(stage=stage).observe(time.perf_counter() - started)


def timed(stage: str) -> Callable:
    """Record the wrapped call's duration under ``stage``, including failed calls."""
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with stage_timer(stage):
                return fn(*args, **kwargs)
        return wrapper
    return decorator
