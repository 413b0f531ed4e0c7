from .logger import (
    DISTANCE_LOOKUPS,
    GUARDRAIL_FAILURES,
    PROVIDER_FAILURES,
    QUOTE_LATENCY,
    QUOTE_REQUESTS,
    configure_logging,
    get_logger,
    stage_timer,
    start_metrics_server,
    timed,
)

__all__ = [
    "configure_logging", "get_logger", "start_metrics_server", "stage_timer", "timed",
    "QUOTE_REQUESTS", "QUOTE_LATENCY", "DISTANCE_LOOKUPS", "PROVIDER_FAILURES", "GUARDRAIL_FAILURES",
]
