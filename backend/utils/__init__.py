from .logger import setup_logging, get_logger, scheduler_logger, kaspa_logger, api_logger
from .retry import RetryConfig, RetryableClient, calculate_delay, retry_with_delay
from .serialization import dumps_payload, json_reviver, loads_payload, revive

__all__ = [
    # Logger
    "setup_logging",
    "get_logger",
    "scheduler_logger",
    "kaspa_logger",
    "api_logger",

    # Retry
    "RetryConfig",
    "RetryableClient",
    "calculate_delay",
    "retry_with_delay",

    # Serialization
    "dumps_payload",
    "json_reviver",
    "loads_payload",
    "revive",
]
