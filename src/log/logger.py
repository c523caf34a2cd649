"""
Structured Logger

DESIGN DECISION: Every party edit and ledger evaluation is logged locally
as a structured event. This provides:
1. Traceability of who changed what in a party
2. Debugging capability for odd balances
3. Correlation IDs to tie together the events of one user action

Logs are local only. Nothing here is persisted as a history of the party.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None, **initial_values) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name, usually the module's __name__
        initial_values: Context bound to every event from this logger
    """
    return structlog.get_logger(name, **initial_values)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., saving an expense).
    Bind it to the logger for all subsequent operations.
    """
    return uuid4()
