"""
Структурированное логирование (structlog).
"""

from spot_margin.logging.config import (
    configure_logging,
    get_gating_logger,
    get_logger,
    get_math_logger,
    get_oracle_logger,
    log_gate_decision,
)

__all__ = [
    "configure_logging",
    "get_gating_logger",
    "get_logger",
    "get_math_logger",
    "get_oracle_logger",
    "log_gate_decision",
]
