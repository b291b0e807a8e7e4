"""
Централизованная конфигурация логирования spot_margin.

Ядро само логирование не настраивает: вызывающая сторона один раз вызывает
configure_logging(), после чего все модули пишут структурированные события
через structlog.

Подсистемы:
- math    — отказы checked-арифметики (debug перед MathError)
- oracle  — классификация оракула
- gating  — решения о блокировке fill (audit trail)
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None,
) -> None:
    """
    Настройка structlog поверх стандартного logging.

    Args:
        level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: True → JSON, иначе человекочитаемый вывод
        include_timestamp: Добавлять ISO timestamp
        include_caller: Добавлять filename/lineno источника события
        extra_processors: Дополнительные structlog processors

    Raises:
        ValueError: Если уровень логирования неизвестен
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s",
    )

    processors: list = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Получение structlog логгера.

    Args:
        name: Имя логгера (обычно __name__)
    """
    return structlog.get_logger(name)


def get_math_logger(name: str) -> FilteringBoundLogger:
    """Логгер для отказов checked-арифметики."""
    return get_logger(name).bind(subsystem="math")


def get_oracle_logger(name: str) -> FilteringBoundLogger:
    """Логгер для классификации оракула."""
    return get_logger(name).bind(subsystem="oracle")


def get_gating_logger(name: str) -> FilteringBoundLogger:
    """
    Логгер для решений о блокировке действий.

    Все события помечаются audit_trail=True: решения gate должны
    восстанавливаться по логам.
    """
    return get_logger(name).bind(subsystem="gating", audit_trail=True)


def log_gate_decision(
    logger: FilteringBoundLogger,
    gate_name: str,
    passed: bool,
    market_index: int,
    reason: str,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """
    Логирование решения gate в стандартном формате.

    Args:
        logger: structlog логгер
        gate_name: Имя gate
        passed: Пропущено ли действие
        market_index: Индекс рынка
        reason: Причина решения
        context: Дополнительные поля
    """
    bound_logger = logger.bind(
        gate_name=gate_name,
        gate_result="PASS" if passed else "BLOCK",
        market_index=market_index,
        reason=reason,
    )
    if context:
        bound_logger = bound_logger.bind(context=context)

    if passed:
        bound_logger.debug("gate_decision")
    else:
        bound_logger.info("gate_decision")
