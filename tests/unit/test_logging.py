"""
Тесты для структурированного логирования

Проверяет:
1. configure_logging принимает известные уровни и отвергает неизвестные
2. Формат события решения gate (PASS / BLOCK, контекст)
3. Привязку подсистемы к логгерам
"""

import pytest
import structlog
from structlog.testing import capture_logs

from spot_margin.logging import (
    configure_logging,
    get_gating_logger,
    get_logger,
    get_math_logger,
    get_oracle_logger,
    log_gate_decision,
)


class TestConfigureLogging:
    """Тесты для configure_logging"""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    @pytest.mark.parametrize("level", ["DEBUG", "info", "Warning"])
    def test_known_levels(self, level: str) -> None:
        """Известные уровни принимаются"""
        configure_logging(level=level, format_json=True, include_caller=True)

    def test_unknown_level(self) -> None:
        """Неизвестный уровень → ValueError"""
        with pytest.raises(ValueError, match="VERBOSE"):
            configure_logging(level="VERBOSE")


class TestGateDecision:
    """Тесты для log_gate_decision"""

    def test_pass_logged_at_debug(self) -> None:
        """PASS пишется на уровне debug"""
        with capture_logs() as logs:
            log_gate_decision(get_logger("test"), "fill_gate", True, 3, "ok")

        assert logs == [
            {
                "event": "gate_decision",
                "log_level": "debug",
                "gate_name": "fill_gate",
                "gate_result": "PASS",
                "market_index": 3,
                "reason": "ok",
            }
        ]

    def test_block_logged_at_info_with_context(self) -> None:
        """BLOCK пишется на info с контекстом и audit_trail"""
        with capture_logs() as logs:
            log_gate_decision(
                get_gating_logger("test"),
                "fill_gate",
                False,
                7,
                "fills_paused",
                context={"oracle_validity": "VALID"},
            )

        assert len(logs) == 1
        entry = logs[0]
        assert entry["log_level"] == "info"
        assert entry["gate_result"] == "BLOCK"
        assert entry["context"] == {"oracle_validity": "VALID"}
        assert entry["subsystem"] == "gating"
        assert entry["audit_trail"] is True


class TestSubsystemLoggers:
    """Тесты для логгеров подсистем"""

    @pytest.mark.parametrize(
        "factory,subsystem",
        [(get_math_logger, "math"), (get_oracle_logger, "oracle"), (get_gating_logger, "gating")],
    )
    def test_subsystem_bound(self, factory, subsystem: str) -> None:
        """Фабрика привязывает имя подсистемы"""
        with capture_logs() as logs:
            factory("test").warning("event")
        assert logs[0]["subsystem"] == subsystem
