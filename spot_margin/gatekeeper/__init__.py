"""
Gatekeeper: допуск действий на рынке.
"""

from spot_margin.gatekeeper.fill_gate import FillGate, FillGateResult

__all__ = [
    "FillGate",
    "FillGateResult",
]
