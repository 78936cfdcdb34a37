# src/p2pex/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains application services that orchestrate domain logic.
No direct I/O dependencies - uses adapters through interfaces.
"""

from p2pex.application.engine import ExchangeEngine
from p2pex.application.rates_service import RatesService
from p2pex.application.risk_gate import SpreadRiskGate
from p2pex.application.state_manager import StateManager
from p2pex.application.timers import Scheduler, TimerHandle

__all__ = [
    "ExchangeEngine",
    "RatesService",
    "SpreadRiskGate",
    "StateManager",
    "Scheduler",
    "TimerHandle",
]
