"""Agents package"""
from .base_agent import BaseAgent
from .scenario_agent import ScenarioAgent
from .orchestrator_agent import OrchestratorAgent
from .reporter_agent import ReporterAgent

__all__ = [
    "BaseAgent",
    "ScenarioAgent",
    "OrchestratorAgent",
    "ReporterAgent"
]
