"""Models package"""
from .device import DeviceClass, DeviceProfile
from .role import Credentials, NavigationTarget, Role, RoleProfile, SessionHandle
from .expectation import LayoutExpectation
from .observation import Geometry, Observation, PageMetrics
from .result import Category, Severity, ValidationResult
from .scenario import Scenario, ScenarioOutcome, ScenarioState, ScenarioStatus
from .defect import DefectRecord
from .report import RunReport

__all__ = [
    "DeviceClass",
    "DeviceProfile",
    "Credentials",
    "NavigationTarget",
    "Role",
    "RoleProfile",
    "SessionHandle",
    "LayoutExpectation",
    "Geometry",
    "Observation",
    "PageMetrics",
    "Category",
    "Severity",
    "ValidationResult",
    "Scenario",
    "ScenarioOutcome",
    "ScenarioState",
    "ScenarioStatus",
    "DefectRecord",
    "RunReport",
]
