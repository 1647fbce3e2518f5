"""
Scenario Data Models
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .device import DeviceProfile
from .role import NavigationTarget, Role


class ScenarioState(str, Enum):
    """Steps of a single scenario, in order."""

    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    NAVIGATING = "navigating"
    VALIDATING = "validating"
    REPORTING = "reporting"


class ScenarioStatus(str, Enum):
    """How a scenario ended."""

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    CANCELLED = "cancelled"


class Scenario(BaseModel):
    """One (device, role, path) triple."""

    device: DeviceProfile
    role: Role
    target: NavigationTarget

    class Config:
        frozen = True

    @property
    def path(self) -> str:
        return self.target.path

    @property
    def label(self) -> str:
        return f"{self.device.id}/{self.role.value}{self.target.path}"


class ScenarioOutcome(BaseModel):
    """Tally for one finished (or cancelled) scenario."""

    device_id: str
    role: Role
    path: str
    status: ScenarioStatus
    reached_state: ScenarioState = ScenarioState.IDLE
    checks_run: int = 0
    checks_failed: int = 0
    duration_ms: int = 0
    error: Optional[str] = None

    class Config:
        frozen = True
