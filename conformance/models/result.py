"""
Validation Result Data Models
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .role import Role


class Severity(str, Enum):
    """Defect severity, totally ordered CRITICAL > HIGH > MEDIUM > LOW."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def weight(self) -> int:
        return _SEVERITY_WEIGHTS[self]

    @classmethod
    def ordered(cls) -> List["Severity"]:
        """All severities, most severe first."""
        return sorted(cls, key=lambda s: s.weight, reverse=True)

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight < other.weight

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight <= other.weight

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight > other.weight

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight >= other.weight


_SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class Category(str, Enum):
    """Defect category."""

    AUTHENTICATION = "Authentication"
    UI_UX = "UI/UX"
    PERFORMANCE = "Performance"
    SECURITY = "Security"
    FUNCTIONALITY = "Functionality"
    RESPONSIVE = "Responsive"
    DATA = "Data"


class ValidationResult(BaseModel):
    """Outcome of one check against one scenario."""

    check_name: str
    passed: bool
    device_id: str
    role: Role
    path: str
    title: str = Field(default="", description="Short defect title, used for deduplication")
    detail: str = ""
    expected: str = ""
    actual: str = ""
    severity_hint: Optional[Severity] = None
    category_hint: Optional[Category] = None
    duration_ms: Optional[int] = None

    class Config:
        frozen = True
