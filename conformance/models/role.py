"""
Role Data Models
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr


class Role(str, Enum):
    """User roles of the application under test."""

    ADMIN = "admin"
    TRAINER = "trainer"
    CUSTOMER = "customer"


class NavigationTarget(BaseModel):
    """A role-specific page and the markers proving it rendered."""

    path: str = Field(..., description="Path relative to the base URL")
    name: str = Field(default="", description="Page name used in defect titles")
    markers: List[str] = Field(default_factory=list, description="Selectors expected on the page")
    critical: bool = Field(default=False, description="Core page for the role")

    class Config:
        frozen = True

    @property
    def label(self) -> str:
        return self.name or self.path


class RoleProfile(BaseModel):
    """Landing markers and navigation targets for one role."""

    role: Role
    landing_markers: List[str] = Field(default_factory=list)
    targets: List[NavigationTarget] = Field(default_factory=list)

    class Config:
        frozen = True

    def target(self, path: str) -> Optional[NavigationTarget]:
        for target in self.targets:
            if target.path == path:
                return target
        return None


class Credentials(BaseModel):
    """Login credentials for one role."""

    email: str
    password: SecretStr


class SessionHandle(BaseModel):
    """An established, confirmed login."""

    role: Role
    landing_url: str = ""
    established_at: str = Field(default_factory=lambda: datetime.now().isoformat())
