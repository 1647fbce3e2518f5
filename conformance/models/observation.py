"""
Observation Data Models
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class Geometry(BaseModel):
    """Bounding box of an element in CSS pixels."""

    x: float
    y: float
    width: float
    height: float

    class Config:
        frozen = True

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


class Observation(BaseModel):
    """Snapshot of one element at one instant."""

    selector: str = ""
    geometry: Optional[Geometry] = None
    visible: bool = False
    viewport_width: int = 0
    viewport_height: int = 0
    text: Optional[str] = Field(default=None, description="Trimmed text content")

    class Config:
        frozen = True


class PageMetrics(BaseModel):
    """Document level measurements."""

    viewport_width: int
    viewport_height: int
    scroll_width: int
    scroll_height: int = 0

    class Config:
        frozen = True


class NavigationSnapshot(BaseModel):
    """Navigation affordances observed on one page."""

    menu_trigger: Optional[Observation] = None
    tab_bar: Optional[Observation] = None
    persistent_nav: Optional[Observation] = None

    class Config:
        frozen = True


class StateSnapshot(BaseModel):
    """The same marker observed right after navigation and once settled."""

    immediate: Optional[Observation] = None
    settled: Optional[Observation] = None

    class Config:
        frozen = True


class PageContentSnapshot(BaseModel):
    """Target markers and error indicators on a loaded page."""

    markers: List[Observation] = Field(default_factory=list)
    not_found: Optional[Observation] = None
    error_banner: Optional[Observation] = None
    url: Optional[str] = Field(default=None, description="URL the page ended up on")

    class Config:
        frozen = True
