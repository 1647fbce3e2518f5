"""
Device Profile Data Model
"""
from enum import Enum

from pydantic import BaseModel, Field

# Width thresholds, in CSS pixels
MOBILE_MAX_WIDTH = 768  # exclusive: width < 768 is mobile-class
TABLET_MAX_WIDTH = 1024  # inclusive
LOW_POWER_MAX_WIDTH = 375  # inclusive


class DeviceClass(str, Enum):
    """Layout bucket a viewport falls into."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class DeviceProfile(BaseModel):
    """A named viewport / device the matrix is run against."""

    id: str = Field(..., min_length=1, description="Registry key")
    name: str = Field(default="", description="Human readable name")
    width: int = Field(..., gt=0, description="Viewport width in px")
    height: int = Field(..., gt=0, description="Viewport height in px")
    pixel_ratio: float = Field(default=1.0, gt=0, description="Device scale factor")
    touch: bool = Field(default=False, description="Touch input instead of pointer")

    class Config:
        frozen = True

    @property
    def label(self) -> str:
        return f"{self.name or self.id} ({self.width}x{self.height})"

    @property
    def device_class(self) -> DeviceClass:
        if self.width < MOBILE_MAX_WIDTH:
            return DeviceClass.MOBILE
        if self.width <= TABLET_MAX_WIDTH:
            return DeviceClass.TABLET
        return DeviceClass.DESKTOP

    @property
    def is_mobile(self) -> bool:
        return self.device_class is DeviceClass.MOBILE

    @property
    def is_low_power(self) -> bool:
        # Small handsets stand in for the slow hardware tier
        return self.width <= LOW_POWER_MAX_WIDTH
