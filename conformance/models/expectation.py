"""
Layout Expectation Data Model
"""
from pydantic import BaseModel

from .role import Role

MIN_TOUCH_TARGET_PX = 44


class LayoutExpectation(BaseModel):
    """What the UI should look like for one device/role pair."""

    device_id: str
    role: Role
    shows_compact_nav: bool
    shows_expanded_nav: bool
    expected_column_count: int
    min_touch_target_px: int = MIN_TOUCH_TARGET_PX
    margin_policy_px: int = 0  # 0 means unconstrained

    class Config:
        frozen = True
