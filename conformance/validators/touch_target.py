"""
Touch Target Validator - interactive elements must be at least 44px on their short side
"""
from typing import List

from .base import BaseValidator
from ..models.expectation import LayoutExpectation
from ..models.observation import Observation
from ..models.result import ValidationResult
from ..models.scenario import Scenario

MAX_REPORTED_ELEMENTS = 5


class TouchTargetValidator(BaseValidator):
    """Checks every visible interactive element against the touch floor."""

    check_name = "touch_target"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: List[Observation]
    ) -> ValidationResult:
        floor = expectation.min_touch_target_px
        checked = 0
        too_small = []

        for element in observed:
            # Hidden elements cannot be tapped
            if not element.visible or element.geometry is None:
                continue
            checked += 1
            box = element.geometry
            if min(box.width, box.height) < floor:
                too_small.append(f"{element.text or element.selector} ({box.width:.0f}x{box.height:.0f})")

        if not too_small:
            return self.passed(scenario, detail=f"{checked} visible targets meet {floor}px")

        listed = ", ".join(too_small[:MAX_REPORTED_ELEMENTS])
        if len(too_small) > MAX_REPORTED_ELEMENTS:
            listed += f" and {len(too_small) - MAX_REPORTED_ELEMENTS} more"

        return self.failed(
            scenario,
            title=f"Touch targets smaller than {floor}px",
            detail=f"{len(too_small)} of {checked} visible targets are too small: {listed}",
            expected=f"Every visible interactive element is at least {floor}x{floor}px",
            actual=f"{len(too_small)} elements below {floor}px on their short side",
        )
