"""
Modal Bounds Validator - dialogs must fit the viewport, with margins on small screens
"""
from typing import Optional

from .base import BaseValidator
from ..layout import SMALL_SCREEN_MAX_WIDTH
from ..models.expectation import LayoutExpectation
from ..models.observation import Observation
from ..models.result import ValidationResult
from ..models.scenario import Scenario


class ModalBoundsValidator(BaseValidator):
    """Checks the open modal's box against the viewport."""

    check_name = "modal_bounds"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: Optional[Observation]
    ) -> ValidationResult:
        if observed is None or not observed.visible or observed.geometry is None:
            return self.passed(scenario, detail="No visible modal")

        box = observed.geometry
        vw, vh = observed.viewport_width, observed.viewport_height
        actual = f"Modal at x={box.x:.0f}..{box.right:.0f}, y={box.y:.0f}..{box.bottom:.0f} in {vw}x{vh}"

        if box.x < 0 or box.y < 0 or box.right > vw or box.bottom > vh:
            return self.failed(
                scenario,
                title=f"Modal exceeds viewport at {vw}px",
                detail=f"{observed.selector} extends beyond the viewport",
                expected="Modal fully inside the viewport",
                actual=actual,
            )

        margin = expectation.margin_policy_px
        if vw < SMALL_SCREEN_MAX_WIDTH and (box.x < margin or box.right > vw - margin):
            return self.failed(
                scenario,
                title=f"Modal lacks {margin}px edge margin at {vw}px",
                detail=f"{observed.selector} is closer than {margin}px to a viewport edge",
                expected=f"At least {margin}px between modal and left/right viewport edges",
                actual=actual,
            )

        return self.passed(scenario, detail=actual)
