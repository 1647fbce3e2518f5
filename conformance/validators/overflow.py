"""
Overflow Validator - no horizontal scrolling
"""
from .base import BaseValidator
from ..models.expectation import LayoutExpectation
from ..models.observation import PageMetrics
from ..models.result import ValidationResult
from ..models.scenario import Scenario

SUBPIXEL_TOLERANCE_PX = 1


class OverflowValidator(BaseValidator):
    check_name = "horizontal_overflow"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: PageMetrics
    ) -> ValidationResult:
        limit = observed.viewport_width + SUBPIXEL_TOLERANCE_PX
        detail = f"content {observed.scroll_width}px wide in {observed.viewport_width}px viewport"

        if observed.scroll_width <= limit:
            return self.passed(scenario, detail=detail)

        return self.failed(
            scenario,
            title=f"Horizontal overflow at {observed.viewport_width}px",
            detail=detail,
            expected="Content fits within the viewport width",
            actual=f"Horizontal scrolling required ({observed.scroll_width - observed.viewport_width}px overflow)",
        )
