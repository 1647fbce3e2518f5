"""
Column Count Validator - grids collapse to one column on mobile
"""
from typing import Optional

from .base import BaseValidator
from ..models.expectation import LayoutExpectation
from ..models.result import ValidationResult
from ..models.scenario import Scenario


class ColumnCountValidator(BaseValidator):
    """
    Compact layouts must render a single column. Expanded layouts must use
    more than one; wider-than-expected desktop grids are fine.
    """

    check_name = "column_count"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: Optional[int]
    ) -> ValidationResult:
        if observed is None:
            return self.passed(scenario, detail="No grid on page")

        expected = expectation.expected_column_count
        if expectation.shows_compact_nav:
            ok = observed == expected
            expected_text = f"{expected} column"
        else:
            ok = observed >= 2
            expected_text = f"multi-column grid ({expected} columns)"

        detail = f"{observed} columns at {scenario.device.width}px"
        if ok:
            return self.passed(scenario, detail=detail)

        return self.failed(
            scenario,
            title=f"Unexpected column count for {scenario.device.width}px viewport",
            detail=detail,
            expected=f"Grid renders as {expected_text}",
            actual=f"Grid renders {observed} columns",
        )
