"""
State Consistency Validator - content must not change or vanish once the page settles
"""
from .base import BaseValidator
from ..models.expectation import LayoutExpectation
from ..models.observation import StateSnapshot
from ..models.result import ValidationResult
from ..models.scenario import Scenario


class StateConsistencyValidator(BaseValidator):
    """
    Compares a marker observed immediately after navigation with the same
    marker after the page settled. Content that was not rendered yet is
    fine; content that was shown and then disappeared or changed is a race.
    """

    check_name = "state_consistency"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: StateSnapshot
    ) -> ValidationResult:
        immediate, settled = observed.immediate, observed.settled

        if immediate is None or not immediate.visible:
            return self.passed(scenario, detail="Nothing rendered before settling")

        selector = immediate.selector
        if settled is None or not settled.visible:
            return self.failed(
                scenario,
                title=f"{scenario.target.label} content disappears after load",
                detail=f"{selector} was visible immediately but not after settling",
                expected="Content shown on first render stays visible",
                actual="Content vanished once network activity finished",
            )

        if (immediate.text or "") != (settled.text or ""):
            return self.failed(
                scenario,
                title=f"{scenario.target.label} content changes after load",
                detail=f"{selector} text changed while the page settled",
                expected=f"Stable content: {immediate.text!r}",
                actual=f"Settled content: {settled.text!r}",
            )

        return self.passed(scenario, detail=f"{selector} stable")
