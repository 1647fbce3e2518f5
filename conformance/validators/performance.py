"""
Performance Budget Validator - device-power-scaled load time budgets
"""
import time
from typing import Awaitable, Callable, Tuple

from .base import BaseValidator
from ..config import settings
from ..models.device import DeviceProfile
from ..models.expectation import LayoutExpectation
from ..models.result import ValidationResult
from ..models.scenario import Scenario


class PerformanceBudgetValidator(BaseValidator):
    """
    Times a caller-supplied action against a budget.

    Low-power devices (width <= 375) get the base budget multiplied by
    low_power_factor.
    """

    check_name = "performance_budget"

    def __init__(self, base_budget_ms: int = None, low_power_factor: float = None):
        super().__init__()
        self.base_budget_ms = base_budget_ms or settings.LOAD_BUDGET_MS
        self.low_power_factor = low_power_factor or settings.LOW_POWER_BUDGET_FACTOR

    def budget_for(self, device: DeviceProfile) -> int:
        if device.is_low_power:
            return int(self.base_budget_ms * self.low_power_factor)
        return self.base_budget_ms

    async def measure(
        self,
        action: Callable[[], Awaitable],
        scenario: Scenario,
        expectation: LayoutExpectation
    ) -> Tuple[ValidationResult, object]:
        """
        Run and time an action.

        Errors raised by the action propagate unchanged; only completed
        actions are judged against the budget.

        Args:
            action: Zero-argument coroutine function, e.g. a navigation
            scenario: Scenario being measured
            expectation: Layout expectation for the scenario

        Returns:
            The ValidationResult and whatever the action returned
        """
        started = time.perf_counter()
        value = await action()
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return self.validate(scenario, expectation, elapsed_ms), value

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: int
    ) -> ValidationResult:
        budget = self.budget_for(scenario.device)
        detail = f"{scenario.path} loaded in {observed}ms (budget {budget}ms)"

        if observed < budget:
            return self.passed(scenario, detail=detail, duration_ms=observed)

        return self.failed(
            scenario,
            title=f"{scenario.target.label} slow loading",
            detail=detail,
            expected=f"Load in under {budget}ms on {scenario.device.label}",
            actual=f"Took {observed}ms",
            duration_ms=observed,
        )
