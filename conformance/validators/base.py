"""
Base Validator - Abstract base class for all structural checks
"""
from abc import ABC, abstractmethod
from typing import Any, Optional
import logging

from ..models.expectation import LayoutExpectation
from ..models.result import Severity, ValidationResult
from ..models.scenario import Scenario


class BaseValidator(ABC):
    """
    Abstract base class for validators.

    A validator inspects observations already taken from the driver and
    always answers with a ValidationResult. Expected-but-failed conditions
    are results with passed=False, never exceptions.
    """

    check_name: str = ""

    def __init__(self, name: str = None):
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f"validator.{self.check_name or self.name}")

    @abstractmethod
    def validate(self, scenario: Scenario, expectation: LayoutExpectation, observed: Any) -> ValidationResult:
        """
        Run the check.

        Args:
            scenario: Scenario the observations belong to
            expectation: Derived layout expectation for the scenario
            observed: Check-specific observation(s)

        Returns:
            ValidationResult for this check
        """
        pass

    def passed(self, scenario: Scenario, detail: str = "", **fields) -> ValidationResult:
        return self._result(scenario, True, detail=detail, **fields)

    def failed(
        self,
        scenario: Scenario,
        title: str,
        detail: str,
        expected: str = "",
        actual: str = "",
        severity_hint: Optional[Severity] = None,
        **fields
    ) -> ValidationResult:
        self.logger.debug(f"[{scenario.label}] {title}: {detail}")
        return self._result(
            scenario, False,
            title=title,
            detail=detail,
            expected=expected,
            actual=actual,
            severity_hint=severity_hint,
            **fields
        )

    def _result(self, scenario: Scenario, passed: bool, **fields) -> ValidationResult:
        return ValidationResult(
            check_name=self.check_name,
            passed=passed,
            device_id=scenario.device.id,
            role=scenario.role,
            path=scenario.path,
            **fields
        )

    def __repr__(self):
        return f"<{self.__class__.__name__}(check='{self.check_name}')>"
