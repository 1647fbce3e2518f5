"""
Access Guard Validator - protected paths must bounce anonymous visitors to login
"""
from typing import Optional
from urllib.parse import urlparse

from .base import BaseValidator
from ..config import settings
from ..models.expectation import LayoutExpectation
from ..models.result import ValidationResult
from ..models.scenario import Scenario


class AccessGuardValidator(BaseValidator):
    """Checks where a role path lands when opened without a session."""

    check_name = "access_guard"

    def __init__(self, login_path: str = None):
        super().__init__()
        self.login_path = login_path or settings.LOGIN_PATH

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: Optional[str]
    ) -> ValidationResult:
        landed = urlparse(observed or "").path

        if self._is_login(landed):
            return self.passed(scenario, detail=f"{scenario.path} redirects to {landed}")

        return self.failed(
            scenario,
            title=f"Unauthorized access to {scenario.path}",
            detail=f"Protected route {scenario.path} can be accessed without authentication",
            expected="Redirect to the login page",
            actual=f"Landed on {observed or 'an unknown page'} without a session",
        )

    def _is_login(self, path: str) -> bool:
        if path.rstrip("/") == self.login_path.rstrip("/"):
            return True
        return "login" in path.lower().split("/")
