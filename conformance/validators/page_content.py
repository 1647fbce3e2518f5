"""
Page Content Validator - the target page actually rendered
"""
from typing import Optional
from urllib.parse import urlparse

from .base import BaseValidator
from ..config import settings
from ..models.expectation import LayoutExpectation
from ..models.observation import PageContentSnapshot
from ..models.result import Severity, ValidationResult
from ..models.scenario import Scenario
from ..utils.helpers import truncate_text

# Path segments that mean the app sent us somewhere else
BOUNCE_SEGMENTS = {"login", "404", "error"}


def redirected_to(target_path: str, url: Optional[str]) -> Optional[str]:
    """
    Where a page bounced to, if it did.

    Args:
        target_path: Path that was requested
        url: URL the browser ended up on

    Returns:
        The landed path when it is a login, not-found or error page the
        target itself is not, else None
    """
    if not url:
        return None
    landed = urlparse(url).path
    if landed.rstrip("/") == target_path.rstrip("/"):
        return None
    if landed.rstrip("/") == settings.LOGIN_PATH.rstrip("/"):
        return landed
    wanted = set(target_path.lower().split("/"))
    segments = set(landed.lower().split("/"))
    if (segments & BOUNCE_SEGMENTS) - wanted:
        return landed
    return None


class PageContentValidator(BaseValidator):
    """Target reached, markers visible, no not-found page or error banner."""

    check_name = "page_content"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: PageContentSnapshot
    ) -> ValidationResult:
        target = scenario.target
        severity = Severity.HIGH if target.critical else Severity.MEDIUM
        inaccessible = Severity.CRITICAL if target.critical else Severity.HIGH

        landed = redirected_to(target.path, observed.url)
        if landed is not None:
            return self.failed(
                scenario,
                title=f"{target.label} page not accessible",
                detail=f"Cannot access {target.label} page at {target.path}",
                expected=f"{target.label} renders for {scenario.role.value}",
                actual=f"Redirected to {landed}",
                severity_hint=inaccessible,
            )

        if observed.not_found is not None and observed.not_found.visible:
            return self.failed(
                scenario,
                title=f"{target.label} page not accessible",
                detail=f"{target.path} shows a not-found page",
                expected=f"{target.label} renders for {scenario.role.value}",
                actual="Page not found",
                severity_hint=inaccessible,
            )

        if observed.error_banner is not None and observed.error_banner.visible:
            message = truncate_text(observed.error_banner.text or "Error banner visible", 200)
            return self.failed(
                scenario,
                title=f"{target.label} shows an error",
                detail=message,
                expected="Page loads without errors",
                actual=message,
                severity_hint=severity,
            )

        if target.markers and not any(m.visible for m in observed.markers):
            return self.failed(
                scenario,
                title=f"{target.label} page appears empty",
                detail=f"None of {', '.join(target.markers)} visible",
                expected="Page content rendered",
                actual="Expected content markers missing",
                severity_hint=severity,
            )

        return self.passed(scenario, detail=f"{target.label} rendered")
