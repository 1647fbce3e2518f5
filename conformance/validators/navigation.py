"""
Navigation Presence Validator - the right navigation for the device class
"""
from typing import Optional

from .base import BaseValidator
from ..models.expectation import LayoutExpectation
from ..models.observation import NavigationSnapshot, Observation
from ..models.result import ValidationResult
from ..models.scenario import Scenario


def _shown(observation: Optional[Observation]) -> bool:
    return observation is not None and observation.visible


class NavigationPresenceValidator(BaseValidator):
    """
    Compact layouts need a menu trigger and a bottom/tab bar; expanded
    layouts need a persistent navigation region.
    """

    check_name = "navigation_presence"

    def validate(
        self,
        scenario: Scenario,
        expectation: LayoutExpectation,
        observed: NavigationSnapshot
    ) -> ValidationResult:
        if expectation.shows_compact_nav:
            missing = []
            if not _shown(observed.menu_trigger):
                missing.append("menu trigger")
            if not _shown(observed.tab_bar):
                missing.append("bottom navigation")
            if not missing:
                return self.passed(scenario, detail="Compact navigation visible")
            return self.failed(
                scenario,
                title="Missing mobile navigation",
                detail=f"Not visible at {scenario.device.width}px: {', '.join(missing)}",
                expected="Menu trigger and bottom/tab navigation visible on small screens",
                actual=f"Missing {' and '.join(missing)}",
            )

        if _shown(observed.persistent_nav):
            return self.passed(scenario, detail="Persistent navigation visible")
        return self.failed(
            scenario,
            title="Missing desktop navigation",
            detail=f"No persistent navigation visible at {scenario.device.width}px",
            expected="Persistent navigation region visible on wide screens",
            actual="No visible navigation region",
        )
