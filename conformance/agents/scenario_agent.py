"""
Scenario Agent - Drives one (device, role, path) scenario through its state machine
"""
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .base_agent import BaseAgent
from .. import selectors
from ..aggregator import AUTHENTICATION, DRIVER, SCENARIO_ERROR, DefectAggregator
from ..browser.artifact_capture import ArtifactCapture
from ..browser.auth import BaseAuthenticator
from ..browser.driver import BaseDriver
from ..config import settings
from ..errors import AuthError, DriverError, DriverTimeout
from ..layout import derive_expectation
from ..models.expectation import LayoutExpectation
from ..models.observation import NavigationSnapshot, Observation, PageContentSnapshot, StateSnapshot
from ..models.result import ValidationResult
from ..models.role import Credentials
from ..models.scenario import Scenario, ScenarioOutcome, ScenarioState, ScenarioStatus
from ..validators import (
    ColumnCountValidator,
    ModalBoundsValidator,
    NavigationPresenceValidator,
    OverflowValidator,
    PageContentValidator,
    PerformanceBudgetValidator,
    StateConsistencyValidator,
    TouchTargetValidator,
)

TRANSITIONS = {
    ScenarioState.IDLE: {ScenarioState.AUTHENTICATING},
    ScenarioState.AUTHENTICATING: {ScenarioState.NAVIGATING, ScenarioState.REPORTING},
    ScenarioState.NAVIGATING: {ScenarioState.VALIDATING, ScenarioState.REPORTING},
    ScenarioState.VALIDATING: {ScenarioState.REPORTING},
    ScenarioState.REPORTING: {ScenarioState.IDLE},
}

Entry = Tuple[ValidationResult, List[str], List[str]]


def authentication_failure(scenario: Scenario, reason: str) -> ValidationResult:
    return ValidationResult(
        check_name=AUTHENTICATION,
        passed=False,
        device_id=scenario.device.id,
        role=scenario.role,
        path=scenario.path,
        title=f"{scenario.role.value.capitalize()} authentication failure",
        detail=reason,
        expected=f"Logged in as {scenario.role.value} and landing page shown",
        actual=reason,
    )


def driver_failure(scenario: Scenario, reason: str) -> ValidationResult:
    return ValidationResult(
        check_name=DRIVER,
        passed=False,
        device_id=scenario.device.id,
        role=scenario.role,
        path=scenario.path,
        title=f"{scenario.target.label} could not be observed",
        detail=reason,
        expected="Page loads and can be inspected",
        actual=reason,
    )


def scenario_error(scenario: Scenario, reason: str) -> ValidationResult:
    return ValidationResult(
        check_name=SCENARIO_ERROR,
        passed=False,
        device_id=scenario.device.id,
        role=scenario.role,
        path=scenario.path,
        title="Scenario aborted unexpectedly",
        detail=reason,
        expected="Scenario runs to completion",
        actual=reason,
    )


def base_steps(scenario: Scenario) -> List[str]:
    """Reproduction steps shared by every check of a scenario."""
    device = scenario.device
    return [
        f"Open a {device.width}x{device.height} viewport ({device.name or device.id})",
        f"Log in as {scenario.role.value}",
        f"Navigate to {scenario.path}",
    ]


class ScenarioAgent(BaseAgent):
    """
    Runs a single scenario:
    - Authenticates and confirms the session via a landing marker
    - Navigates to the target while timing the load
    - Gathers observations and runs every structural validator
    - Hands all results to the aggregator in one batch

    Steps are strictly sequential; the state machine enforces
    IDLE -> AUTHENTICATING -> NAVIGATING -> VALIDATING -> REPORTING -> IDLE,
    with early exits to REPORTING after an auth or driver failure.
    """

    def __init__(
        self,
        scenario: Scenario,
        driver: BaseDriver,
        authenticator: BaseAuthenticator,
        aggregator: DefectAggregator,
        credentials: Credentials,
        landing_markers: Sequence[str],
        artifact_capture: Optional[ArtifactCapture] = None,
        performance: Optional[PerformanceBudgetValidator] = None
    ):
        super().__init__(
            name=f"Scenario_{scenario.label}",
            description="Drives one device/role/path scenario"
        )
        self.scenario = scenario
        self.driver = driver
        self.authenticator = authenticator
        self.aggregator = aggregator
        self.credentials = credentials
        self.landing_markers = list(landing_markers)
        self.artifact_capture = artifact_capture
        self.performance = performance or PerformanceBudgetValidator()

        self.state = ScenarioState.IDLE
        self.history: List[ScenarioState] = [ScenarioState.IDLE]
        self._entries: List[Entry] = []
        self._immediate: Optional[Observation] = None
        self._error: Optional[str] = None
        self._driver_failed = False

    async def execute(self, context: Dict[str, Any]) -> ScenarioOutcome:
        """Run the scenario."""
        return await self.run()

    async def run(self) -> ScenarioOutcome:
        """
        Drive the scenario to completion.

        Cancellation propagates out of any await; buffered results are then
        dropped and nothing reaches the aggregator.

        Returns:
            ScenarioOutcome with check counts and final status
        """
        started = time.perf_counter()
        self.log_debug("Starting")

        self._transition(ScenarioState.AUTHENTICATING)
        try:
            if await self._authenticate():
                self._transition(ScenarioState.NAVIGATING)
                expectation = derive_expectation(self.scenario.device, self.scenario.role)
                await self._navigate(expectation)
                self._transition(ScenarioState.VALIDATING)
                await self._validate(expectation)
        except DriverError as e:
            self.log_error(f"Driver failure in {self.state.value}: {e}")
            self._driver_failed = True
            self._error = str(e)
            self._record(driver_failure(self.scenario, str(e)))
        except Exception as e:
            self.log_error(f"Unexpected error in {self.state.value}: {e!r}")
            self._driver_failed = True
            self._error = repr(e)
            self._record(scenario_error(self.scenario, repr(e)))

        reached = self.state
        self._transition(ScenarioState.REPORTING)
        await self._flush()
        self._transition(ScenarioState.IDLE)

        failed = sum(1 for result, _, _ in self._entries if not result.passed)
        if self._driver_failed:
            status = ScenarioStatus.ERROR
        elif failed:
            status = ScenarioStatus.FAILED
        else:
            status = ScenarioStatus.PASSED

        outcome = ScenarioOutcome(
            device_id=self.scenario.device.id,
            role=self.scenario.role,
            path=self.scenario.path,
            status=status,
            reached_state=reached,
            checks_run=len(self._entries),
            checks_failed=failed,
            duration_ms=int((time.perf_counter() - started) * 1000),
            error=self._error,
        )
        self.log_info(f"{status.value}: {failed}/{len(self._entries)} checks failed")
        return outcome

    def _transition(self, new_state: ScenarioState):
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal scenario transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    async def _authenticate(self) -> bool:
        scenario = self.scenario
        try:
            await self.authenticator.login(self.driver, scenario.role, self.credentials)
        except AuthError as e:
            self._record(authentication_failure(scenario, e.reason))
            return False

        try:
            await self.driver.wait_for(self.landing_markers, settings.AUTH_TIMEOUT)
        except DriverTimeout:
            self._record(authentication_failure(
                scenario,
                f"No {scenario.role.value} landing marker within {settings.AUTH_TIMEOUT}ms after login",
            ))
            return False

        self._record(ValidationResult(
            check_name=AUTHENTICATION,
            passed=True,
            device_id=scenario.device.id,
            role=scenario.role,
            path=scenario.path,
            detail=f"Logged in as {scenario.role.value}",
        ))
        return True

    async def _navigate(self, expectation: LayoutExpectation):
        target = self.scenario.target
        result, _ = await self.performance.measure(
            lambda: self.driver.navigate(target.path),
            self.scenario,
            expectation,
        )
        if target.markers:
            self._immediate = await self.driver.observe(target.markers)
        await self.driver.settle()
        self._record(result)

    async def _validate(self, expectation: LayoutExpectation):
        scenario = self.scenario
        driver = self.driver

        metrics = await driver.page_metrics()
        self._record(OverflowValidator().validate(scenario, expectation, metrics))

        navigation = NavigationSnapshot(
            menu_trigger=await driver.observe(selectors.MENU_TRIGGER),
            tab_bar=await driver.observe(selectors.TAB_BAR),
            persistent_nav=await driver.observe(selectors.PERSISTENT_NAV),
        )
        self._record(NavigationPresenceValidator().validate(scenario, expectation, navigation))

        if scenario.device.touch:
            targets = await driver.observe_all(selectors.INTERACTIVE, visible_only=True)
            self._record(TouchTargetValidator().validate(scenario, expectation, targets))

        modal = await driver.observe(selectors.MODAL)
        self._record(ModalBoundsValidator().validate(scenario, expectation, modal))

        columns = await driver.grid_column_count(selectors.GRID)
        self._record(ColumnCountValidator().validate(scenario, expectation, columns))

        markers = []
        if scenario.target.markers:
            settled = await driver.observe(scenario.target.markers)
            state = StateSnapshot(immediate=self._immediate, settled=settled)
            self._record(StateConsistencyValidator().validate(scenario, expectation, state))
            markers = [settled] if settled is not None else []

        content = PageContentSnapshot(
            markers=markers,
            not_found=await driver.observe(selectors.NOT_FOUND),
            error_banner=await driver.observe(selectors.ERROR_BANNER),
            url=driver.current_url(),
        )
        self._record(PageContentValidator().validate(scenario, expectation, content))

    def _record(self, result: ValidationResult):
        steps = base_steps(self.scenario)
        if self.state is ScenarioState.AUTHENTICATING:
            steps = steps[:2]
        if not result.passed and result.expected:
            steps.append(f"Expect: {result.expected}")
        self._entries.append((result, steps, []))

    async def _flush(self):
        evidence: List[str] = []
        has_failures = any(not result.passed for result, _, _ in self._entries)
        if has_failures and self.artifact_capture is not None and settings.CAPTURE_SCREENSHOTS:
            evidence = await self.artifact_capture.capture_failure(self.driver, self.scenario.label)

        await self.aggregator.submit_batch([
            (result, steps, evidence if not result.passed else [])
            for result, steps, _ in self._entries
        ])
