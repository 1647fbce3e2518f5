"""
Orchestrator Agent - Builds the scenario matrix and runs it concurrently
"""
import asyncio
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, Union

from .base_agent import BaseAgent
from .reporter_agent import ReporterAgent
from .scenario_agent import ScenarioAgent, base_steps, driver_failure, scenario_error
from ..aggregator import DefectAggregator
from ..browser.artifact_capture import ArtifactCapture
from ..browser.auth import BaseAuthenticator, FormLoginAuthenticator
from ..browser.controller import BrowserLauncher
from ..browser.driver import BaseDriver
from ..config import settings
from ..errors import ConfigurationError, DriverError
from ..layout import derive_expectation
from ..models.device import DeviceProfile
from ..models.report import RunReport
from ..models.role import Credentials, Role
from ..models.scenario import Scenario, ScenarioOutcome, ScenarioState, ScenarioStatus
from ..registry import DeviceRegistry, RoleRegistry
from ..utils.helpers import timestamp_now
from ..validators import AccessGuardValidator, PerformanceBudgetValidator

DriverFactory = Callable[[DeviceProfile], Awaitable[BaseDriver]]


def access_steps(scenario: Scenario) -> List[str]:
    device = scenario.device
    return [
        f"Open a {device.width}x{device.height} viewport with no session",
        f"Navigate to {scenario.path} without logging in",
    ]


class OrchestratorAgent(BaseAgent):
    """
    Orchestrates a matrix run:
    - Expands device x role x path into scenarios, failing fast on bad config
    - Runs scenarios concurrently up to a parallelism limit
    - Gives each scenario its own isolated browser context
    - Opens every role path once without a session to check access guards
    - Cancels whatever is still running at the global timeout
    - Always produces a RunReport
    """

    def __init__(
        self,
        devices: DeviceRegistry = None,
        roles: RoleRegistry = None,
        authenticator: BaseAuthenticator = None,
        driver_factory: DriverFactory = None,
        credentials: Dict[Role, Credentials] = None,
        max_parallel: int = None,
        run_timeout: float = None,
        reporter: ReporterAgent = None,
        capture_artifacts: bool = None,
        performance: PerformanceBudgetValidator = None,
        check_access: bool = None
    ):
        super().__init__(
            name="Orchestrator",
            description="Runs the device/role/path matrix"
        )
        self.devices = devices or DeviceRegistry()
        self.roles = roles or RoleRegistry()
        self.authenticator = authenticator or FormLoginAuthenticator()
        self.driver_factory = driver_factory
        self.credentials = credentials
        self.max_parallel = max_parallel or settings.MAX_PARALLEL_SCENARIOS
        self.run_timeout = run_timeout or settings.RUN_TIMEOUT
        self.reporter = reporter or ReporterAgent()
        self.capture_artifacts = settings.CAPTURE_SCREENSHOTS if capture_artifacts is None else capture_artifacts
        self.performance = performance or PerformanceBudgetValidator()
        self.check_access = settings.CHECK_ACCESS_GUARD if check_access is None else check_access
        self.access_guard = AccessGuardValidator()

        if self.max_parallel < 1:
            raise ConfigurationError("max_parallel must be at least 1")

    async def execute(self, context: Dict[str, Any]) -> RunReport:
        """Execute a matrix run."""
        return await self.run(
            device_ids=context.get("device_ids"),
            roles=context.get("roles"),
            paths=context.get("paths"),
            run_id=context.get("run_id")
        )

    def credentials_for(self, role: Role) -> Optional[Credentials]:
        if self.credentials is not None:
            return self.credentials.get(role)
        return settings.credentials_for(role)

    def build_matrix(
        self,
        device_ids: Optional[Iterable[str]] = None,
        roles: Optional[Iterable[Union[Role, str]]] = None,
        paths: Optional[Iterable[str]] = None
    ) -> List[Scenario]:
        """
        Expand the selection into scenarios.

        Args:
            device_ids: Devices to include, all registered devices when None
            roles: Roles to include, all registered roles when None
            paths: Restrict each role to these of its paths, all when None

        Returns:
            Scenarios ordered by device, then role, then path

        Raises:
            ConfigurationError: unknown device, role or path, a role without
                credentials or landing markers, or an empty matrix
        """
        devices = self.devices.select(device_ids)
        role_profiles = [self.roles.get(r) for r in (roles if roles is not None else self.roles.roles())]
        wanted_paths = set(paths) if paths is not None else None

        for profile in role_profiles:
            if self.credentials_for(profile.role) is None:
                raise ConfigurationError(f"No credentials configured for role {profile.role.value!r}")
            if not profile.landing_markers:
                raise ConfigurationError(f"Role {profile.role.value!r} has no landing markers")

        if wanted_paths is not None:
            known = {t.path for p in role_profiles for t in p.targets}
            unknown = sorted(wanted_paths - known)
            if unknown:
                raise ConfigurationError(f"Paths not mapped to any selected role: {', '.join(unknown)}")

        scenarios = [
            Scenario(device=device, role=profile.role, target=target)
            for device in devices
            for profile in role_profiles
            for target in profile.targets
            if wanted_paths is None or target.path in wanted_paths
        ]
        if not scenarios:
            raise ConfigurationError("The selected matrix contains no scenarios")
        return scenarios

    async def run(
        self,
        device_ids: Optional[Iterable[str]] = None,
        roles: Optional[Iterable[Union[Role, str]]] = None,
        paths: Optional[Iterable[str]] = None,
        run_id: Optional[str] = None
    ) -> RunReport:
        """
        Run the matrix and report.

        Configuration errors raise before any browser work starts. Everything
        after that ends up in the report.

        Returns:
            RunReport of the run
        """
        scenarios = self.build_matrix(device_ids, roles, paths)
        run_id = run_id or str(uuid.uuid4())[:8]
        self.log_info(f"Run {run_id}: {len(scenarios)} scenarios, parallelism {self.max_parallel}")

        aggregator = DefectAggregator(run_id)
        artifact_capture = ArtifactCapture(run_id) if self.capture_artifacts else None
        started_at = timestamp_now()
        started = time.perf_counter()

        launcher = None
        factory = self.driver_factory
        launch_error = None
        if factory is None:
            launcher = BrowserLauncher()
            try:
                await launcher.start()
                factory = launcher.new_driver
            except Exception as e:
                self.log_error(f"Browser launch failed: {e}")
                launch_error = f"Browser could not be launched: {e}"

        try:
            if launch_error is not None:
                outcomes = await self._fail_all(scenarios, aggregator, launch_error)
            else:
                outcomes = await self._run_all(scenarios, factory, aggregator, artifact_capture)
        finally:
            if launcher is not None:
                await launcher.stop()

        duration_ms = int((time.perf_counter() - started) * 1000)
        report = await self.reporter.generate_report(
            run_id=run_id,
            aggregator=aggregator,
            outcomes=outcomes,
            started_at=started_at,
            finished_at=timestamp_now(),
            duration_ms=duration_ms,
            artifact_capture=artifact_capture,
            base_url=settings.BASE_URL
        )
        await aggregator.close()
        return report

    async def _run_all(
        self,
        scenarios: List[Scenario],
        factory: DriverFactory,
        aggregator: DefectAggregator,
        artifact_capture: Optional[ArtifactCapture]
    ) -> List[ScenarioOutcome]:
        semaphore = asyncio.Semaphore(self.max_parallel)
        tasks = [
            asyncio.ensure_future(self._run_one(scenario, factory, aggregator, artifact_capture, semaphore))
            for scenario in scenarios
        ]

        guard = None
        if self.check_access:
            guard = asyncio.ensure_future(self._check_access(scenarios, factory, aggregator, semaphore))

        waiting = (tasks + [guard]) if guard is not None else tasks
        _, pending = await asyncio.wait(waiting, timeout=self.run_timeout)
        if pending:
            self.log_warning(f"Run timeout after {self.run_timeout}s, cancelling {len(pending)} tasks")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if guard is not None and not guard.cancelled() and guard.exception() is not None:
            self.log_error(f"Access check crashed: {guard.exception()!r}")

        outcomes = []
        for scenario, task in zip(scenarios, tasks):
            if task.cancelled():
                outcomes.append(self._outcome(scenario, ScenarioStatus.CANCELLED))
            elif task.exception() is not None:
                error = task.exception()
                self.log_error(f"{scenario.label} crashed: {error!r}")
                outcomes.append(self._outcome(scenario, ScenarioStatus.ERROR, error=repr(error)))
            else:
                outcomes.append(task.result())
        return outcomes

    async def _run_one(
        self,
        scenario: Scenario,
        factory: DriverFactory,
        aggregator: DefectAggregator,
        artifact_capture: Optional[ArtifactCapture],
        semaphore: asyncio.Semaphore
    ) -> ScenarioOutcome:
        async with semaphore:
            try:
                driver = await factory(scenario.device)
            except Exception as e:
                self.log_error(f"{scenario.label}: no browser context: {e!r}")
                result = self._context_failure(scenario, e)
                await aggregator.submit(result, base_steps(scenario)[:1])
                return self._outcome(scenario, ScenarioStatus.ERROR, error=result.detail, checks_failed=1)

            try:
                agent = ScenarioAgent(
                    scenario=scenario,
                    driver=driver,
                    authenticator=self.authenticator,
                    aggregator=aggregator,
                    credentials=self.credentials_for(scenario.role),
                    landing_markers=self.roles.get(scenario.role).landing_markers,
                    artifact_capture=artifact_capture,
                    performance=self.performance,
                )
                return await agent.run()
            finally:
                await driver.stop()

    async def _check_access(
        self,
        scenarios: List[Scenario],
        factory: DriverFactory,
        aggregator: DefectAggregator,
        semaphore: asyncio.Semaphore
    ):
        """
        Open each distinct role path in a fresh context that never logs in.

        Every path is expected to bounce to the login page. The first device
        of the matrix is used, and all results land in one batch once every
        path has been visited.
        """
        guarded: Dict[Tuple[Role, str], Scenario] = {}
        for scenario in scenarios:
            guarded.setdefault((scenario.role, scenario.path), scenario)

        entries = []
        async with semaphore:
            first = scenarios[0]
            try:
                driver = await factory(first.device)
            except Exception as e:
                self.log_error(f"Access check: no browser context: {e!r}")
                await aggregator.submit(self._context_failure(first, e), access_steps(first)[:1])
                return

            try:
                for scenario in guarded.values():
                    try:
                        await driver.navigate(scenario.path)
                        await driver.settle()
                        landed = driver.current_url()
                    except DriverError as e:
                        self.log_error(f"Access check of {scenario.path} failed: {e}")
                        entries.append((driver_failure(scenario, str(e)), access_steps(scenario), []))
                        continue
                    expectation = derive_expectation(scenario.device, scenario.role)
                    result = self.access_guard.validate(scenario, expectation, landed)
                    steps = access_steps(scenario)
                    if not result.passed:
                        steps.append(f"Expect: {result.expected}")
                    entries.append((result, steps, []))
            finally:
                await driver.stop()

        await aggregator.submit_batch(entries)

    async def _fail_all(
        self,
        scenarios: List[Scenario],
        aggregator: DefectAggregator,
        reason: str
    ) -> List[ScenarioOutcome]:
        await aggregator.submit_batch([
            (scenario_error(s, reason), base_steps(s)[:1], []) for s in scenarios
        ])
        return [
            self._outcome(s, ScenarioStatus.ERROR, error=reason, checks_failed=1)
            for s in scenarios
        ]

    def _context_failure(self, scenario: Scenario, error: Exception):
        if isinstance(error, DriverError):
            return driver_failure(scenario, str(error))
        return scenario_error(scenario, repr(error))

    def _outcome(
        self,
        scenario: Scenario,
        status: ScenarioStatus,
        error: Optional[str] = None,
        checks_failed: int = 0
    ) -> ScenarioOutcome:
        return ScenarioOutcome(
            device_id=scenario.device.id,
            role=scenario.role,
            path=scenario.path,
            status=status,
            reached_state=ScenarioState.IDLE,
            checks_run=checks_failed,
            checks_failed=checks_failed,
            error=error,
        )
