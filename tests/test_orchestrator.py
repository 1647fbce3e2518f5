"""
Matrix runs end to end with fake drivers.
"""
import pytest

from conformance.agents import orchestrator_agent
from conformance.errors import ConfigurationError, DriverUnavailable, UnknownDevice, UnknownRole
from conformance.models.result import Category, Severity
from conformance.models.role import Role
from conformance.models.scenario import ScenarioStatus

from tests.fakes import FakeAuthenticator, FakeDriver, all_credentials, conformant_columns, make_factory


class TestBuildMatrix:
    def test_full_matrix(self, build_orchestrator, devices, roles):
        scenarios = build_orchestrator().build_matrix()
        targets = sum(len(profile.targets) for profile in roles)
        assert len(scenarios) == len(devices) * targets

    def test_order_and_paths(self, build_orchestrator):
        scenarios = build_orchestrator().build_matrix(
            device_ids=["desktop", "iphone-se"], roles=["customer"], paths=["/customer", "/customer/progress"]
        )
        assert [s.label for s in scenarios] == [
            "desktop/customer/customer",
            "desktop/customer/customer/progress",
            "iphone-se/customer/customer",
            "iphone-se/customer/customer/progress",
        ]

    def test_unknown_device(self, build_orchestrator):
        with pytest.raises(UnknownDevice):
            build_orchestrator().build_matrix(device_ids=["nokia-3310"])

    def test_unknown_role(self, build_orchestrator):
        with pytest.raises(UnknownRole):
            build_orchestrator().build_matrix(roles=["guest"])

    def test_unknown_path(self, build_orchestrator):
        with pytest.raises(ConfigurationError):
            build_orchestrator().build_matrix(roles=["customer"], paths=["/admin"])

    def test_missing_credentials(self, build_orchestrator):
        orchestrator = build_orchestrator(credentials={Role.CUSTOMER: all_credentials()[Role.CUSTOMER]})
        with pytest.raises(ConfigurationError) as excinfo:
            orchestrator.build_matrix(roles=["customer", "admin"])
        assert "admin" in str(excinfo.value)

    def test_empty_matrix(self, build_orchestrator):
        with pytest.raises(ConfigurationError):
            build_orchestrator().build_matrix(roles=[])

    def test_parallelism_must_be_positive(self, build_orchestrator):
        with pytest.raises(ConfigurationError):
            build_orchestrator(max_parallel=-1)


@pytest.mark.asyncio
class TestOrchestratorRun:
    async def test_column_count_defect_on_small_phone(self, build_orchestrator):
        orchestrator = build_orchestrator(driver_factory=make_factory(columns=3))

        report = await orchestrator.run(
            device_ids=["iphone-se"], roles=["customer"], paths=["/customer/meal-plans"]
        )

        assert report.total_defects == 1
        defect = report.defects[0]
        assert defect.title == "Unexpected column count for 320px viewport"
        assert defect.severity is Severity.MEDIUM
        assert defect.category is Category.RESPONSIVE
        assert defect.device_ids == ["iphone-se"]
        assert defect.paths == ["/customer/meal-plans"]
        assert report.status_label == "MINOR ISSUES"
        assert report.scenario_tally.failed == 1

    async def test_conformant_matrix_is_clean(self, build_orchestrator):
        factory = make_factory()
        report = await build_orchestrator(driver_factory=factory).run(roles=["customer"])

        assert report.total_defects == 0
        assert report.status_label == "EXCELLENT"
        assert report.scenario_tally.passed == report.scenario_tally.total == 8 * 4
        assert all(driver.stopped for driver in factory.drivers)

    async def test_duplicates_across_devices_merge(self, build_orchestrator):
        orchestrator = build_orchestrator(driver_factory=make_factory(columns=3))

        report = await orchestrator.run(
            device_ids=["iphone-se", "iphone-12"], roles=["customer"], paths=["/customer/meal-plans"]
        )

        assert report.total_defects == 1
        assert report.defects[0].occurrences == 2
        assert set(report.defects[0].device_ids) == {"iphone-se", "iphone-12"}

    async def test_auth_failure_does_not_stop_other_roles(self, build_orchestrator):
        orchestrator = build_orchestrator(authenticator=FakeAuthenticator(reject={Role.TRAINER}))

        report = await orchestrator.run(device_ids=["desktop"], roles=["customer", "trainer"])

        assert report.total_defects == 1
        defect = report.defects[0]
        assert defect.severity is Severity.CRITICAL
        assert defect.category is Category.AUTHENTICATION
        assert defect.occurrences == 3
        assert report.status_label == "CRITICAL ISSUES FOUND"

        statuses = {(o.role, o.path): o.status for o in report.scenarios}
        assert statuses[(Role.CUSTOMER, "/customer/progress")] is ScenarioStatus.PASSED
        assert statuses[(Role.TRAINER, "/trainer")] is ScenarioStatus.FAILED

    async def test_driver_failure_is_isolated(self, build_orchestrator):
        def crash_small_phone(device, driver):
            if device.id == "iphone-se":
                driver.navigate_error = DriverUnavailable("Target page crashed")

        orchestrator = build_orchestrator(driver_factory=make_factory(customize=crash_small_phone))
        report = await orchestrator.run(
            device_ids=["iphone-se", "desktop"], roles=["customer"], paths=["/customer"]
        )

        assert report.scenario_tally.errored == 1
        assert report.scenario_tally.passed == 1
        assert [d.category for d in report.defects] == [Category.FUNCTIONALITY]
        assert report.defects[0].severity is Severity.CRITICAL

    async def test_context_creation_failure(self, build_orchestrator):
        async def factory(device):
            if device.id == "desktop":
                raise DriverUnavailable("Could not open browser context")
            return FakeDriver(device, columns=conformant_columns(device))

        report = await build_orchestrator(driver_factory=factory).run(
            device_ids=["desktop", "ipad"], roles=["customer"], paths=["/customer"]
        )

        assert report.scenario_tally.errored == 1
        assert report.scenario_tally.passed == 1
        assert report.defects[0].title == "Customer Dashboard could not be observed"

    async def test_browser_launch_failure_still_reports(self, build_orchestrator, monkeypatch):
        class BrokenLauncher:
            async def start(self):
                raise RuntimeError("chromium missing")

            async def stop(self):
                pass

        monkeypatch.setattr(orchestrator_agent, "BrowserLauncher", BrokenLauncher)
        orchestrator = build_orchestrator(driver_factory=None)

        report = await orchestrator.run(device_ids=["desktop"], roles=["admin"])

        assert report.scenario_tally.errored == report.scenario_tally.total == 2
        assert report.total_defects == 1
        assert report.defects[0].occurrences == 2
        assert report.status_label == "CRITICAL ISSUES FOUND"

    async def test_global_timeout_cancels_and_reports(self, build_orchestrator):
        def stall_small_phone(device, driver):
            if device.id == "iphone-se":
                driver.navigate_delay = 10

        factory = make_factory(customize=stall_small_phone)
        orchestrator = build_orchestrator(driver_factory=factory, run_timeout=0.5)

        report = await orchestrator.run(
            device_ids=["desktop", "iphone-se"], roles=["customer"], paths=["/customer"]
        )

        assert report.scenario_tally.cancelled == 1
        assert report.scenario_tally.passed == 1
        cancelled = [o for o in report.scenarios if o.status is ScenarioStatus.CANCELLED]
        assert cancelled[0].device_id == "iphone-se"
        assert not any("iphone-se" in d.device_ids for d in report.defects)
        assert any("cancelled" in r for r in report.recommendations)
        assert all(driver.stopped for driver in factory.drivers)

    async def test_parallelism_is_bounded(self, build_orchestrator):
        active = 0
        peak = 0

        async def factory(device):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            driver = FakeDriver(device, columns=conformant_columns(device), navigate_delay=0.01)

            async def stop():
                nonlocal active
                active -= 1

            driver.stop = stop
            return driver

        report = await build_orchestrator(driver_factory=factory, max_parallel=2).run(roles=["admin"])

        assert report.scenario_tally.total == 16
        assert peak == 2

    async def test_runs_are_idempotent(self, build_orchestrator, devices):
        order = [device.id for device in devices]

        def break_layout(finishing_order):
            def customize(device, driver):
                driver.columns = 3
                driver.navigate_delay = 0.002 * finishing_order.index(device.id)
                if device.is_mobile:
                    driver.elements.pop("[data-testid='mobile-navigation']", None)
            return customize

        first = await build_orchestrator(driver_factory=make_factory(customize=break_layout(order))).run(roles=["customer"])
        second = await build_orchestrator(
            driver_factory=make_factory(customize=break_layout(order[::-1]))
        ).run(roles=["customer"])

        assert [d.model_dump() for d in first.defects] == [d.model_dump() for d in second.defects]
        assert first.severity_counts == second.severity_counts

    async def test_severity_counts_match_defects(self, build_orchestrator):
        def mixed(device, driver):
            driver.columns = 3
            if device.id == "desktop":
                driver.navigate_error = DriverUnavailable("crash")

        orchestrator = build_orchestrator(
            driver_factory=make_factory(customize=mixed),
            authenticator=FakeAuthenticator(reject={Role.ADMIN}),
        )
        report = await orchestrator.run()

        assert sum(report.severity_counts.values()) == report.total_defects
        assert sum(report.category_counts.values()) == report.total_defects
        assert list(report.severity_counts) == ["CRITICAL", "HIGH", "MEDIUM", "LOW"]
        for severity, defects in report.defects_by_severity.items():
            assert len(defects) == report.severity_counts[severity]

    async def test_report_is_saved(self, build_orchestrator):
        report = await build_orchestrator().run(device_ids=["desktop"], roles=["customer"], paths=["/customer"])
        assert report.report_path is not None
        assert report.report_path.endswith(f"{report.run_id}_report.json")

    async def test_execute_uses_context(self, build_orchestrator):
        report = await build_orchestrator().execute({
            "device_ids": ["ipad"], "roles": ["trainer"], "paths": ["/trainer"], "run_id": "ctx-run",
        })
        assert report.run_id == "ctx-run"
        assert report.scenario_tally.total == 1


@pytest.mark.asyncio
class TestAccessGuard:
    async def test_guarded_routes_pass(self, build_orchestrator):
        factory = make_factory()
        report = await build_orchestrator(driver_factory=factory, check_access=True).run(
            device_ids=["desktop", "iphone-se"], roles=["customer"]
        )

        assert report.total_defects == 0
        assert report.scenario_tally.total == 8
        assert len(factory.drivers) == 9
        anonymous = [driver for driver in factory.drivers if not driver.logged_in]
        assert len(anonymous) == 1
        assert anonymous[0].device.id == "desktop"
        assert anonymous[0].visited == [
            "/customer", "/customer/meal-plans", "/customer/grocery-list", "/customer/progress",
        ]
        assert anonymous[0].stopped
        # four desktop scenarios run 8 checks, four touch scenarios 9, plus one access check per path
        assert report.check_tally.passed == 4 * 8 + 4 * 9 + 4

    async def test_open_routes_are_security_defects(self, build_orchestrator):
        def open_routes(device, driver):
            driver.guarded = False

        orchestrator = build_orchestrator(driver_factory=make_factory(customize=open_routes), check_access=True)
        report = await orchestrator.run(
            device_ids=["desktop", "iphone-se"], roles=["customer"], paths=["/customer", "/customer/progress"]
        )

        assert [d.title for d in report.defects] == [
            "Unauthorized access to /customer",
            "Unauthorized access to /customer/progress",
        ]
        for defect in report.defects:
            assert defect.severity is Severity.CRITICAL
            assert defect.category is Category.SECURITY
            assert defect.occurrences == 1
            assert defect.device_ids == ["desktop"]
            assert defect.reproduction_steps[-1] == "Expect: Redirect to the login page"
        assert report.status_label == "CRITICAL ISSUES FOUND"
        assert report.scenario_tally.passed == 4

    async def test_timed_out_access_check_reports_nothing(self, build_orchestrator):
        def stall(device, driver):
            driver.navigate_delay = 10

        factory = make_factory(customize=stall)
        orchestrator = build_orchestrator(driver_factory=factory, check_access=True, run_timeout=0.3)
        report = await orchestrator.run(device_ids=["desktop"], roles=["customer"], paths=["/customer"])

        assert report.scenario_tally.cancelled == 1
        assert report.total_defects == 0
        assert report.check_tally.total == 0
        assert all(driver.stopped for driver in factory.drivers)
