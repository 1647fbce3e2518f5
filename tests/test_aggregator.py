"""
Defect aggregation: classification, deduplication and ordering.
"""
import asyncio

import pytest

from conformance.aggregator import AUTHENTICATION, DefectAggregator, classify, dedup_key
from conformance.models.result import Category, Severity, ValidationResult
from conformance.models.role import Role


def _result(check_name="column_count", passed=False, device_id="iphone-se", title=None, **fields):
    return ValidationResult(
        check_name=check_name,
        passed=passed,
        device_id=device_id,
        role=fields.pop("role", Role.CUSTOMER),
        path=fields.pop("path", "/customer/meal-plans"),
        title=title if title is not None else "Unexpected column count for 320px viewport",
        detail="3 columns at 320px",
        expected="Grid renders as 1 column",
        actual="Grid renders 3 columns",
        **fields
    )


class TestClassify:
    def test_table_lookup(self):
        defect_class = classify(_result())
        assert defect_class.severity is Severity.MEDIUM
        assert defect_class.category is Category.RESPONSIVE

    def test_authentication_is_critical(self):
        defect_class = classify(_result(check_name=AUTHENTICATION, title="Customer authentication failure"))
        assert defect_class.severity is Severity.CRITICAL
        assert defect_class.category is Category.AUTHENTICATION

    def test_hints_override_table(self):
        defect_class = classify(_result(check_name="page_content", severity_hint=Severity.CRITICAL))
        assert defect_class.severity is Severity.CRITICAL
        assert defect_class.category is Category.FUNCTIONALITY

    def test_unknown_check_falls_back(self):
        defect_class = classify(_result(check_name="something_new"))
        assert defect_class.severity is Severity.MEDIUM

    def test_dedup_key_ignores_numbers_and_case(self):
        first = dedup_key("horizontal_overflow", Category.RESPONSIVE, "Horizontal overflow at 375px")
        second = dedup_key("horizontal_overflow", Category.RESPONSIVE, "horizontal overflow at 320px")
        assert first == second


@pytest.mark.asyncio
class TestDefectAggregator:
    async def test_passes_are_counted_not_promoted(self, aggregator):
        record = await aggregator.submit(_result(passed=True, title=""))
        assert record is None
        assert await aggregator.defects() == []
        assert await aggregator.check_counts() == (1, 0)

    async def test_failure_is_promoted(self, aggregator):
        record = await aggregator.submit(_result(), ["Open a 320x568 viewport"], ["shot.png"])
        assert record.id.startswith("BUG-")
        assert record.severity is Severity.MEDIUM
        assert record.category is Category.RESPONSIVE
        assert record.title == "Unexpected column count for 320px viewport"
        assert record.reproduction_steps == ["Open a 320x568 viewport"]
        assert record.evidence == ["shot.png"]
        assert record.device_ids == ["iphone-se"]
        assert record.roles == ["customer"]

    async def test_duplicates_merge(self, aggregator):
        await aggregator.submit(_result(device_id="iphone-se"))
        await aggregator.submit(_result(device_id="iphone-12", title="Unexpected column count for 375px viewport"))

        defects = await aggregator.defects()
        assert len(defects) == 1
        assert defects[0].occurrences == 2
        assert defects[0].device_ids == ["iphone-12", "iphone-se"]
        assert defects[0].title == "Unexpected column count for 375px viewport"
        assert await aggregator.check_counts() == (0, 2)

    async def test_different_checks_do_not_merge(self, aggregator):
        await aggregator.submit(_result())
        await aggregator.submit(_result(check_name="horizontal_overflow", title="Horizontal overflow at 320px"))
        assert len(await aggregator.defects()) == 2

    async def test_ordered_by_severity(self, aggregator):
        await aggregator.submit(_result())
        await aggregator.submit(_result(check_name=AUTHENTICATION, title="Customer authentication failure"))
        await aggregator.submit(_result(check_name="modal_bounds", title="Modal exceeds viewport at 320px"))

        severities = [d.severity for d in await aggregator.defects()]
        assert severities == [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM]

    async def test_ids_are_deterministic(self):
        first, second = DefectAggregator("a"), DefectAggregator("b")
        await first.submit(_result())
        await second.submit(_result())
        assert (await first.defects())[0].id == (await second.defects())[0].id

    async def test_concurrent_submissions(self, aggregator):
        results = [
            _result(device_id=f"device-{i}", title=f"Unexpected column count for {300 + i}px viewport")
            for i in range(20)
        ]
        await asyncio.gather(*(aggregator.submit(r) for r in results))

        defects = await aggregator.defects()
        assert len(defects) == 1
        assert defects[0].occurrences == 20
        assert len(defects[0].device_ids) == 20

    async def test_batch(self, aggregator):
        await aggregator.submit_batch([
            (_result(passed=True, title=""), [], []),
            (_result(), ["step"], []),
        ])
        assert await aggregator.check_counts() == (1, 1)

    async def test_closed_aggregator_rejects(self, aggregator):
        await aggregator.close()
        assert aggregator.closed
        with pytest.raises(RuntimeError):
            await aggregator.submit(_result())

    async def test_merge_ignores_arrival_order(self):
        small = (
            _result(device_id="iphone-se", title="Unexpected column count for 320px viewport"),
            ["Open 320", "Navigate to /customer/meal-plans"],
            ["iphone-se.png"],
        )
        medium = (
            _result(device_id="iphone-12", title="Unexpected column count for 375px viewport"),
            ["Open 375", "Navigate to /customer/meal-plans"],
            ["iphone-12.png"],
        )
        forward, backward = DefectAggregator("a"), DefectAggregator("b")
        await forward.submit_batch([small, medium])
        await backward.submit_batch([medium, small])

        first = (await forward.defects())[0]
        second = (await backward.defects())[0]
        assert first.model_dump() == second.model_dump()
        assert first.device_ids == ["iphone-12", "iphone-se"]
        assert first.reproduction_steps == ["Open 375", "Navigate to /customer/meal-plans", "Open 320"]
        assert first.evidence == ["iphone-12.png", "iphone-se.png"]

    async def test_concurrent_merge_is_stable(self):
        results = [
            _result(device_id=f"device-{i}", title=f"Unexpected column count for {300 + i}px viewport")
            for i in range(10)
        ]
        forward, backward = DefectAggregator("a"), DefectAggregator("b")
        await asyncio.gather(*(forward.submit(r, [f"Open {r.device_id}"]) for r in results))
        await asyncio.gather(*(backward.submit(r, [f"Open {r.device_id}"]) for r in reversed(results)))

        assert [d.model_dump() for d in await forward.defects()] == [d.model_dump() for d in await backward.defects()]
