"""
Defect Aggregator - promotes failed checks to deduplicated defect records
"""
import asyncio
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .models.defect import DefectRecord, merge_occurrences
from .models.result import Category, Severity, ValidationResult
from .utils.helpers import normalize_title, stable_id

logger = logging.getLogger(__name__)


class DefectClass(NamedTuple):
    severity: Severity
    category: Category
    recommendation: str


AUTHENTICATION = "authentication"
DRIVER = "driver"
SCENARIO_ERROR = "scenario_error"

SEVERITY_TABLE: Dict[str, DefectClass] = {
    AUTHENTICATION: DefectClass(
        Severity.CRITICAL, Category.AUTHENTICATION,
        "Verify test credentials and the authentication flow",
    ),
    DRIVER: DefectClass(
        Severity.CRITICAL, Category.FUNCTIONALITY,
        "Check that the page loads at all and the server is reachable",
    ),
    SCENARIO_ERROR: DefectClass(
        Severity.CRITICAL, Category.FUNCTIONALITY,
        "Inspect the run log; the scenario aborted on an unexpected error",
    ),
    "access_guard": DefectClass(
        Severity.CRITICAL, Category.SECURITY,
        "Implement proper authentication guards for protected routes",
    ),
    "page_content": DefectClass(
        Severity.HIGH, Category.FUNCTIONALITY,
        "Check routing, data loading and content rendering",
    ),
    "navigation_presence": DefectClass(
        Severity.HIGH, Category.RESPONSIVE,
        "Implement navigation appropriate to the device class",
    ),
    "modal_bounds": DefectClass(
        Severity.HIGH, Category.RESPONSIVE,
        "Constrain dialog width to the viewport and keep edge margins on small screens",
    ),
    "horizontal_overflow": DefectClass(
        Severity.MEDIUM, Category.RESPONSIVE,
        "Review CSS layout and make responsive adjustments",
    ),
    "column_count": DefectClass(
        Severity.MEDIUM, Category.RESPONSIVE,
        "Adjust grid breakpoints so column count follows the viewport",
    ),
    "touch_target": DefectClass(
        Severity.MEDIUM, Category.UI_UX,
        "Increase padding or min-height/min-width of interactive elements to 44px",
    ),
    "performance_budget": DefectClass(
        Severity.MEDIUM, Category.PERFORMANCE,
        "Optimize page loading performance",
    ),
    "state_consistency": DefectClass(
        Severity.MEDIUM, Category.FUNCTIONALITY,
        "Look for race conditions between initial render and late data loading",
    ),
}

FALLBACK_CLASS = DefectClass(
    Severity.MEDIUM, Category.FUNCTIONALITY, "Investigate the failed check",
)

DedupKey = Tuple[str, str, str]


def classify(result: ValidationResult) -> DefectClass:
    """Severity, category and recommendation for a failed result."""
    base = SEVERITY_TABLE.get(result.check_name, FALLBACK_CLASS)
    return DefectClass(
        severity=result.severity_hint or base.severity,
        category=result.category_hint or base.category,
        recommendation=base.recommendation,
    )


def dedup_key(check_name: str, category: Category, title: str) -> DedupKey:
    return (check_name, category.value, normalize_title(title))


class DefectAggregator:
    """
    Collects validation results for one run.

    Constructed per run and closed once the report is emitted. The dedup map
    is the only state shared between concurrent scenarios; every access goes
    through one asyncio.Lock.
    """

    def __init__(self, run_id: str = ""):
        self.run_id = run_id
        self._lock = asyncio.Lock()
        self._occurrences: Dict[DedupKey, List[DefectRecord]] = {}
        self._records: Dict[DedupKey, DefectRecord] = {}
        self._checks_passed = 0
        self._checks_failed = 0
        self._closed = False

    async def submit(
        self,
        result: ValidationResult,
        reproduction_steps: Optional[Sequence[str]] = None,
        evidence: Optional[Sequence[str]] = None
    ) -> Optional[DefectRecord]:
        """
        Record one validation result.

        Args:
            result: Result of a single check
            reproduction_steps: Ordered steps leading to the failure
            evidence: Artifact file names captured for the failure

        Returns:
            The (possibly merged) defect record for failures, None for passes
        """
        async with self._lock:
            return self._add(result, reproduction_steps, evidence)

    async def submit_batch(self, entries: Sequence[Tuple[ValidationResult, Sequence[str], Sequence[str]]]):
        """
        Record all results of one scenario at once.

        The whole batch lands under a single lock acquisition, so a scenario
        cancelled while waiting for the lock contributes nothing.

        Args:
            entries: (result, reproduction_steps, evidence) tuples
        """
        async with self._lock:
            for result, steps, evidence in entries:
                self._add(result, steps, evidence)

    def _add(
        self,
        result: ValidationResult,
        reproduction_steps: Optional[Sequence[str]],
        evidence: Optional[Sequence[str]]
    ) -> Optional[DefectRecord]:
        if self._closed:
            raise RuntimeError(f"Aggregator for run {self.run_id} is closed")

        if result.passed:
            self._checks_passed += 1
            return None

        self._checks_failed += 1
        record = self._promote(result, reproduction_steps or [], evidence or [])
        key = dedup_key(record.check_name, record.category, record.title)

        occurrences = self._occurrences.setdefault(key, [])
        if occurrences:
            logger.debug(f"Duplicate of {record.id}: {record.title}")
        else:
            logger.info(f"[{record.severity.value}] {record.title} ({result.device_id}/{result.role.value})")
        occurrences.append(record)
        self._records[key] = merge_occurrences(occurrences)
        return self._records[key]

    async def defects(self) -> List[DefectRecord]:
        """Current records, most severe first, then by title."""
        async with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: (-r.severity.weight, r.category.value, normalize_title(r.title), r.id))

    async def check_counts(self) -> Tuple[int, int]:
        """Passed and failed check counts."""
        async with self._lock:
            return self._checks_passed, self._checks_failed

    async def close(self):
        async with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _promote(
        self,
        result: ValidationResult,
        reproduction_steps: Sequence[str],
        evidence: Sequence[str]
    ) -> DefectRecord:
        defect_class = classify(result)
        key = dedup_key(result.check_name, defect_class.category, result.title or result.check_name)
        return DefectRecord(
            id=stable_id(*key),
            check_name=result.check_name,
            title=result.title or result.check_name,
            severity=defect_class.severity,
            category=defect_class.category,
            description=result.detail,
            reproduction_steps=list(reproduction_steps),
            expected_behavior=result.expected,
            actual_behavior=result.actual or result.detail,
            recommendation=defect_class.recommendation,
            device_ids=[result.device_id],
            roles=[result.role.value],
            paths=[result.path],
            evidence=list(evidence),
        )
