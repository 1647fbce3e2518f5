"""
Reporter Agent - Turns aggregated defects and scenario outcomes into a RunReport
"""
from pathlib import Path
from typing import Dict, List, Any, Optional, Sequence

from .base_agent import BaseAgent
from ..aggregator import DefectAggregator
from ..browser.artifact_capture import ArtifactCapture
from ..config import settings
from ..models.defect import DefectRecord
from ..models.report import ArtifactsSummary, CheckTally, RunReport, ScenarioTally
from ..models.result import Category, Severity
from ..models.scenario import ScenarioOutcome, ScenarioStatus
from ..utils.helpers import format_duration, timestamp_now

RULE = "=" * 80


def status_label(severity_counts: Dict[str, int]) -> str:
    """Qualitative run status from defect counts per severity."""
    critical = severity_counts.get(Severity.CRITICAL.value, 0)
    high = severity_counts.get(Severity.HIGH.value, 0)
    medium = severity_counts.get(Severity.MEDIUM.value, 0)
    total = sum(severity_counts.values())

    if critical > 0:
        return "CRITICAL ISSUES FOUND"
    if high > 2:
        return "SIGNIFICANT ISSUES"
    if medium > 5:
        return "MODERATE ISSUES"
    if total > 0:
        return "MINOR ISSUES"
    return "EXCELLENT"


class ReporterAgent(BaseAgent):
    """
    Builds the final report of a run:
    - Severity and category breakdowns
    - Scenario and check tallies
    - Status label and recommendations
    - JSON persistence and console rendering
    """

    def __init__(self, reports_dir: Path = None, save: bool = None):
        super().__init__(
            name="Reporter",
            description="Summarizes defects into a run report"
        )
        self.reports_dir = reports_dir or settings.REPORTS_DIR
        self.save = settings.SAVE_REPORTS if save is None else save

    async def execute(self, context: Dict[str, Any]) -> RunReport:
        """Execute report generation."""
        return await self.generate_report(
            run_id=context.get("run_id"),
            aggregator=context.get("aggregator"),
            outcomes=context.get("outcomes", []),
            started_at=context.get("started_at"),
            finished_at=context.get("finished_at"),
            duration_ms=context.get("duration_ms", 0),
            artifact_capture=context.get("artifact_capture"),
            base_url=context.get("base_url")
        )

    async def generate_report(
        self,
        run_id: str,
        aggregator: DefectAggregator,
        outcomes: Sequence[ScenarioOutcome],
        started_at: str,
        finished_at: str,
        duration_ms: int,
        artifact_capture: Optional[ArtifactCapture] = None,
        base_url: Optional[str] = None
    ) -> RunReport:
        """
        Generate the run report.

        Args:
            run_id: Run identifier
            aggregator: Aggregator holding this run's defects
            outcomes: One outcome per scenario, cancelled ones included
            started_at: ISO timestamp of run start
            finished_at: ISO timestamp of run end
            duration_ms: Wall-clock run duration
            artifact_capture: Evidence store of the run, if any
            base_url: Application base URL

        Returns:
            Immutable RunReport
        """
        self.log_info(f"Generating report for run {run_id}")

        defects = await aggregator.defects()
        checks_passed, checks_failed = await aggregator.check_counts()
        severity_counts = self._count_by_severity(defects)

        report_data = {
            "run_id": run_id,
            "base_url": base_url or settings.BASE_URL,
            "generated_at": timestamp_now(),
            "started_at": started_at,
            "finished_at": finished_at,
            "duration_ms": duration_ms,
            "status_label": status_label(severity_counts),
            "severity_counts": severity_counts,
            "category_counts": self._count_by_category(defects),
            "defects": defects,
            "defects_by_severity": {
                severity.value: [d for d in defects if d.severity is severity]
                for severity in Severity.ordered()
            },
            "scenarios": list(outcomes),
            "scenario_tally": self._tally_scenarios(outcomes),
            "check_tally": CheckTally(
                total=checks_passed + checks_failed,
                passed=checks_passed,
                failed=checks_failed,
            ),
            "recommendations": self._generate_recommendations(severity_counts, outcomes),
            "artifacts_summary": ArtifactsSummary(
                **(artifact_capture.get_artifacts_summary() if artifact_capture else {})
            ),
        }

        report_path = self._save(run_id, report_data)
        report = RunReport(**report_data, report_path=report_path)

        self.log_info(f"Run {run_id}: {report.status_label}, {len(defects)} defects")
        return report

    def _count_by_severity(self, defects: List[DefectRecord]) -> Dict[str, int]:
        counts = {severity.value: 0 for severity in Severity.ordered()}
        for defect in defects:
            counts[defect.severity.value] += 1
        return counts

    def _count_by_category(self, defects: List[DefectRecord]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for category in Category:
            found = sum(1 for d in defects if d.category is category)
            if found:
                counts[category.value] = found
        return counts

    def _tally_scenarios(self, outcomes: Sequence[ScenarioOutcome]) -> ScenarioTally:
        statuses = [o.status for o in outcomes]
        return ScenarioTally(
            total=len(statuses),
            passed=statuses.count(ScenarioStatus.PASSED),
            failed=statuses.count(ScenarioStatus.FAILED),
            errored=statuses.count(ScenarioStatus.ERROR),
            cancelled=statuses.count(ScenarioStatus.CANCELLED),
        )

    def _generate_recommendations(
        self,
        severity_counts: Dict[str, int],
        outcomes: Sequence[ScenarioOutcome]
    ) -> List[str]:
        """Generate prioritized recommendations from severity thresholds."""
        recommendations = []

        if severity_counts.get(Severity.CRITICAL.value, 0):
            recommendations.append(
                "URGENT: Fix all critical authentication and page-load issues immediately"
            )
        if severity_counts.get(Severity.HIGH.value, 0):
            recommendations.append(
                "HIGH PRIORITY: Address missing navigation, broken dialogs and empty pages"
            )
        if severity_counts.get(Severity.MEDIUM.value, 0):
            recommendations.append(
                "MEDIUM PRIORITY: Improve responsive layout, touch targets and load times"
            )
        if severity_counts.get(Severity.LOW.value, 0):
            recommendations.append(
                "LOW PRIORITY: Schedule remaining polish items"
            )

        cancelled = sum(1 for o in outcomes if o.status is ScenarioStatus.CANCELLED)
        if cancelled:
            recommendations.append(
                f"{cancelled} scenarios were cancelled by the run timeout. Raise RUN_TIMEOUT or parallelism."
            )

        if not recommendations:
            recommendations.append(
                "All scenarios conform. Consider adding devices or paths to the matrix."
            )

        return recommendations

    def _save(self, run_id: str, report_data: Dict[str, Any]) -> Optional[str]:
        """Persist the report as JSON; a failed write is logged, not raised."""
        if not self.save:
            return None
        report_path = self.reports_dir / f"{run_id}_report.json"
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            payload = RunReport(**report_data, report_path=str(report_path))
            report_path.write_text(payload.model_dump_json(indent=2), encoding='utf-8')
        except OSError as e:
            self.log_error(f"Could not save report to {report_path}: {e}")
            return None
        return str(report_path)

    def render_console(self, report: RunReport) -> str:
        """
        Render a human-readable summary.

        Args:
            report: Report to render

        Returns:
            Multi-line text
        """
        lines = [
            RULE,
            f"CONFORMANCE REPORT - {report.run_id}",
            RULE,
            f"Generated: {report.generated_at}",
            f"Target: {report.base_url}",
            f"Duration: {format_duration(report.duration_ms)}",
            "",
            "SCENARIOS:",
            f"  Passed:    {report.scenario_tally.passed}",
            f"  Failed:    {report.scenario_tally.failed}",
            f"  Errored:   {report.scenario_tally.errored}",
            f"  Cancelled: {report.scenario_tally.cancelled}",
            f"  Total:     {report.scenario_tally.total}",
            f"  Checks:    {report.check_tally.passed}/{report.check_tally.total} passed",
            "",
            "DEFECTS BY SEVERITY:",
        ]
        for severity, count in report.severity_counts.items():
            lines.append(f"  {severity:<9} {count}")
        lines.append(f"  {'Total':<9} {report.total_defects}")

        if report.category_counts:
            lines += ["", "DEFECTS BY CATEGORY:"]
            for category, count in report.category_counts.items():
                lines.append(f"  {category:<14} {count}")

        for severity, defects in report.defects_by_severity.items():
            if not defects:
                continue
            lines += ["", f"{severity} PRIORITY:", "-" * 50]
            for index, defect in enumerate(defects, 1):
                lines.append(f"{index}. {defect.title} [{defect.category.value}] x{defect.occurrences}")
                lines.append(f"   Devices: {', '.join(defect.device_ids)}; roles: {', '.join(defect.roles)}")
                lines.append(f"   Expected: {defect.expected_behavior}")
                lines.append(f"   Actual: {defect.actual_behavior}")
                lines.append("   Steps to reproduce:")
                for step_index, step in enumerate(defect.reproduction_steps, 1):
                    lines.append(f"      {step_index}. {step}")
                lines.append(f"   Recommendation: {defect.recommendation}")

        lines += ["", RULE, f"Status: {report.status_label}", "", "RECOMMENDATIONS:"]
        for index, recommendation in enumerate(report.recommendations, 1):
            lines.append(f"{index}. {recommendation}")
        lines.append(RULE)
        return "\n".join(lines)
