"""
Run Report Data Model
"""
from typing import List, Dict, Optional

from pydantic import BaseModel, Field

from .defect import DefectRecord
from .scenario import ScenarioOutcome


class ScenarioTally(BaseModel):
    """Pass/fail counts over scenarios."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    errored: int = 0
    cancelled: int = 0


class CheckTally(BaseModel):
    """Pass/fail counts over individual checks."""

    total: int = 0
    passed: int = 0
    failed: int = 0


class ArtifactsSummary(BaseModel):
    """Summary of captured artifacts."""

    total_artifacts: int = 0
    types: Dict[str, int] = Field(default_factory=dict)
    directory: Optional[str] = None


class RunReport(BaseModel):
    """Complete, immutable result of one matrix run."""

    run_id: str
    base_url: str
    generated_at: str
    started_at: str
    finished_at: str
    duration_ms: int
    status_label: str
    severity_counts: Dict[str, int] = Field(default_factory=dict)
    category_counts: Dict[str, int] = Field(default_factory=dict)
    defects: List[DefectRecord] = Field(default_factory=list)
    defects_by_severity: Dict[str, List[DefectRecord]] = Field(default_factory=dict)
    scenarios: List[ScenarioOutcome] = Field(default_factory=list)
    scenario_tally: ScenarioTally = Field(default_factory=ScenarioTally)
    check_tally: CheckTally = Field(default_factory=CheckTally)
    recommendations: List[str] = Field(default_factory=list)
    artifacts_summary: ArtifactsSummary = Field(default_factory=ArtifactsSummary)
    report_path: Optional[str] = None

    class Config:
        frozen = True

    @property
    def total_defects(self) -> int:
        return len(self.defects)
