"""
Defect Record Data Model
"""
from typing import Iterable, List, Tuple

from pydantic import BaseModel, Field

from .result import Category, Severity


def _merge_unique(first: List[str], second: List[str]) -> List[str]:
    merged = list(first)
    for item in second:
        if item not in merged:
            merged.append(item)
    return merged


class DefectRecord(BaseModel):
    """A failed check promoted to a reportable defect."""

    id: str
    check_name: str
    title: str
    severity: Severity
    category: Category
    description: str = ""
    reproduction_steps: List[str] = Field(default_factory=list)
    expected_behavior: str = ""
    actual_behavior: str = ""
    recommendation: str = ""
    device_ids: List[str] = Field(default_factory=list)
    roles: List[str] = Field(default_factory=list)
    paths: List[str] = Field(default_factory=list)
    occurrences: int = 1
    evidence: List[str] = Field(default_factory=list)

    class Config:
        frozen = True

    @property
    def sort_key(self) -> Tuple:
        """Canonical position of a single occurrence among its duplicates."""
        return (
            tuple(self.device_ids),
            tuple(self.roles),
            tuple(self.paths),
            self.title,
            self.description,
            self.actual_behavior,
            tuple(self.reproduction_steps),
            tuple(self.evidence),
        )

    def merged_with(self, other: "DefectRecord") -> "DefectRecord":
        """
        Fold a duplicate occurrence into this record.

        Severity, category and text stay those of this record.

        Args:
            other: Record built from the duplicate failure

        Returns:
            A new record; neither input is modified
        """
        return self.model_copy(update={
            "reproduction_steps": _merge_unique(self.reproduction_steps, other.reproduction_steps),
            "device_ids": _merge_unique(self.device_ids, other.device_ids),
            "roles": _merge_unique(self.roles, other.roles),
            "paths": _merge_unique(self.paths, other.paths),
            "evidence": _merge_unique(self.evidence, other.evidence),
            "occurrences": self.occurrences + other.occurrences,
        })


def merge_occurrences(occurrences: Iterable[DefectRecord]) -> DefectRecord:
    """
    Collapse duplicate occurrences into one record.

    Occurrences are folded in canonical order, so the result does not depend
    on the order in which scenarios finished. The first occurrence in that
    order supplies title, description and behavior text; reproduction steps
    stay grouped per occurrence.

    Args:
        occurrences: Single-occurrence records sharing one dedup key

    Returns:
        The merged record
    """
    ordered = sorted(occurrences, key=lambda record: record.sort_key)
    if not ordered:
        raise ValueError("No occurrences to merge")
    merged = ordered[0]
    for record in ordered[1:]:
        merged = merged.merged_with(record)
    return merged
