"""
Artifact Capture - Captures screenshots, DOM and console logs as defect evidence
"""
import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, List

from .driver import BaseDriver
from ..config import settings
from ..errors import DriverError
from ..utils.helpers import sanitize_filename

logger = logging.getLogger(__name__)


class ArtifactCapture:
    """
    Captures and stores evidence for failed scenarios:
    - Screenshots (PNG)
    - DOM snapshots (HTML)
    - Console logs (JSON)
    """

    def __init__(self, run_id: str, root: Path = None):
        """
        Initialize artifact capture for a run.

        Args:
            run_id: Unique run identifier
            root: Base directory, defaults to settings.ARTIFACTS_DIR
        """
        self.run_id = run_id
        self.artifacts_dir = (root or settings.ARTIFACTS_DIR) / run_id
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)
        self.artifact_index: List[Dict] = []

    async def capture_failure(self, driver: BaseDriver, label: str) -> List[str]:
        """
        Capture all evidence for a failed scenario.

        Capture problems are logged and skipped; evidence is best effort and
        must never turn a reportable scenario into a crashed one.

        Args:
            driver: Driver of the failed scenario
            label: Scenario label used in file names

        Returns:
            File names of the captured artifacts, relative to the run directory
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        prefix = f"{sanitize_filename(label)}_{timestamp}"
        captured = []

        try:
            captured.append(await self.capture_screenshot(driver, prefix))
            captured.append(await self.capture_dom(driver, prefix))
        except DriverError as e:
            logger.warning(f"Evidence capture for {label} incomplete: {e}")

        console = self.capture_console_logs(driver, prefix)
        if console:
            captured.append(console)

        self.artifact_index.append({
            "scenario": label,
            "timestamp": timestamp,
            "artifacts": captured,
        })
        self._save_index()
        return captured

    async def capture_screenshot(self, driver: BaseDriver, prefix: str, full_page: bool = False) -> str:
        """
        Capture a screenshot.

        Args:
            driver: Driver instance
            prefix: File prefix
            full_page: Whether to capture full page

        Returns:
            File name of the saved screenshot
        """
        filename = f"{prefix}_screenshot.png"
        await driver.screenshot(str(self.artifacts_dir / filename), full_page=full_page)
        return filename

    async def capture_dom(self, driver: BaseDriver, prefix: str) -> str:
        """Capture DOM snapshot."""
        filename = f"{prefix}_dom.html"
        (self.artifacts_dir / filename).write_text(await driver.content(), encoding='utf-8')
        return filename

    def capture_console_logs(self, driver: BaseDriver, prefix: str) -> str:
        """Capture console logs, when the driver records them."""
        get_logs = getattr(driver, "get_console_logs", None)
        if get_logs is None:
            return ""
        filename = f"{prefix}_console.json"
        (self.artifacts_dir / filename).write_text(json.dumps(get_logs(), indent=2), encoding='utf-8')
        return filename

    def _save_index(self):
        """Save the artifact index."""
        index_path = self.artifacts_dir / "index.json"
        index_path.write_text(
            json.dumps(self.artifact_index, indent=2),
            encoding='utf-8'
        )

    def get_artifacts_summary(self) -> Dict:
        """
        Get a summary of all captured artifacts.

        Returns:
            Dictionary with total count, counts per file type and directory
        """
        files = [f for f in self.artifacts_dir.glob("**/*") if f.is_file() and f.name != "index.json"]

        # Count by type
        type_counts: Dict[str, int] = {}
        for f in files:
            ext = f.suffix[1:] if f.suffix else "other"
            type_counts[ext] = type_counts.get(ext, 0) + 1

        return {
            "total_artifacts": len(files),
            "types": type_counts,
            "directory": str(self.artifacts_dir),
        }
