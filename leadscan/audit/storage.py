"""File storage for completed audit results.

Each run is saved as ``<output_root>/<domain-with-dashes>-<YYYY-MM-DD>/raw-results.json``
containing the sealed profile and its grade. Saved runs are the input of
the cross-site lead summary.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from .models.audit import AuditProfile
from .runner import AuditResult


logger = logging.getLogger(__name__)


RESULTS_FILENAME = "raw-results.json"


class StoredResult(BaseModel):
    """A saved audit profile and the folder it was read from."""

    folder: str = Field(description="Name of the run folder")
    profile: AuditProfile = Field(description="Saved audit profile")


def run_folder_name(profile: AuditProfile) -> str:
    """Folder name for a run, e.g. ``www-example-org-2026-03-01``."""
    return f"{profile.site.replace('.', '-')}-{profile.scanned_at.date().isoformat()}"


def save_result(result: AuditResult, output_root: Path) -> Path:
    """Write a run's profile to its folder under output_root.

    Returns:
        Path of the run folder
    """
    folder = Path(output_root) / run_folder_name(result.profile)
    folder.mkdir(parents=True, exist_ok=True)

    payload = result.profile.model_dump(mode="json")
    payload["total_violations"] = result.profile.total_violations
    payload["lead_grade"] = result.grade.value

    path = folder / RESULTS_FILENAME
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info(f"Raw results saved: {path}")
    return folder


def load_result(path: Path) -> AuditProfile:
    """Read one saved profile.

    Raises:
        ValueError: If the file is not a valid saved profile
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Cannot read saved results {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Saved results {path} are not an object")

    # Derived values are written for readers of the file, not loaded back
    data.pop("total_violations", None)
    data.pop("lead_grade", None)

    try:
        return AuditProfile.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid saved results {path}: {e}") from e


def load_results(output_root: Path) -> List[StoredResult]:
    """Read every saved run under output_root, skipping unreadable ones."""
    root = Path(output_root)
    if not root.is_dir():
        logger.warning(f"Output directory not found: {root}")
        return []

    results: List[StoredResult] = []
    for folder in sorted(p for p in root.iterdir() if p.is_dir()):
        path = folder / RESULTS_FILENAME
        if not path.exists():
            continue
        try:
            profile = load_result(path)
        except ValueError as e:
            logger.warning(str(e))
            continue
        results.append(StoredResult(folder=folder.name, profile=profile))

    return results


def find_result(output_root: Path, folder: str) -> Optional[StoredResult]:
    """Load the saved run stored in a specific folder, if present."""
    path = Path(output_root) / folder / RESULTS_FILENAME
    if not path.exists():
        return None
    return StoredResult(folder=folder, profile=load_result(path))
