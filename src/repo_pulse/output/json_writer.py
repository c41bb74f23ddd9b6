"""JSON output writer for repository summaries."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from repo_pulse.models.repository import RepoSummary


def build_report(summary: RepoSummary) -> dict[str, Any]:
    """Build a JSON-ready report from a summary."""
    return {
        "repository": summary.repository,
        "generated_at": datetime.now().isoformat(),
        "fetched_at": summary.fetched_at.isoformat(),
        "counts": {
            "commits": summary.commit_count,
            "closed_pull_requests": summary.closed_pr_count,
            "branches": summary.branch_count,
            "contributors": summary.contributor_count,
        },
        "total_contributions": summary.total_contributions,
        "contributors": [c.model_dump(mode="json") for c in summary.contributors],
        "partial": summary.is_partial,
        "errors": dict(summary.errors),
    }


def write_json_report(
    report: dict[str, Any],
    output_path: Optional[Path] = None,
    repository: str = "",
) -> Path:
    """Write report to a JSON file.

    Args:
        report: Report dictionary from build_report()
        output_path: Output file path (defaults to <owner>_<name>_summary_<timestamp>.json)
        repository: Repository name used for the default file name

    Returns:
        Path to the written file
    """
    if output_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        slug = (repository or report.get("repository", "repo")).replace("/", "_")
        output_path = Path(f"{slug}_summary_{timestamp}.json")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False, default=str)

    return output_path
