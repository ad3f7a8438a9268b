"""
Findings source for the PR Commenter.

Reads a tfsec JSON results file, makes each result's path relative to the
repository root and renders the Markdown body posted as the review comment.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .models import Finding
from .utils import strip_workspace_prefix


logger = logging.getLogger(__name__)

IGNORE_DOCS_URL = "https://github.com/aquasecurity/tfsec#ignoring-warnings"


class FindingsError(Exception):
    """Raised when the results file cannot be read."""
    pass


@dataclass
class ScanResult:
    """One tfsec result, as found in the results file."""
    rule_id: str
    file_path: str
    start_line: int
    end_line: int
    severity: str = ""
    description: str = ""
    legacy_rule_id: str = ""
    links: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScanResult':
        location = data.get('location') or data.get('range') or {}
        start_line = int(location.get('start_line') or 0)
        end_line = int(location.get('end_line') or start_line)
        links = data.get('links') or []
        if isinstance(links, str):
            links = [links]
        return cls(
            rule_id=str(data.get('rule_id') or data.get('long_id') or ''),
            file_path=str(location.get('filename') or ''),
            start_line=start_line,
            end_line=end_line,
            severity=str(data.get('severity') or ''),
            description=str(data.get('description') or data.get('rule_description') or ''),
            legacy_rule_id=str(data.get('legacy_rule_id') or data.get('rule_id') or ''),
            links=[str(link) for link in links],
        )


def render_comment_body(result: ScanResult) -> str:
    """Render the Markdown comment for a tfsec result."""
    parts = [
        "## result",
        f"tfsec check {result.rule_id} failed.",
        "## severity",
        f"⚠️{result.severity}",
        "## reason",
        result.description,
        "## how to ignore",
        f"`#tfsec:ignore:{result.legacy_rule_id}`([refs]({IGNORE_DOCS_URL}))",
    ]
    body = "\n".join(parts) + "\n"
    if result.links:
        body += f"\nFor more information, [see]({result.links[0]})\n"
    return body


def parse_results(data: Any, workspace_path: str = "") -> List[Finding]:
    """Turn decoded results JSON into findings.

    Accepts ``{"results": [...]}`` or a bare list. Results without a usable
    location are skipped with a warning.
    """
    if isinstance(data, dict):
        raw_results = data.get('results') or []
    elif isinstance(data, list):
        raw_results = data
    else:
        raise FindingsError(f"Unexpected results document of type {type(data).__name__}")

    findings: List[Finding] = []
    for raw in raw_results:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed result entry: {raw!r}")
            continue
        try:
            result = ScanResult.from_dict(raw)
            findings.append(Finding(
                file_path=strip_workspace_prefix(result.file_path, workspace_path),
                start_line=result.start_line,
                end_line=result.end_line,
                body=render_comment_body(result),
            ))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping result {raw.get('rule_id', '?')}: {e}")

    logger.info(f"Loaded {len(findings)} finding(s) from {len(raw_results)} result(s)")
    return findings


def load_findings(results_file: str, workspace_path: str = "") -> List[Finding]:
    """Read and parse a results file.

    Raises:
        FindingsError: If the file is missing or is not valid JSON
    """
    try:
        with open(results_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FindingsError(f"Failed to load results file {results_file}: {e}") from e
    return parse_results(data, workspace_path)
