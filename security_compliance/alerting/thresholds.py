"""
Status thresholds and report aggregation.
"""

from typing import Iterable, List, Optional, Tuple
import logging

from ..models import ComplianceSummary, Report, RepositoryResult, Status

logger = logging.getLogger(__name__)

COMPLIANT_THRESHOLD = 80
PARTIAL_THRESHOLD = 50


def classify_score(score: float) -> Status:
    """Map a 0-100 score onto its status bucket."""
    if score >= COMPLIANT_THRESHOLD:
        return Status.COMPLIANT
    elif score >= PARTIAL_THRESHOLD:
        return Status.PARTIAL
    return Status.NON_COMPLIANT


def summarize(results: Iterable[RepositoryResult]) -> ComplianceSummary:
    """Count each result into exactly one bucket, by score."""
    summary = ComplianceSummary()
    for result in results:
        summary.add(classify_score(result.compliance.score))
    return summary


def build_report(results: List[RepositoryResult], timestamp: Optional[str] = None) -> Report:
    """Assemble the run's report from the ordered per-repository results."""
    results = list(results)
    summary = summarize(results)

    report = Report(
        total_repos=len(results),
        compliance_summary=summary,
        repos=results,
    )
    if timestamp:
        report.timestamp = timestamp

    logger.info(
        f"Aggregated {report.total_repos} repositories: "
        f"{summary.compliant} compliant, {summary.partial} partial, {summary.non_compliant} non-compliant"
    )
    return report


def find_unknown_checks(report: Report) -> List[Tuple[str, str]]:
    """Return (full_name, check) pairs that could not be determined."""
    return [
        (r.full_name, check)
        for r in report.repos
        for check in r.compliance.checks.unknown()
    ]


def format_summary_line(summary: ComplianceSummary) -> str:
    return (
        f"Summary: {summary.compliant} compliant, {summary.partial} partial, "
        f"{summary.non_compliant} non-compliant"
    )
