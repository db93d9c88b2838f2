"""
Per-repository security-hygiene checks.
"""

from typing import Iterable, List, Optional
import logging

import requests
from github import Github, GithubException
from github.Repository import Repository
from rich.console import Console

from ..alerting.thresholds import classify_score
from ..models import (
    CheckOutcome,
    ComplianceChecks,
    ComplianceResult,
    RepositoryDescriptor,
    RepositoryResult,
    TOTAL_CHECKS,
)

logger = logging.getLogger(__name__)

SECURITY_POLICY_PATH = "SECURITY.md"
WORKFLOW_KEYWORD = "security"


def _outcome_for_error(check: str, full_name: str, error: Exception) -> CheckOutcome:
    """404 means the thing is absent; anything else means we could not tell."""
    status = getattr(error, "status", None)
    logger.debug(f"{check} lookup failed for {full_name} (status={status}): {error}")
    if status == 404:
        return CheckOutcome.FAIL
    return CheckOutcome.UNKNOWN


def check_security_md(repo: Repository, full_name: str) -> CheckOutcome:
    """Look for SECURITY.md at the repository root."""
    try:
        repo.get_contents(SECURITY_POLICY_PATH)
        return CheckOutcome.PASS
    except (GithubException, requests.RequestException) as e:
        return _outcome_for_error("has_security_md", full_name, e)


def check_security_workflow(repo: Repository, full_name: str) -> CheckOutcome:
    """Look for an Actions workflow whose path or name mentions security."""
    try:
        # first page only, like the repository listing
        for workflow in repo.get_workflows().get_page(0):
            path = (workflow.path or "").lower()
            name = (workflow.name or "").lower()
            if WORKFLOW_KEYWORD in path or WORKFLOW_KEYWORD in name:
                return CheckOutcome.PASS
        return CheckOutcome.FAIL
    except (GithubException, requests.RequestException) as e:
        return _outcome_for_error("has_security_workflow", full_name, e)


def compute_score(checks: ComplianceChecks) -> float:
    """Percentage of the full declared check set that passed."""
    return checks.passed() / TOTAL_CHECKS * 100


def evaluate_checks(checks: ComplianceChecks) -> ComplianceResult:
    score = compute_score(checks)
    return ComplianceResult(score=score, status=classify_score(score), checks=checks)


def check_repository(gh: Github, descriptor: RepositoryDescriptor) -> ComplianceResult:
    """Run every implemented check once against one repository."""
    checks = ComplianceChecks()

    # lazy: no request until a check needs one
    repo = gh.get_repo(descriptor.full_name, lazy=True)
    checks.has_security_md = check_security_md(repo, descriptor.full_name)
    checks.has_security_workflow = check_security_workflow(repo, descriptor.full_name)

    result = evaluate_checks(checks)
    logger.debug(f"{descriptor.full_name}: score={result.score:.1f} status={result.status.value}")
    return result


def scan_repositories(
    gh: Github,
    repositories: Iterable[RepositoryDescriptor],
    console: Optional[Console] = None
) -> List[RepositoryResult]:
    """Check repositories one at a time, printing a progress line for each."""
    console = console or Console()
    results = []

    for descriptor in repositories:
        console.print(f"Scanning {descriptor.full_name}...", markup=False, highlight=False, emoji=False, soft_wrap=True)
        compliance = check_repository(gh, descriptor)
        results.append(RepositoryResult(repository=descriptor, compliance=compliance))

    return results
