import itertools
import logging

import pytest
import requests
from rich.console import Console

from security_compliance.models import (
    BOOLEAN_CHECKS,
    CheckOutcome,
    ComplianceChecks,
    RepositoryDescriptor,
    Status,
    TOTAL_CHECKS,
)
from security_compliance.monitor.checks import (
    check_repository,
    check_security_md,
    check_security_workflow,
    compute_score,
    evaluate_checks,
    scan_repositories,
)

from conftest import FakeRepo, api_error, workflow


def _descriptor(repo: FakeRepo) -> RepositoryDescriptor:
    return RepositoryDescriptor.from_api(repo)


def test_security_md_found() -> None:
    assert check_security_md(FakeRepo("o/r", has_security_md=True), "o/r") is CheckOutcome.PASS


def test_security_md_not_found_is_fail() -> None:
    assert check_security_md(FakeRepo("o/r"), "o/r") is CheckOutcome.FAIL


@pytest.mark.parametrize("error", [api_error(403, "Forbidden"), api_error(429), requests.ConnectionError("boom")])
def test_security_md_other_errors_are_unknown(error, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="security_compliance.monitor.checks")
    repo = FakeRepo("o/r", contents_error=error)
    assert check_security_md(repo, "o/r") is CheckOutcome.UNKNOWN
    assert "has_security_md lookup failed for o/r" in caplog.text


@pytest.mark.parametrize(
    "wf",
    [
        workflow("Security Scan", ".github/workflows/scan.yml"),
        workflow("CI", ".github/workflows/security.yml"),
        workflow("CI", ".github/workflows/SECURITY-audit.yml"),
    ],
)
def test_security_workflow_matches_name_or_path(wf) -> None:
    repo = FakeRepo("o/r", workflows=[workflow("Build", ".github/workflows/build.yml"), wf])
    assert check_security_workflow(repo, "o/r") is CheckOutcome.PASS


def test_security_workflow_absent() -> None:
    repo = FakeRepo("o/r", workflows=[workflow("Build", ".github/workflows/build.yml")])
    assert check_security_workflow(repo, "o/r") is CheckOutcome.FAIL


def test_security_workflow_forbidden_is_unknown() -> None:
    repo = FakeRepo("o/r", workflows_error=api_error(403, "Forbidden"))
    assert check_security_workflow(repo, "o/r") is CheckOutcome.UNKNOWN


@pytest.mark.parametrize("outcomes", list(itertools.product(list(CheckOutcome), repeat=2)))
def test_score_uses_full_declared_check_set(outcomes) -> None:
    checks = ComplianceChecks(has_security_md=outcomes[0], has_security_workflow=outcomes[1])
    passed = sum(1 for o in outcomes if o is CheckOutcome.PASS)
    result = evaluate_checks(checks)
    assert result.score == pytest.approx(passed / TOTAL_CHECKS * 100)
    assert result.score <= 25
    assert result.status is Status.NON_COMPLIANT


def test_score_counts_every_declared_check() -> None:
    checks = ComplianceChecks(**{name: CheckOutcome.PASS for name in BOOLEAN_CHECKS})
    assert compute_score(checks) == pytest.approx(7 / 8 * 100)
    checks.openssf_score = 6.5
    assert compute_score(checks) == pytest.approx(100)


def test_repository_with_policy_and_security_workflow_scores_25(fake_github) -> None:
    repo = FakeRepo(
        "octo/app",
        has_security_md=True,
        workflows=[workflow("Security Scan", ".github/workflows/scan.yml")],
    )
    gh = fake_github([repo])

    result = check_repository(gh, _descriptor(repo))

    assert result.checks.has_security_md is CheckOutcome.PASS
    assert result.checks.has_security_workflow is CheckOutcome.PASS
    assert result.score == 25
    assert result.status is Status.NON_COMPLIANT


def test_repository_with_404_and_403_scores_zero(fake_github) -> None:
    repo = FakeRepo(
        "octo/app",
        contents_error=api_error(404, "Not Found"),
        workflows_error=api_error(403, "Forbidden"),
    )
    gh = fake_github([repo])

    result = check_repository(gh, _descriptor(repo))

    assert result.checks.has_security_md is CheckOutcome.FAIL
    assert result.checks.has_security_workflow is CheckOutcome.UNKNOWN
    assert result.score == 0
    assert result.status is Status.NON_COMPLIANT


def test_each_lookup_attempted_once(fake_github) -> None:
    repo = FakeRepo("octo/app", workflows_error=api_error(502))
    check_repository(fake_github([repo]), _descriptor(repo))
    assert repo.calls == ["contents:SECURITY.md", "workflows"]


def test_scan_prints_progress_per_repository(fake_github, capsys) -> None:
    repos = [FakeRepo("octo/one"), FakeRepo("octo/two", has_security_md=True)]
    gh = fake_github(repos)

    results = scan_repositories(gh, [_descriptor(r) for r in repos])

    out = capsys.readouterr().out
    assert "Scanning octo/one..." in out
    assert "Scanning octo/two..." in out
    assert [r.full_name for r in results] == ["octo/one", "octo/two"]
    assert [r.compliance.score for r in results] == [0, 12.5]


def test_security_workflow_reads_first_page_only(fake_github) -> None:
    repo = FakeRepo("octo/app", workflows=[workflow("Build", ".github/workflows/build.yml")])

    result = check_repository(fake_github([repo]), _descriptor(repo))

    assert result.checks.has_security_workflow is CheckOutcome.FAIL
    assert repo.calls == ["contents:SECURITY.md", "workflows", "workflows:page0"]


def test_scan_progress_line_does_not_wrap(fake_github, capsys) -> None:
    full_name = "some-organisation-name/" + "a-really-long-repository-name-" * 3
    repo = FakeRepo(full_name)

    scan_repositories(fake_github([repo]), [_descriptor(repo)], Console(width=80))

    assert capsys.readouterr().out == f"Scanning {full_name}...\n"
