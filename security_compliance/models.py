"""
Typed records for a single compliance run.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple


class InvalidRecordError(ValueError):
    """Raised when API data or a mapping does not match a record's field set."""


class CheckOutcome(Enum):
    PASS = "pass"
    FAIL = "fail"
    UNKNOWN = "unknown"

    def __bool__(self) -> bool:
        return self is CheckOutcome.PASS


class Status(Enum):
    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"


BOOLEAN_CHECKS: Tuple[str, ...] = (
    "has_security_md",
    "has_security_workflow",
    "has_dependabot",
    "has_codeql",
    "vulnerability_alerts_enabled",
    "has_branch_protection",
    "signed_commits",
)

# Only these two are ever evaluated; the rest keep their defaults.
IMPLEMENTED_CHECKS: Tuple[str, ...] = ("has_security_md", "has_security_workflow")

CHECK_FIELDS: Tuple[str, ...] = BOOLEAN_CHECKS + ("openssf_score",)
TOTAL_CHECKS = len(CHECK_FIELDS)


def _utc_timestamp() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class RepositoryDescriptor:
    owner: str
    name: str
    full_name: str

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.full_name}"

    @classmethod
    def from_api(cls, raw: Any, strict: bool = False) -> "RepositoryDescriptor":
        """
        Build a descriptor from a PyGithub ``Repository`` or a REST mapping.

        With ``strict=True`` a mapping carrying keys other than ``owner``,
        ``name`` and ``full_name`` is rejected.
        """
        if isinstance(raw, Mapping):
            if strict:
                unknown = set(raw) - {"owner", "name", "full_name"}
                if unknown:
                    raise InvalidRecordError(f"Unknown repository fields: {sorted(unknown)}")
            owner = raw.get("owner")
            login = owner.get("login") if isinstance(owner, Mapping) else owner
            name = raw.get("name")
            full_name = raw.get("full_name")
        else:
            owner = getattr(raw, "owner", None)
            login = getattr(owner, "login", None)
            name = getattr(raw, "name", None)
            full_name = getattr(raw, "full_name", None)

        missing = [k for k, v in (("owner.login", login), ("name", name), ("full_name", full_name)) if not v]
        if missing:
            raise InvalidRecordError(f"Repository record missing fields: {', '.join(missing)}")

        return cls(owner=str(login), name=str(name), full_name=str(full_name))


@dataclass
class ComplianceChecks:
    has_security_md: CheckOutcome = CheckOutcome.FAIL
    has_security_workflow: CheckOutcome = CheckOutcome.FAIL
    has_dependabot: CheckOutcome = CheckOutcome.FAIL
    has_codeql: CheckOutcome = CheckOutcome.FAIL
    vulnerability_alerts_enabled: CheckOutcome = CheckOutcome.FAIL
    has_branch_protection: CheckOutcome = CheckOutcome.FAIL
    signed_commits: CheckOutcome = CheckOutcome.FAIL
    openssf_score: float = 0.0

    def values(self) -> List[Any]:
        return [getattr(self, name) for name in CHECK_FIELDS]

    def passed(self) -> int:
        return sum(1 for value in self.values() if value)

    def unknown(self) -> List[str]:
        return [name for name in BOOLEAN_CHECKS if getattr(self, name) is CheckOutcome.UNKNOWN]

    def as_dict(self) -> Dict[str, Any]:
        """Booleans for the checks, the raw number for ``openssf_score``."""
        out: Dict[str, Any] = {name: bool(getattr(self, name)) for name in BOOLEAN_CHECKS}
        out["openssf_score"] = self.openssf_score
        return out

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ComplianceChecks":
        keys = set(raw)
        unknown = keys - set(CHECK_FIELDS)
        missing = set(CHECK_FIELDS) - keys
        if unknown or missing:
            raise InvalidRecordError(
                f"Check set mismatch (unknown={sorted(unknown)}, missing={sorted(missing)})"
            )

        kwargs: Dict[str, Any] = {}
        for name in BOOLEAN_CHECKS:
            value = raw[name]
            if isinstance(value, CheckOutcome):
                kwargs[name] = value
            elif isinstance(value, bool):
                kwargs[name] = CheckOutcome.PASS if value else CheckOutcome.FAIL
            elif value is None:
                kwargs[name] = CheckOutcome.UNKNOWN
            else:
                try:
                    kwargs[name] = CheckOutcome(value)
                except ValueError as e:
                    raise InvalidRecordError(f"Invalid value for {name}: {value!r}") from e
        kwargs["openssf_score"] = float(raw["openssf_score"] or 0.0)
        return cls(**kwargs)


@dataclass(frozen=True)
class ComplianceResult:
    score: float
    status: Status
    checks: ComplianceChecks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status.value,
            "checks": self.checks.as_dict(),
            "undetermined": self.checks.unknown(),
        }


@dataclass(frozen=True)
class RepositoryResult:
    repository: RepositoryDescriptor
    compliance: ComplianceResult

    @property
    def name(self) -> str:
        return self.repository.name

    @property
    def full_name(self) -> str:
        return self.repository.full_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "full_name": self.full_name,
            "compliance": self.compliance.to_dict(),
        }


@dataclass
class ComplianceSummary:
    compliant: int = 0
    partial: int = 0
    non_compliant: int = 0

    @property
    def total(self) -> int:
        return self.compliant + self.partial + self.non_compliant

    def add(self, status: Status) -> None:
        if status is Status.COMPLIANT:
            self.compliant += 1
        elif status is Status.PARTIAL:
            self.partial += 1
        else:
            self.non_compliant += 1

    def to_dict(self) -> Dict[str, int]:
        return {
            "compliant": self.compliant,
            "partial": self.partial,
            "non_compliant": self.non_compliant,
        }


@dataclass
class Report:
    total_repos: int
    compliance_summary: ComplianceSummary
    repos: List[RepositoryResult] = field(default_factory=list)
    timestamp: str = field(default_factory=_utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "total_repos": self.total_repos,
            "compliance_summary": self.compliance_summary.to_dict(),
            "repos": [r.to_dict() for r in self.repos],
        }
