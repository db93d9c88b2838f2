from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from github import GithubException


def api_error(status: int, message: str = "error") -> GithubException:
    return GithubException(status, {"message": message}, None)


class FakeRepo:
    def __init__(
        self,
        full_name: str,
        has_security_md: bool = False,
        workflows: Optional[List[SimpleNamespace]] = None,
        contents_error: Optional[Exception] = None,
        workflows_error: Optional[Exception] = None,
    ) -> None:
        owner, name = full_name.split("/", 1)
        self.full_name = full_name
        self.name = name
        self.owner = SimpleNamespace(login=owner)
        self.has_security_md = has_security_md
        self.workflows = workflows or []
        self.contents_error = contents_error
        self.workflows_error = workflows_error
        self.calls: List[str] = []

    def get_contents(self, path: str):
        self.calls.append(f"contents:{path}")
        if self.contents_error is not None:
            raise self.contents_error
        if not self.has_security_md:
            raise api_error(404, "Not Found")
        return SimpleNamespace(path=path)

    def get_workflows(self):
        self.calls.append("workflows")
        if self.workflows_error is not None:
            raise self.workflows_error
        return FakeWorkflowPages(self)


class FakeWorkflowPages:
    def __init__(self, repo: FakeRepo) -> None:
        self.repo = repo

    def get_page(self, page: int):
        self.repo.calls.append(f"workflows:page{page}")
        if page > 0:
            raise api_error(502, "Bad Gateway")
        return list(self.repo.workflows)


def workflow(name: str, path: str) -> SimpleNamespace:
    return SimpleNamespace(name=name, path=path)


class FakePage:
    def __init__(self, repos: List[FakeRepo]) -> None:
        self.repos = repos
        self.sort: Optional[str] = None

    def get_page(self, page: int):
        assert page == 0
        return list(self.repos)


class FakeUser:
    def __init__(self, repos: List[FakeRepo], error: Optional[Exception] = None) -> None:
        self.page = FakePage(repos)
        self.error = error

    def get_repos(self, sort: str = "full_name"):
        if self.error is not None:
            raise self.error
        self.page.sort = sort
        return self.page


class FakeGithub:
    def __init__(self, repos: List[FakeRepo], list_error: Optional[Exception] = None) -> None:
        self.repos: Dict[str, FakeRepo] = {r.full_name: r for r in repos}
        self.user = FakeUser(repos, list_error)

    def get_user(self):
        return self.user

    def get_repo(self, full_name: str, lazy: bool = False):
        return self.repos[full_name]


@pytest.fixture
def fake_github():
    def _build(repos: List[FakeRepo], list_error: Optional[Exception] = None) -> FakeGithub:
        return FakeGithub(repos, list_error)

    return _build
