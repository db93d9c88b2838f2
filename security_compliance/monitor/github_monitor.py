"""
GitHub repository listing for the authenticated account.
"""

import os
from typing import List, Optional
from github import Auth, Github
import logging

from ..models import RepositoryDescriptor

logger = logging.getLogger(__name__)

API = "https://api.github.com"
MAX_PER_PAGE = 100


def _token() -> str:
    """Get the GitHub token for API calls."""
    token = os.environ.get("GITHUB_TOKEN", "")
    if not token:
        raise RuntimeError("Missing GITHUB_TOKEN")
    return token


def get_client(
    token: Optional[str] = None,
    api_base: Optional[str] = None,
    per_page: int = MAX_PER_PAGE
) -> Github:
    """Build a PyGithub client. Lookups are attempted once, without retries."""
    return Github(
        auth=Auth.Token(token or _token()),
        base_url=api_base or os.environ.get("GITHUB_API_BASE") or API,
        per_page=per_page,
        retry=None,
    )


def list_repositories(
    gh: Github,
    per_page: int = MAX_PER_PAGE,
    sort: str = "updated"
) -> List[RepositoryDescriptor]:
    """
    Fetch the first page of repositories owned by the authenticated account.

    Errors are not caught; a failed listing aborts the run.
    """
    page = gh.get_user().get_repos(sort=sort).get_page(0)
    repos = [RepositoryDescriptor.from_api(r) for r in page]

    logger.info(f"Listed {len(repos)} repositories (sort={sort})")
    if len(repos) >= per_page:
        # Only one page is ever requested.
        logger.warning(
            f"Repository listing returned a full page of {per_page}; "
            "repositories beyond the first page are not scanned"
        )
    return repos
