"""
Open pull request listings.

A source answers "which PRs are open, and on which branches". An empty set is
a valid answer; DegradedReadError means the listing is unavailable.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, Set

import requests

from .exceptions import DegradedReadError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"

_GITHUB_URL = re.compile(
    r"^(?:https?://(?:[^@/]+@)?github\.com/|git@github\.com:|ssh://git@github\.com/)"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class OpenPullRequest:
    number: int
    branch_ref: str


class PullRequestSource(ABC):
    @abstractmethod
    def list_open_prs(self, deadline: Optional[float] = None) -> Set[OpenPullRequest]:
        """
        List open pull requests.

        Args:
            deadline: time.monotonic() value by which the listing must be
                done. Sources that make requests stop at it.

        Raises:
            DegradedReadError: If the listing is unavailable or the deadline
                passes
        """


class StaticPullRequestSource(PullRequestSource):
    """A fixed snapshot of open pull requests."""

    def __init__(self, pull_requests: Iterable[OpenPullRequest] = ()):
        self.pull_requests = set(pull_requests)

    def list_open_prs(self, deadline: Optional[float] = None) -> Set[OpenPullRequest]:
        return set(self.pull_requests)


class UnavailablePullRequestSource(PullRequestSource):
    """Stands in when no listing backend is configured; always degraded."""

    def __init__(self, reason: str):
        self.reason = reason

    def list_open_prs(self, deadline: Optional[float] = None) -> Set[OpenPullRequest]:
        raise DegradedReadError("pull request listing", self.reason)


def github_repository_from_url(url: str) -> Optional[str]:
    """
    Extract owner/name from a GitHub remote URL.

    Handles https://github.com/owner/name(.git) and git@github.com:owner/name(.git).
    Returns None for non-GitHub URLs.
    """
    match = _GITHUB_URL.match(url.strip())
    if not match:
        return None
    return f"{match.group('owner')}/{match.group('name')}"


class GitHubPullRequestSource(PullRequestSource):
    """
    Lists open pull requests through the GitHub REST API.

    Only pull requests targeting the trunk branch are returned. Every request
    is bounded by `timeout` seconds and by the time left until the deadline,
    which is also checked before each page. Any transport or HTTP error
    surfaces as DegradedReadError.
    """

    def __init__(
        self,
        repository: str,
        base_branch: str = "main",
        token: Optional[str] = None,
        api_url: str = GITHUB_API_URL,
        timeout: float = 10.0,
        per_page: int = 100,
    ):
        if not repository or repository.count("/") != 1:
            raise ValueError(
                f"Invalid GitHub repository '{repository}'. Expected owner/name"
            )
        self.repository = repository
        self.base_branch = base_branch
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.per_page = per_page

    def _headers(self) -> dict:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request_timeout(self, deadline: Optional[float]) -> float:
        if deadline is None:
            return self.timeout
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DegradedReadError(
                f"GitHub {self.repository}", "listing deadline passed"
            )
        return min(self.timeout, remaining)

    def list_open_prs(self, deadline: Optional[float] = None) -> Set[OpenPullRequest]:
        url = f"{self.api_url}/repos/{self.repository}/pulls"
        params = {"state": "open", "base": self.base_branch, "per_page": self.per_page}
        result: Set[OpenPullRequest] = set()

        while url:
            timeout = self._request_timeout(deadline)
            try:
                response = requests.get(
                    url, headers=self._headers(), params=params, timeout=timeout
                )
                response.raise_for_status()
                payload = response.json()
            except requests.RequestException as e:
                raise DegradedReadError(f"GitHub {self.repository}", str(e)) from e
            except ValueError as e:
                raise DegradedReadError(
                    f"GitHub {self.repository}", f"invalid JSON response: {e}"
                ) from e

            try:
                for pr in payload:
                    result.add(OpenPullRequest(int(pr["number"]), pr["head"]["ref"]))
            except (KeyError, TypeError) as e:
                raise DegradedReadError(
                    f"GitHub {self.repository}", f"unexpected payload: {e}"
                ) from e

            # the next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None

        logger.debug(f"Found {len(result)} open pull requests in {self.repository}")
        return result
