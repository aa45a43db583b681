"""
Tests for open pull request sources.

All tests in this file are marked as 'short' since they mock the GitHub API
and don't require network I/O.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from prversion.versioning.exceptions import DegradedReadError
from prversion.versioning.sources import (
    GitHubPullRequestSource,
    OpenPullRequest,
    StaticPullRequestSource,
    UnavailablePullRequestSource,
    github_repository_from_url,
)


def make_response(payload, next_url=None, status=200):
    response = MagicMock()
    response.json.return_value = payload
    response.links = {"next": {"url": next_url}} if next_url else {}
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return response


def pr(number, ref):
    return {"number": number, "head": {"ref": ref}}


@pytest.mark.short
class TestGitHubPullRequestSource:
    def test_list_open_prs(self):
        source = GitHubPullRequestSource("example/app", token="secret", timeout=3)

        with patch("prversion.versioning.sources.requests.get") as mock_get:
            mock_get.return_value = make_response(
                [pr(2, "feature/two"), pr(3, "feature/three")]
            )
            result = source.list_open_prs()

        assert result == {
            OpenPullRequest(2, "feature/two"),
            OpenPullRequest(3, "feature/three"),
        }
        args, kwargs = mock_get.call_args
        assert args[0] == "https://api.github.com/repos/example/app/pulls"
        assert kwargs["params"] == {"state": "open", "base": "main", "per_page": 100}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 3

    def test_pagination(self):
        source = GitHubPullRequestSource("example/app")
        next_url = "https://api.github.com/repositories/1/pulls?page=2"

        with patch("prversion.versioning.sources.requests.get") as mock_get:
            mock_get.side_effect = [
                make_response([pr(2, "feature/two")], next_url=next_url),
                make_response([pr(5, "feature/five")]),
            ]
            result = source.list_open_prs()

        assert {p.number for p in result} == {2, 5}
        second_call = mock_get.call_args_list[1]
        assert second_call.args[0] == next_url
        assert second_call.kwargs["params"] is None

    def test_request_timeout_capped_by_deadline(self):
        source = GitHubPullRequestSource("example/app", timeout=10)

        with patch("prversion.versioning.sources.time.monotonic", return_value=100.0):
            with patch("prversion.versioning.sources.requests.get") as mock_get:
                mock_get.return_value = make_response([pr(2, "feature/two")])
                source.list_open_prs(deadline=102.5)

        assert mock_get.call_args.kwargs["timeout"] == 2.5

    def test_deadline_passed_before_first_page(self):
        source = GitHubPullRequestSource("example/app")

        with patch("prversion.versioning.sources.time.monotonic", return_value=100.0):
            with patch("prversion.versioning.sources.requests.get") as mock_get:
                with pytest.raises(DegradedReadError, match="deadline"):
                    source.list_open_prs(deadline=99.0)

        mock_get.assert_not_called()

    def test_deadline_checked_between_pages(self):
        source = GitHubPullRequestSource("example/app")
        next_url = "https://api.github.com/repositories/1/pulls?page=2"

        with patch(
            "prversion.versioning.sources.time.monotonic", side_effect=[100.0, 111.0]
        ):
            with patch("prversion.versioning.sources.requests.get") as mock_get:
                mock_get.return_value = make_response(
                    [pr(2, "feature/two")], next_url=next_url
                )
                with pytest.raises(DegradedReadError, match="deadline"):
                    source.list_open_prs(deadline=110.0)

        assert mock_get.call_count == 1

    def test_empty_listing(self):
        source = GitHubPullRequestSource("example/app")
        with patch("prversion.versioning.sources.requests.get") as mock_get:
            mock_get.return_value = make_response([])
            assert source.list_open_prs() == set()

    def test_no_token_no_authorization_header(self):
        source = GitHubPullRequestSource("example/app")
        assert "Authorization" not in source._headers()

    def test_http_error_is_degraded(self):
        source = GitHubPullRequestSource("example/app")
        with patch("prversion.versioning.sources.requests.get") as mock_get:
            mock_get.return_value = make_response([], status=503)
            with pytest.raises(DegradedReadError, match="503"):
                source.list_open_prs()

    def test_timeout_is_degraded(self):
        source = GitHubPullRequestSource("example/app", timeout=0.1)
        with patch("prversion.versioning.sources.requests.get") as mock_get:
            mock_get.side_effect = requests.Timeout("read timed out")
            with pytest.raises(DegradedReadError, match="timed out"):
                source.list_open_prs()

    def test_unexpected_payload_is_degraded(self):
        source = GitHubPullRequestSource("example/app")
        with patch("prversion.versioning.sources.requests.get") as mock_get:
            mock_get.return_value = make_response([{"number": 2}])
            with pytest.raises(DegradedReadError, match="unexpected payload"):
                source.list_open_prs()

    @pytest.mark.parametrize("repository", ["", "app", "a/b/c"])
    def test_invalid_repository(self, repository):
        with pytest.raises(ValueError, match="owner/name"):
            GitHubPullRequestSource(repository)


@pytest.mark.short
class TestOtherSources:
    def test_static_source_returns_copy(self):
        prs = [OpenPullRequest(2, "feature/two")]
        source = StaticPullRequestSource(prs)
        listed = source.list_open_prs()
        listed.clear()
        assert source.list_open_prs() == set(prs)

    def test_unavailable_source(self):
        source = UnavailablePullRequestSource("no GitHub repository configured")
        with pytest.raises(DegradedReadError, match="no GitHub repository"):
            source.list_open_prs()


@pytest.mark.short
@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://github.com/example/app.git", "example/app"),
        ("https://github.com/example/app", "example/app"),
        ("https://token@github.com/example/app.git", "example/app"),
        ("git@github.com:example/app.git", "example/app"),
        ("ssh://git@github.com/example/app.git", "example/app"),
        ("https://gitlab.com/example/app.git", None),
        ("/srv/git/app.git", None),
    ],
)
def test_github_repository_from_url(url, expected):
    assert github_repository_from_url(url) == expected
