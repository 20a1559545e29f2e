from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from orgstats.collector import StatsCollector
from orgstats.github_client import GitHubApiError
from tests.helpers.github_fakes import FakeGitHub, commit, issue, pull, repo, review_comment


def _collector(github: FakeGitHub, *, retries: int = 3) -> StatsCollector:
    return StatsCollector(org=github.org, client=github.client(), retries=retries, sleep=lambda _s: None)


def test_pagination_concatenates_pages_in_order(caplog: pytest.LogCaptureFixture) -> None:
    commits = [commit(f"c{i:03d}", "alice") for i in range(250)]
    github = FakeGitHub(resources={"/repos/acme/widget/commits": commits})

    with caplog.at_level(logging.INFO, logger="orgstats.collector"):
        fetched = _collector(github).get_all_commits("widget")

    assert fetched == commits
    assert [q["page"] for _p, q in github.calls] == ["1", "2", "3"]
    assert {q["per_page"] for _p, q in github.calls} == {"100"}
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Fetching commits for acme/widget...", "Done fetching 250 commits for acme/widget"]


def test_single_page_resource_is_fetched_once() -> None:
    github = FakeGitHub(resources={"/repos/acme/widget/pulls/comments": [review_comment(1, "carol", 3)]})
    assert len(_collector(github).get_all_reviews("widget")) == 1
    assert len(github.calls) == 1


def test_issues_are_requested_with_state_all() -> None:
    github = FakeGitHub(resources={"/repos/acme/widget/issues": [issue(1, "alice")]})
    _collector(github).get_all_issues("widget")
    _path, query = github.calls[0]
    assert query["state"] == "all"


def test_get_repos_drops_private_and_asks_for_sources() -> None:
    github = FakeGitHub(repos=[repo("A"), repo("B", private=True), repo("C")])
    names = [r["name"] for r in _collector(github).get_repos()]
    assert names == ["A", "C"]
    assert github.calls == [("/orgs/acme/repos", {"type": "sources", "per_page": "100"})]


def test_page_fetch_is_retried_on_transient_failure(caplog: pytest.LogCaptureFixture) -> None:
    github = FakeGitHub(
        resources={"/repos/acme/widget/commits": [commit("a", "alice")]},
        failures={"/repos/acme/widget/commits": 2},
    )
    with caplog.at_level(logging.WARNING, logger="orgstats.retry"):
        fetched = _collector(github).get_all_commits("widget")
    assert [c["sha"] for c in fetched] == ["a"]
    assert len([r for r in caplog.records if r.name == "orgstats.retry"]) == 2


def test_private_repository_is_never_fetched(tmp_path: Path) -> None:
    github = FakeGitHub(
        repos=[repo("A"), repo("B", private=True)],
        resources={
            "/repos/acme/A/issues": [issue(1, "alice"), pull(2, "bob", merged=True)],
            "/repos/acme/A/pulls/comments": [review_comment(1, "carol", 2), review_comment(2, "carol", 2)],
            "/repos/acme/A/commits": [commit("a", "bob")],
            "/repos/acme/B/issues": [issue(1, "mallory")],
            "/repos/acme/B/pulls/comments": [],
            "/repos/acme/B/commits": [commit("b", "mallory")],
        },
    )
    out = tmp_path / "published" / "contributors.json"

    contributors = _collector(github).run([out])

    assert github.paths() == [
        "/orgs/acme/repos",
        "/repos/acme/A/issues",
        "/repos/acme/A/pulls/comments",
        "/repos/acme/A/commits",
    ]
    assert "mallory" not in contributors
    data = json.loads(out.read_text(encoding="utf-8"))
    assert set(data) == {"alice", "bob", "carol"}
    assert data["bob"]["pulls"] == {"A": 1}
    assert data["bob"]["merged_pulls"] == {"A": 1}
    assert data["bob"]["commits"] == {"A": 1}
    assert data["carol"]["reviews"] == {"A": 1}
    assert all("B" not in counts for c in data.values() for k, counts in c.items() if k != "avatar_url")


def test_exhausted_retries_abort_the_run_without_output(tmp_path: Path) -> None:
    github = FakeGitHub(
        repos=[repo("A")],
        resources={"/repos/acme/A/issues": [], "/repos/acme/A/pulls/comments": []},
        failures={"/repos/acme/A/commits": 10},
    )
    out = tmp_path / "contributors.json"

    with pytest.raises(GitHubApiError) as excinfo:
        _collector(github, retries=2).run([out])

    assert excinfo.value.status == 502
    assert github.paths().count("/repos/acme/A/commits") == 3
    assert not out.exists()


def test_same_input_produces_identical_bytes(tmp_path: Path) -> None:
    def build() -> FakeGitHub:
        return FakeGitHub(
            repos=[repo("A"), repo("Z")],
            resources={
                "/repos/acme/A/issues": [issue(1, "zed"), pull(2, "amy")],
                "/repos/acme/A/pulls/comments": [review_comment(1, "amy", 2)],
                "/repos/acme/A/commits": [commit("a", "zed")],
                "/repos/acme/Z/issues": [],
                "/repos/acme/Z/pulls/comments": [],
                "/repos/acme/Z/commits": [commit("b", "amy")],
            },
        )

    first, second = tmp_path / "first.json", tmp_path / "second.json"
    _collector(build()).run([first])
    _collector(build()).run([second])
    assert first.read_bytes() == second.read_bytes()


def test_repo_discovery_is_retried_on_transient_failure(caplog: pytest.LogCaptureFixture) -> None:
    github = FakeGitHub(repos=[repo("A")], failures={"/orgs/acme/repos": 2})

    with caplog.at_level(logging.WARNING, logger="orgstats.retry"):
        names = [r["name"] for r in _collector(github).get_repos()]

    assert names == ["A"]
    assert github.paths() == ["/orgs/acme/repos"] * 3
    assert len([r for r in caplog.records if r.name == "orgstats.retry"]) == 2


def test_repo_discovery_exhaustion_stops_before_any_repo_request(tmp_path: Path) -> None:
    github = FakeGitHub(
        repos=[repo("A")],
        resources={"/repos/acme/A/issues": [issue(1, "alice")]},
        failures={"/orgs/acme/repos": 10},
    )
    out = tmp_path / "contributors.json"

    with pytest.raises(GitHubApiError):
        _collector(github, retries=2).run([out])

    assert github.paths() == ["/orgs/acme/repos"] * 3
    assert not any(path.startswith("/repos/") for path in github.paths())
    assert not out.exists()
