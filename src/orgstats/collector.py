from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from .aggregate import aggregate
from .github_client import GitHubClient, Page
from .models import ContributorMap, RepoActivity
from .output import write_contributors
from .retry import DEFAULT_RETRIES, retry_call

logger = logging.getLogger(__name__)

PER_PAGE = 100


class StatsCollector:
    def __init__(
        self,
        *,
        org: str,
        client: GitHubClient,
        retries: int = DEFAULT_RETRIES,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._org = org
        self._client = client
        self._retries = retries
        self._sleep = sleep

    def _get_page(self, path: str, query: dict[str, Any]) -> Page:
        options: dict[str, Any] = {"retries": self._retries}
        if self._sleep is not None:
            options["sleep"] = self._sleep
        return retry_call(lambda: self._client.get_page(path, query=query), **options)

    def get_repos(self) -> list[dict[str, Any]]:
        """Public source repositories of the org. A single page is requested."""
        page = self._get_page(
            f"/orgs/{self._org}/repos",
            {"type": "sources", "per_page": PER_PAGE},
        )
        return [repo for repo in page.items if not repo.get("private")]

    def _get_all(self, path: str, label: str, repo: str, query: dict[str, Any] | None = None) -> list[Any]:
        logger.info("Fetching %s for %s/%s...", label, self._org, repo)
        records: list[Any] = []
        page_number = 1
        while True:
            page = self._get_page(
                path,
                {**(query or {}), "page": page_number, "per_page": PER_PAGE},
            )
            records.extend(page.items)
            if not page.has_next:
                break
            page_number += 1
        logger.info("Done fetching %d %s for %s/%s", len(records), label, self._org, repo)
        return records

    def get_all_issues(self, repo: str) -> list[Any]:
        # Pull requests come back from this endpoint too, marked by `pull_request`.
        return self._get_all(
            f"/repos/{self._org}/{repo}/issues", "issues", repo, {"state": "all"}
        )

    def get_all_reviews(self, repo: str) -> list[Any]:
        return self._get_all(f"/repos/{self._org}/{repo}/pulls/comments", "PR reviews", repo)

    def get_all_commits(self, repo: str) -> list[Any]:
        return self._get_all(f"/repos/{self._org}/{repo}/commits", "commits", repo)

    def collect(self) -> list[RepoActivity]:
        logger.info("Fetching repos...")
        repos = self.get_repos()
        logger.info("Done fetching repos!")

        activities: list[RepoActivity] = []
        for repo in repos:
            name = repo["name"]
            activities.append(
                RepoActivity(
                    name=name,
                    full_name=repo.get("full_name") or f"{self._org}/{name}",
                    issues=self.get_all_issues(name),
                    reviews=self.get_all_reviews(name),
                    commits=self.get_all_commits(name),
                )
            )
        return activities

    def run(self, output_paths: Iterable[str | Path]) -> ContributorMap:
        activities = self.collect()

        logger.info("Processing data...")
        contributors = aggregate(activities)
        logger.info("Done processing data!")

        logger.info("Writing to disk...")
        write_contributors(contributors, output_paths)
        logger.info("Mission complete!")
        return contributors
