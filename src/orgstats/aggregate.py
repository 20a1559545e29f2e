from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from .models import ContributorMap, RepoActivity

logger = logging.getLogger(__name__)


def _user_of(record: Mapping[str, Any], key: str = "user") -> Mapping[str, Any] | None:
    user = record.get(key)
    if not isinstance(user, dict):
        return None
    login = user.get("login")
    if not isinstance(login, str) or not login:
        return None
    return user


def _count_issues(contributors: ContributorMap, activity: RepoActivity) -> None:
    for issue in activity.issues:
        user = _user_of(issue)
        if user is None:
            logger.warning("No user found for %s#%s", activity.full_name, issue.get("number"))
            continue
        contributor = contributors.get_or_insert(user["login"], avatar_url=user.get("avatar_url") or "")
        pull_request = issue.get("pull_request")
        if pull_request is not None:
            contributor.increment("pulls", activity.name)
            if isinstance(pull_request, dict) and pull_request.get("merged_at"):
                contributor.increment("merged_pulls", activity.name)
        else:
            contributor.increment("issues", activity.name)


def _count_reviews(contributors: ContributorMap, activity: RepoActivity) -> None:
    # One credit per (login, pull request); review comments beyond the first don't count.
    reviewed_prs: dict[str, set[str | None]] = {}
    for review in activity.reviews:
        user = _user_of(review)
        if user is None:
            logger.warning("No user found for PR review: %s", review.get("url"))
            continue
        login = user["login"]
        contributor = contributors.get_or_insert(login, avatar_url=user.get("avatar_url") or "")
        credited = reviewed_prs.setdefault(login, set())
        pr_url = review.get("pull_request_url")
        if pr_url not in credited:
            contributor.increment("reviews", activity.name)
            credited.add(pr_url)


def _count_commits(contributors: ContributorMap, activity: RepoActivity) -> None:
    for commit in activity.commits:
        user = _user_of(commit, "author") or _user_of(commit, "committer")
        if user is None:
            logger.warning("No user found for commit: %s", commit.get("url"))
            continue
        contributor = contributors.get_or_insert(user["login"], avatar_url=user.get("avatar_url") or "")
        contributor.increment("commits", activity.name)


def aggregate_repository(contributors: ContributorMap, activity: RepoActivity) -> ContributorMap:
    """Fold one repository's issues, review comments and commits into `contributors`."""
    _count_issues(contributors, activity)
    _count_reviews(contributors, activity)
    _count_commits(contributors, activity)
    return contributors


def aggregate(
    activities: Iterable[RepoActivity],
    contributors: ContributorMap | None = None,
) -> ContributorMap:
    if contributors is None:
        contributors = ContributorMap()
    for activity in activities:
        aggregate_repository(contributors, activity)
    return contributors
