from .aggregate import aggregate, aggregate_repository
from .collector import StatsCollector
from .github_client import GitHubApiError, GitHubClient
from .models import Contributor, ContributorMap, RepoActivity

__all__ = [
    "Contributor",
    "ContributorMap",
    "GitHubApiError",
    "GitHubClient",
    "RepoActivity",
    "StatsCollector",
    "aggregate",
    "aggregate_repository",
]
