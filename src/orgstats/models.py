from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ItemsView, Iterator, Literal

CountKind = Literal["issues", "pulls", "merged_pulls", "commits", "reviews"]

COUNT_KINDS: tuple[CountKind, ...] = (
    "issues",
    "pulls",
    "merged_pulls",
    "commits",
    "reviews",
)


@dataclass
class Contributor:
    """Per-login activity counts, each keyed by repository name."""

    avatar_url: str
    issues: dict[str, int] = field(default_factory=dict)
    pulls: dict[str, int] = field(default_factory=dict)
    merged_pulls: dict[str, int] = field(default_factory=dict)
    commits: dict[str, int] = field(default_factory=dict)
    reviews: dict[str, int] = field(default_factory=dict)

    def increment(self, kind: CountKind, repo: str) -> int:
        counts: dict[str, int] = getattr(self, kind)
        counts[repo] = counts.get(repo, 0) + 1
        return counts[repo]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"avatar_url": self.avatar_url}
        for kind in COUNT_KINDS:
            out[kind] = dict(getattr(self, kind))
        return out


class ContributorMap:
    """Contributors keyed by login. Logins are compared case-sensitively."""

    def __init__(self) -> None:
        self._by_login: dict[str, Contributor] = {}

    def get_or_insert(self, login: str, *, avatar_url: str) -> Contributor:
        contributor = self._by_login.get(login)
        if contributor is None:
            contributor = Contributor(avatar_url=avatar_url)
            self._by_login[login] = contributor
        return contributor

    def __getitem__(self, login: str) -> Contributor:
        return self._by_login[login]

    def __contains__(self, login: object) -> bool:
        return login in self._by_login

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_login)

    def __len__(self) -> int:
        return len(self._by_login)

    def items(self) -> ItemsView[str, Contributor]:
        return self._by_login.items()

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {login: c.to_dict() for login, c in self._by_login.items()}


@dataclass(frozen=True, slots=True)
class RepoActivity:
    name: str
    full_name: str
    issues: list[dict[str, Any]] = field(default_factory=list)
    reviews: list[dict[str, Any]] = field(default_factory=list)
    commits: list[dict[str, Any]] = field(default_factory=list)
