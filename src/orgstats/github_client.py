from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

import requests


@dataclass(frozen=True, slots=True)
class RateLimitInfo:
    limit: int | None = None
    remaining: int | None = None
    reset_at: str | None = None
    resource: str | None = None


@dataclass(frozen=True, slots=True)
class Page:
    items: list[Any] = field(default_factory=list)
    has_next: bool = False


class GitHubApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status: int,
        url: str,
        rate_limit: RateLimitInfo | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.url = url
        self.rate_limit = rate_limit
        self.retry_after = retry_after


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_rate_limit(headers: Mapping[str, str]) -> RateLimitInfo | None:
    limit = _parse_int(headers.get("X-RateLimit-Limit"))
    remaining = _parse_int(headers.get("X-RateLimit-Remaining"))
    reset = _parse_int(headers.get("X-RateLimit-Reset"))
    resource = headers.get("X-RateLimit-Resource")
    if limit is None and remaining is None and reset is None and resource is None:
        return None
    reset_at = (
        datetime.fromtimestamp(reset, tz=timezone.utc).isoformat()
        if reset is not None
        else None
    )
    return RateLimitInfo(
        limit=limit, remaining=remaining, reset_at=reset_at, resource=resource
    )


def _parse_retry_after(headers: Mapping[str, str]) -> float | None:
    value = headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class GitHubClient:
    """Thin REST client: one GET per call, one page per response."""

    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        user_agent: str = "orgstats-collector",
        api_version: str = "2022-11-28",
        timeout_sec: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_sec = timeout_sec
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": user_agent,
                "X-GitHub-Api-Version": api_version,
            }
        )
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

        self.last_rate_limit: RateLimitInfo | None = None

    def get_page(self, path: str, *, query: Mapping[str, Any] | None = None) -> Page:
        url = f"{self._base_url}{path}"
        params = {k: v for k, v in (query or {}).items() if v is not None}

        try:
            response = self._session.get(url, params=params, timeout=self._timeout_sec)
        except requests.RequestException as error:
            raise GitHubApiError(
                str(error), status=0, url=url, rate_limit=self.last_rate_limit
            ) from error

        rate_limit = _parse_rate_limit(response.headers)
        if rate_limit is not None:
            self.last_rate_limit = rate_limit

        if not response.ok:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            message = ""
            if isinstance(payload, dict):
                message = str(payload.get("message") or "")
            raise GitHubApiError(
                message or f"GitHub API request failed ({response.status_code})",
                status=response.status_code,
                url=url,
                rate_limit=rate_limit,
                retry_after=_parse_retry_after(response.headers),
            )

        try:
            items = response.json()
        except ValueError as error:
            raise GitHubApiError(
                f"Invalid JSON from {path}",
                status=response.status_code,
                url=url,
                rate_limit=rate_limit,
            ) from error
        if not isinstance(items, list):
            raise GitHubApiError(
                f"Expected a list from {path}, got {type(items).__name__}",
                status=response.status_code,
                url=url,
                rate_limit=rate_limit,
            )

        return Page(
            items=items,
            has_next="next" in response.links,
        )
