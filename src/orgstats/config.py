from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping

from .retry import DEFAULT_RETRIES

DEFAULT_ORG = "Unofficial-BlossomCraft-Wikis"
DEFAULT_OUTPUT_PATHS: tuple[str, ...] = ("published/contributors.json",)
DEFAULT_BASE_URL = "https://api.github.com"


@dataclass(frozen=True, slots=True)
class CollectorConfig:
    org: str = DEFAULT_ORG
    token: str | None = None
    output_paths: tuple[str, ...] = DEFAULT_OUTPUT_PATHS
    base_url: str = DEFAULT_BASE_URL
    retries: int = DEFAULT_RETRIES
    log_level: str = "INFO"


def _split_paths(raw: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def load_collector_config(env: Mapping[str, str] | None = None) -> CollectorConfig:
    if env is None:
        env = os.environ

    raw_retries = env.get("ORGSTATS_RETRIES")
    retries = DEFAULT_RETRIES
    if raw_retries:
        try:
            retries = int(raw_retries)
        except ValueError:
            raise ValueError(f"ORGSTATS_RETRIES must be an integer, got {raw_retries!r}") from None
        if retries < 0:
            raise ValueError(f"ORGSTATS_RETRIES must be >= 0, got {retries}")

    output_paths = _split_paths(env.get("ORGSTATS_OUTPUT") or "") or DEFAULT_OUTPUT_PATHS

    return CollectorConfig(
        org=env.get("ORGSTATS_ORG") or DEFAULT_ORG,
        # Missing token is allowed; the API will rate-limit or reject at request time.
        token=env.get("GITHUB_TOKEN") or None,
        output_paths=output_paths,
        base_url=env.get("GITHUB_API_URL") or DEFAULT_BASE_URL,
        retries=retries,
        log_level=(env.get("ORGSTATS_LOG_LEVEL") or "INFO").upper(),
    )


def load_dotenv(
    path: str | Path = ".env",
    *,
    override: bool = False,
    environ: MutableMapping[str, str] | None = None,
) -> list[str]:
    """
    Copy KEY=value lines from a local .env file into `environ` (os.environ by default).

    Returns the keys that were set. Values are never logged.
    """
    if environ is None:
        environ = os.environ
    env_path = Path(path)
    if not env_path.is_file():
        return []

    loaded: list[str] = []
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.removeprefix("export ").split("=", 1)
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        if not key or (key in environ and not override):
            continue
        environ[key] = value
        loaded.append(key)
    return loaded
