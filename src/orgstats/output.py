from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable

from .models import ContributorMap

logger = logging.getLogger(__name__)


def render_contributors(contributors: ContributorMap) -> str:
    return json.dumps(contributors.to_dict(), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def safe_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()


def write_contributors(contributors: ContributorMap, paths: Iterable[str | Path]) -> list[Path]:
    """
    Write the contributor map as JSON to every destination in `paths`.

    Serialization happens once, before any file is touched, so a failure there
    leaves every existing destination as it was.
    """
    text = render_contributors(contributors)
    written: list[Path] = []
    for raw_path in paths:
        path = Path(raw_path)
        safe_write_text(path, text)
        logger.info("Data written to %s", path)
        written.append(path)
    return written
