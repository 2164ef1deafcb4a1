"""File-based persistence for strategy comparison runs."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def _slug(label: str) -> str:
    return _UNSAFE_CHARS.sub("-", label.strip()).strip("-").lower()


class FileStorage:
    """Run directories under ``<data_root>/outputs`` holding a JSON summary and a CSV table."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "compare", label: str | None = None) -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        name = f"{prefix}_{timestamp}"
        if label and _slug(label):
            name = f"{prefix}_{_slug(label)}_{timestamp}"
        path = self.output_root / name
        path.mkdir(parents=True, exist_ok=False)
        return path

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=indent)

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def save_run(self, summary: dict, table: str, *, prefix: str = "compare", label: str | None = None) -> Path:
        """Write ``summary.json`` and ``trucks.csv`` into a fresh run directory and return it."""
        run_dir = self.make_run_directory(prefix=prefix, label=label)
        self.write_json(run_dir / "summary.json", summary)
        self.write_csv(run_dir / "trucks.csv", table)
        return run_dir
