"""Helpers for constructing recording file paths."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config.app_config import AppPaths

# Allow only alphanumerics, underscore, dot, and dash.
_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def sanitize_name(name: str) -> str:
    """
    Sanitize a session name for use in a file name.

    - Replace disallowed characters with '_'.
    - Strip leading/trailing underscores.
    - Fall back to 'session' if nothing remains.
    """
    cleaned = _NAME_RE.sub("_", name).strip("_")
    return cleaned or "session"


@dataclass(frozen=True)
class RecordingFilePaths:
    """Container with the CSV path and its .meta.json sidecar path."""

    data_path: Path
    meta_path: Path


def meta_path_for(data_path: Path) -> Path:
    data_path = Path(data_path)
    return data_path.with_suffix(data_path.suffix + ".meta.json")


def recording_file_paths(
    session_name: Optional[str],
    arm_name: str,
    base: Path | None = None,
    now: datetime | None = None,
) -> RecordingFilePaths:
    """
    Build a timestamped CSV path for a recording.

    Example: ``<data>/recordings/shake_test_left_20251204_153045.csv``
    """
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    root = Path(base) if base is not None else AppPaths().recordings
    parts = [sanitize_name(session_name)] if session_name else []
    parts.append(sanitize_name(arm_name))
    data_path = root / f"{'_'.join(parts)}_{timestamp}.csv"
    return RecordingFilePaths(data_path=data_path, meta_path=meta_path_for(data_path))
