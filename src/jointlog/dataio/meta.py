"""JSON sidecar describing how a recording was made."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..core.models import RecordingInfo
from .file_paths import meta_path_for


def write_meta(data_path: Path, info: RecordingInfo) -> Path:
    """Write ``info`` next to ``data_path`` and return the sidecar path."""
    meta_path = meta_path_for(data_path)
    meta_path.parent.mkdir(parents=True, exist_ok=True)
    with meta_path.open("w", encoding="utf-8") as fh:
        json.dump(info.to_mapping(), fh, indent=2)
        fh.write("\n")
    return meta_path


def read_meta(data_path: Path) -> Optional[RecordingInfo]:
    """Return the sidecar for ``data_path``, or ``None`` if there is none."""
    meta_path = meta_path_for(data_path)
    if not meta_path.exists():
        return None
    with meta_path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Metadata file {meta_path} must contain a JSON object")
    return RecordingInfo.from_mapping(raw)
