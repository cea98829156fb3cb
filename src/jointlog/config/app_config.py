"""Default application paths."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AppPaths:
    """
    Commonly used paths for recordings.

    ``JOINTLOG_DATA_ROOT`` and ``JOINTLOG_LOG_DIR`` override the default
    ``data``/``logs`` folders relative to the repository root so that
    packaged installs can store files elsewhere.
    """

    # repo_root points at the project root (one level above src/)
    repo_root: Path = Path(__file__).resolve().parents[3]
    data_root: Path = field(init=False)
    recordings: Path = field(init=False)
    logs: Path = field(init=False)
    config_dir: Path = field(init=False)

    def __post_init__(self) -> None:
        env_data_root = os.environ.get("JOINTLOG_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = self.repo_root / "data"

        env_logs_dir = os.environ.get("JOINTLOG_LOG_DIR")
        if env_logs_dir:
            self.logs = Path(env_logs_dir).expanduser()
        else:
            self.logs = self.repo_root / "logs"

        self.recordings = self.data_root / "recordings"
        self.config_dir = Path(__file__).resolve().parent

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        for path in (self.data_root, self.recordings, self.logs):
            path.mkdir(parents=True, exist_ok=True)

    @property
    def default_config_file(self) -> Path:
        return self.config_dir / "recorder.yaml"
