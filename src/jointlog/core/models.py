"""Shared dataclasses for joint messages and recording sessions."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence


class CommandMode(str, Enum):
    """How the controller drives the arm: joint angle or joint velocity targets."""

    POSITION = "position"
    VELOCITY = "velocity"

    @property
    def column_suffix(self) -> str:
        return "_pos_cmd" if self is CommandMode.POSITION else "_vel_cmd"

    @property
    def message_kind(self) -> str:
        return "joint_positions" if self is CommandMode.POSITION else "joint_velocities"

    @classmethod
    def parse(cls, value: "str | CommandMode") -> "CommandMode":
        if isinstance(value, CommandMode):
            return value
        raw = str(value or "").strip().lower()
        if raw in {"position", "pos", "angles", "p"}:
            return cls.POSITION
        if raw in {"velocity", "vel", "velocities", "v"}:
            return cls.VELOCITY
        raise ValueError(f"Unknown command mode {value!r}")


def _float_list(values: Optional[Sequence[Any]]) -> List[float]:
    if not values:
        return []
    return [float(v) for v in values]


@dataclass
class JointState:
    stamp: float
    name: List[str]
    position: List[float] = field(default_factory=list)
    velocity: List[float] = field(default_factory=list)
    effort: List[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.stamp = float(self.stamp)
        self.name = [str(n) for n in self.name]
        self.position = _float_list(self.position)
        self.velocity = _float_list(self.velocity)
        self.effort = _float_list(self.effort)

    def values_for(self, joint: str) -> tuple[float, float, float]:
        """Return ``(position, velocity, effort)`` for ``joint`` (NaN where absent)."""
        try:
            idx = self.name.index(joint)
        except ValueError:
            return math.nan, math.nan, math.nan
        return (
            _at(self.position, idx),
            _at(self.velocity, idx),
            _at(self.effort, idx),
        )


@dataclass
class JointCommand:
    mode: CommandMode
    values: List[float]
    names: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.mode = CommandMode.parse(self.mode)
        self.values = _float_list(self.values)
        self.names = [str(n) for n in self.names]

    def value_for(self, joint: str, index: int) -> float:
        """
        Commanded value for ``joint``.

        Named commands are matched by joint name; unnamed ones fall back to
        the column ``index`` of the joint in the recording.
        """
        if self.names:
            try:
                return _at(self.values, self.names.index(joint))
            except ValueError:
                return math.nan
        return _at(self.values, index)


def _at(values: Sequence[float], index: int) -> float:
    if 0 <= index < len(values):
        return float(values[index])
    return math.nan


@dataclass
class RecordingInfo:
    arm_name: str
    command_mode: CommandMode
    record_rate_hz: float
    started_at: datetime
    output_path: Optional[Path] = None
    sample_count: int = 0
    aborted: bool = False
    joint_names: List[str] = field(default_factory=list)

    def to_mapping(self) -> Dict[str, Any]:
        data = asdict(self)
        data["command_mode"] = self.command_mode.value
        data["started_at"] = self.started_at.isoformat()
        data["output_path"] = str(self.output_path) if self.output_path else None
        return data

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "RecordingInfo":
        output = data.get("output_path")
        return cls(
            arm_name=str(data.get("arm_name", "")),
            command_mode=CommandMode.parse(data.get("command_mode", "position")),
            record_rate_hz=float(data.get("record_rate_hz", 0.0)),
            started_at=datetime.fromisoformat(str(data["started_at"])),
            output_path=Path(output) if output else None,
            sample_count=int(data.get("sample_count", 0)),
            aborted=bool(data.get("aborted", False)),
            joint_names=[str(n) for n in data.get("joint_names") or []],
        )
