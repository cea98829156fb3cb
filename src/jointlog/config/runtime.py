"""Runtime configuration for the joint recorder."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from ..core.models import CommandMode

DEFAULT_STATE_TOPIC = "/robot/limb/{arm}/joint_states"
DEFAULT_POSITION_COMMAND_TOPIC = "/robot/limb/{arm}/command_joint_angles"
DEFAULT_VELOCITY_COMMAND_TOPIC = "/robot/limb/{arm}/command_joint_velocities"


@dataclass(slots=True)
class RecorderConfig:
    """
    Tuning knobs for how the joint feed is sampled and when it counts as stale.

    The defaults match a Baxter-style limb publishing state at ~100 Hz.
    """

    arm_name: str = "left"
    command_mode: str = "position"
    record_rate_hz: float = 100.0
    state_expired_timeout_s: float = 1.0
    wait_poll_s: float = 0.25
    rate_log_period_s: float = 2.0
    expired_warn_period_s: float = 1.0

    state_topic: str = DEFAULT_STATE_TOPIC
    position_command_topic: str = DEFAULT_POSITION_COMMAND_TOPIC
    velocity_command_topic: str = DEFAULT_VELOCITY_COMMAND_TOPIC

    def sanitized(self) -> RecorderConfig:
        """Return a copy with derived limits applied."""
        arm = str(self.arm_name or "").strip() or "left"
        return RecorderConfig(
            arm_name=arm,
            command_mode=CommandMode.parse(self.command_mode).value,
            record_rate_hz=max(0.1, float(self.record_rate_hz)),
            state_expired_timeout_s=max(0.01, float(self.state_expired_timeout_s)),
            wait_poll_s=max(0.01, float(self.wait_poll_s)),
            rate_log_period_s=max(0.0, float(self.rate_log_period_s)),
            expired_warn_period_s=max(0.0, float(self.expired_warn_period_s)),
            state_topic=str(self.state_topic),
            position_command_topic=str(self.position_command_topic),
            velocity_command_topic=str(self.velocity_command_topic),
        )

    @property
    def mode(self) -> CommandMode:
        return CommandMode.parse(self.command_mode)

    @property
    def record_period_s(self) -> float:
        return 1.0 / float(self.record_rate_hz)

    def resolved_state_topic(self) -> str:
        return self.state_topic.format(arm=self.arm_name)

    def resolved_command_topic(self) -> str:
        """Command topic for the configured mode, with ``{arm}`` filled in."""
        if self.mode is CommandMode.POSITION:
            template = self.position_command_topic
        else:
            template = self.velocity_command_topic
        return template.format(arm=self.arm_name)

    def with_overrides(self, **overrides: Any) -> RecorderConfig:
        """Apply non-``None`` overrides (e.g. from the CLI) and re-sanitize."""
        payload = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **payload).sanitized()


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`RecorderConfig`."""
    return {f.name for f in fields(RecorderConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the optional top-level ``recorder`` block."""
    if "recorder" in data and isinstance(data["recorder"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "recorder":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> RecorderConfig:
    """Build :class:`RecorderConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return RecorderConfig()
    normalized = _normalize_mapping(data)
    # Accept the short "mode" spelling used on the command line.
    if "mode" in normalized and "command_mode" not in normalized:
        normalized["command_mode"] = normalized["mode"]
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return RecorderConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> RecorderConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`RecorderConfig`.
    """
    if path is None:
        return RecorderConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return RecorderConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["RecorderConfig", "config_from_mapping", "load_config"]
