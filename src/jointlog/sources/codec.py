"""
JSON line encoding of the joint feed.

Every line is one JSON object carrying a ``topic`` plus the message body:

  - joint state  : ``stamp`` (float s), ``name``, ``position``, ``velocity``,
    ``effort``
  - joint angles : ``names``, ``angles``
  - joint velocities : ``names``, ``velocities``

``decode()`` returns ``None`` for anything it cannot make sense of; the reason
is logged so a bad bridge shows up without stopping the recording.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Tuple, Union

from ..core.models import CommandMode, JointCommand, JointState

logger = logging.getLogger(__name__)

Message = Union[JointState, JointCommand]

_COMMAND_VALUE_KEYS = {
    "joint_positions": ("angles", CommandMode.POSITION),
    "joint_velocities": ("velocities", CommandMode.VELOCITY),
}


def infer_kind(record: Mapping[str, Any]) -> Optional[str]:
    """Guess the message kind from the fields present."""
    kind = record.get("kind")
    if isinstance(kind, str) and kind:
        return kind
    if "position" in record or "effort" in record:
        return "joint_state"
    if "angles" in record:
        return "joint_positions"
    if "velocities" in record:
        return "joint_velocities"
    return None


def decode_joint_state(record: Mapping[str, Any]) -> Optional[JointState]:
    stamp = record.get("stamp")
    names = record.get("name")
    if stamp is None or not isinstance(names, list):
        logger.warning("Joint state missing stamp/name: %r", record)
        return None
    try:
        return JointState(
            stamp=float(stamp),
            name=names,
            position=record.get("position") or [],
            velocity=record.get("velocity") or [],
            effort=record.get("effort") or [],
        )
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("Bad field value in joint state %r (%s)", record, exc)
        return None


def decode_command(record: Mapping[str, Any], kind: str) -> Optional[JointCommand]:
    value_key, mode = _COMMAND_VALUE_KEYS[kind]
    values = record.get(value_key)
    if not isinstance(values, list):
        logger.warning("Command missing %r list: %r", value_key, record)
        return None
    names = record.get("names")
    if names is None:
        names = []
    if not isinstance(names, list):
        logger.warning("Command names must be a list: %r", record)
        return None
    try:
        return JointCommand(mode=mode, values=values, names=names)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("Bad field value in command %r (%s)", record, exc)
        return None


def decode_record(record: Mapping[str, Any], kind: Optional[str] = None) -> Optional[Message]:
    kind = kind or infer_kind(record)
    if kind == "joint_state":
        return decode_joint_state(record)
    if kind in _COMMAND_VALUE_KEYS:
        return decode_command(record, kind)
    logger.debug("Unknown message kind %r in record %r", kind, record)
    return None


def parse_line(text: str) -> Optional[Tuple[str, Mapping[str, Any]]]:
    """Return ``(topic, record)`` for a JSON line, or ``None`` if unusable."""
    try:
        obj = json.loads(text)
    except ValueError as exc:
        # JSONDecodeError, or an integer literal past the int conversion limit
        logger.warning("Dropping malformed JSON line: %r (%s)", text, exc)
        return None
    if not isinstance(obj, Mapping):
        logger.debug("Skipping non-object JSON payload: %r", obj)
        return None
    topic = obj.get("topic")
    if not isinstance(topic, str) or not topic:
        logger.debug("Record missing topic: %r", obj)
        return None
    return topic, obj


# --------------------------------------------------------------------------- # encoding
def encode_joint_state(topic: str, state: JointState) -> str:
    payload = {
        "topic": topic,
        "stamp": state.stamp,
        "name": list(state.name),
        "position": list(state.position),
        "velocity": list(state.velocity),
        "effort": list(state.effort),
    }
    return json.dumps(payload, separators=(",", ":"))


def encode_command(topic: str, command: JointCommand) -> str:
    value_key = "angles" if command.mode is CommandMode.POSITION else "velocities"
    payload = {"topic": topic, "names": list(command.names), value_key: list(command.values)}
    return json.dumps(payload, separators=(",", ":"))
