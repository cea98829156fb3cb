from __future__ import annotations

from types import SimpleNamespace

from jointlog.core.models import CommandMode
from jointlog.sources.ros2 import joint_command_from_msg, joint_state_from_msg


def _msg():
    return SimpleNamespace(
        header=SimpleNamespace(stamp=SimpleNamespace(sec=12, nanosec=500_000_000)),
        name=["left_s0", "left_s1"],
        position=[0.1, 0.2],
        velocity=[1.0, 2.0],
        effort=[],
    )


def test_joint_state_from_msg() -> None:
    state = joint_state_from_msg(_msg())
    assert state.stamp == 12.5
    assert state.name == ["left_s0", "left_s1"]
    assert state.position == [0.1, 0.2]
    assert state.effort == []


def test_joint_command_from_msg_picks_field_by_mode() -> None:
    pos = joint_command_from_msg(_msg(), CommandMode.POSITION)
    vel = joint_command_from_msg(_msg(), CommandMode.VELOCITY)
    assert pos.values == [0.1, 0.2]
    assert vel.values == [1.0, 2.0]
    assert vel.names == ["left_s0", "left_s1"]
