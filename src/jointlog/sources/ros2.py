"""
ROS 2 adapter for the joint feed.

``rclpy`` and ``sensor_msgs`` come from a sourced ROS 2 installation rather
than PyPI, so they are imported when the source starts, not at module import.
States arrive as ``sensor_msgs/msg/JointState``; commands are read from the
same message type, taking ``position`` for angle commands and ``velocity``
for velocity commands.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Tuple

from ..core.models import CommandMode, JointCommand, JointState
from .base import MessageSource

logger = logging.getLogger(__name__)

QUEUE_DEPTH = 1


def _stamp_seconds(msg: Any) -> float:
    stamp = msg.header.stamp
    return float(stamp.sec) + float(stamp.nanosec) * 1e-9


def joint_state_from_msg(msg: Any) -> JointState:
    return JointState(
        stamp=_stamp_seconds(msg),
        name=list(msg.name),
        position=list(msg.position),
        velocity=list(msg.velocity),
        effort=list(msg.effort),
    )


def joint_command_from_msg(msg: Any, mode: CommandMode) -> JointCommand:
    values = msg.position if mode is CommandMode.POSITION else msg.velocity
    return JointCommand(mode=mode, values=list(values), names=list(msg.name))


class Ros2Source(MessageSource):
    """Subscribe through an ``rclpy`` node spun on a background thread."""

    def __init__(self, node_name: str = "jointlog_recorder", *, args: Optional[List[str]] = None) -> None:
        super().__init__()
        self.node_name = node_name
        self._args = args
        self._rclpy: Any = None
        self._node: Any = None
        self._executor: Any = None
        self._thread: Optional[threading.Thread] = None
        self._pending: List[Tuple[str, str]] = []
        self._created: set[Tuple[str, str]] = set()
        self._owns_context = False

    def _on_subscribe(self, topic: str, kind: str) -> None:
        if self._node is None:
            self._pending.append((topic, kind))
        else:
            self._create_subscription(topic, kind)

    def _create_subscription(self, topic: str, kind: str) -> None:
        if (topic, kind) in self._created:
            return
        from sensor_msgs.msg import JointState as JointStateMsg

        if kind == "joint_state":
            def _callback(msg: Any) -> None:
                self.dispatch(topic, kind, joint_state_from_msg(msg))
        else:
            mode = CommandMode.POSITION if kind == "joint_positions" else CommandMode.VELOCITY

            def _callback(msg: Any) -> None:
                self.dispatch(topic, kind, joint_command_from_msg(msg, mode))

        self._node.create_subscription(JointStateMsg, topic, _callback, QUEUE_DEPTH)
        self._created.add((topic, kind))

    def start(self) -> None:
        if self._node is not None:
            return
        import rclpy
        from rclpy.executors import SingleThreadedExecutor

        self._rclpy = rclpy
        if not rclpy.ok():
            rclpy.init(args=self._args)
            self._owns_context = True
        self._node = rclpy.create_node(self.node_name)
        for topic, kind in self._pending:
            self._create_subscription(topic, kind)
        self._pending.clear()

        self._executor = SingleThreadedExecutor()
        self._executor.add_node(self._node)
        self._thread = threading.Thread(
            target=self._executor.spin,
            name=f"JointlogRos2({self.node_name})",
            daemon=True,
        )
        self._thread.start()
        logger.info("ROS 2 node %s spinning", self.node_name)

    def close(self) -> None:
        if self._node is None:
            return
        try:
            if self._executor is not None:
                self._executor.shutdown()
            self._node.destroy_node()
        finally:
            if self._owns_context and self._rclpy.ok():
                self._rclpy.shutdown()
            if self._thread is not None:
                self._thread.join(timeout=1.0)
            self._node = None
            self._executor = None
            self._created.clear()
