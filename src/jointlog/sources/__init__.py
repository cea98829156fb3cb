"""Message sources: the live feeds the recorder subscribes to.

- :class:`LineStreamSource` reads JSON lines (stdin, files, remote stdout).
- :class:`~jointlog.sources.ros2.Ros2Source` wraps an ``rclpy`` node; import
  it from its module so ROS 2 is only needed when used.
"""

from .base import MESSAGE_KINDS, MessageSource
from .line_stream import LineStreamSource, file_source, reader_loop, stdin_source

__all__ = [
    "MESSAGE_KINDS",
    "MessageSource",
    "LineStreamSource",
    "file_source",
    "reader_loop",
    "stdin_source",
]
