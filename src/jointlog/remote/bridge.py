"""Source that streams the joint feed from a bridge process on the robot host."""

from __future__ import annotations

import logging
from typing import Optional

from ..sources.base import MessageSource
from ..sources.line_stream import LineStreamSource
from .ssh_client import Host, SSHClient

logger = logging.getLogger(__name__)

DEFAULT_BRIDGE_COMMAND = "jointlog-bridge"


class RemoteBridgeSource(MessageSource):
    """
    Run ``command`` on the robot over SSH and read JSON lines from its stdout.

    The bridge is expected to print the same JSONL feed that
    ``jointlog-simulate`` produces. Its stderr is forwarded to the log.
    """

    def __init__(
        self,
        host: Host,
        command: str = DEFAULT_BRIDGE_COMMAND,
        *,
        cwd: Optional[str] = None,
        client: Optional[SSHClient] = None,
    ) -> None:
        super().__init__()
        self.host = host
        self.command = command
        self.cwd = cwd
        self.client = client or SSHClient(host)
        self._reader: Optional[LineStreamSource] = None

    def start(self) -> None:
        if self._reader is not None:
            return
        lines = self.client.exec_stream(
            self.command,
            cwd=self.cwd,
            stderr_callback=self._log_stderr,
        )
        reader = LineStreamSource(
            lines,
            thread_name=f"JointlogBridge({self.host.name})",
            target=self,
        )
        self._reader = reader
        reader.start()
        logger.info("Streaming joint feed from %s: %s", self.host.host, self.command)

    def _log_stderr(self, line: str) -> None:
        logger.warning("[%s] %s", self.host.name, line)

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        self.client.close()
