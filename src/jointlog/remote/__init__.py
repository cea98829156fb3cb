"""Remote helpers for pulling the joint feed off the robot computer.

:class:`SSHClient` opens the SSH connection and streams a command's stdout;
:class:`RemoteBridgeSource` turns that stream into a message source.
"""

from .ssh_client import Host, SSHClient
from .bridge import RemoteBridgeSource

__all__ = ["Host", "SSHClient", "RemoteBridgeSource"]
