"""Lightweight SSH client wrapper for running a feed bridge on the robot host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import logging
import paramiko
import shlex
import threading


logger = logging.getLogger(__name__)


@dataclass
class Host:
    """Connection details for the robot computer."""

    name: str
    host: str
    user: str
    password: Optional[str] = None
    port: int = 22
    key_filename: Optional[str] = None


class LineStream(Iterator[str]):
    """stdout lines of a remote command; ``close()`` tears down the channel."""

    def __init__(
        self,
        stdin,
        stdout,
        stderr,
        *,
        encoding: str = "utf-8",
        errors: str = "ignore",
        stderr_callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr
        self._encoding = encoding
        self._errors = errors
        self._stderr_callback = stderr_callback
        self._closed = False
        self._stderr_thread: threading.Thread | None = None
        if self._stderr_callback is not None:
            self._stderr_thread = threading.Thread(
                target=self._watch_stderr,
                name="ssh-stderr",
                daemon=True,
            )
            self._stderr_thread.start()

    def __iter__(self) -> "LineStream":
        return self

    def __next__(self) -> str:
        while True:
            if self._closed:
                raise StopIteration
            try:
                raw = self._stdout.readline()
            except Exception:
                logger.debug("Remote stdout read failed", exc_info=True)
                self.close()
                raise StopIteration
            if raw == "" or raw == b"":
                self.close()
                raise StopIteration
            text = self._decode(raw).rstrip("\r\n")
            if text:
                return text

    def _decode(self, raw) -> str:
        if isinstance(raw, bytes):
            return raw.decode(self._encoding, errors=self._errors)
        return raw

    def _watch_stderr(self) -> None:
        assert self._stderr_callback is not None
        try:
            for raw_err in iter(self._stderr.readline, ""):
                if not raw_err:
                    break
                text_err = self._decode(raw_err).rstrip("\r\n")
                if text_err:
                    try:
                        self._stderr_callback(text_err)
                    except Exception:
                        logger.exception("Error handling stderr callback")
        except Exception:
            logger.exception("Error reading remote stderr")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        for stream in (self._stdout, self._stdin, self._stderr):
            try:
                stream.close()
            except Exception:
                pass

        channel = getattr(self._stdout, "channel", None)
        if channel is not None:
            try:
                channel.close()
            except Exception:
                pass


class SSHClient:
    """Simple wrapper around ``paramiko`` for running remote commands."""

    def __init__(self, host: Host) -> None:
        self.host = host
        self._client: paramiko.SSHClient = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    def _ensure_client(self) -> paramiko.SSHClient:
        transport = self._client.get_transport()
        if not (transport and transport.is_active()):
            self.connect()
        return self._client

    def connect(self) -> None:
        transport = self._client.get_transport()
        if transport and transport.is_active():
            return

        logger.info(
            "Connecting to %s@%s:%s", self.host.user, self.host.host, self.host.port
        )

        use_keys = self.host.password is None
        self._client.connect(
            hostname=self.host.host,
            username=self.host.user,
            port=self.host.port,
            password=self.host.password,
            key_filename=self.host.key_filename,
            look_for_keys=use_keys,
            allow_agent=use_keys,
            timeout=10.0,
        )

    def close(self) -> None:
        try:
            self._client.close()
        except Exception:
            pass

    def exec_stream(
        self,
        command: str,
        cwd: Optional[str] = None,
        stderr_callback: Optional[Callable[[str], None]] = None,
    ) -> LineStream:
        """
        Run a long-lived command and return its stdout as a line iterator.

        If stderr_callback is provided, stderr lines are forwarded to it.
        """
        client = self._ensure_client()

        full_cmd = command
        if cwd:
            full_cmd = f"cd {shlex.quote(cwd)} && {command}"

        logger.debug("Remote exec: %s", full_cmd)
        stdin, stdout, stderr = client.exec_command(full_cmd)
        return LineStream(stdin, stdout, stderr, stderr_callback=stderr_callback)
