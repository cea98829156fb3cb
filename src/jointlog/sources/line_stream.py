from __future__ import annotations

"""
Source that reads the joint feed as JSON lines from any line iterable
(stdin, a replay file, or the stdout of a remote bridge process).
"""

import logging
import threading
from typing import Any, Callable, Iterable, Optional, Tuple

from . import codec
from .base import MessageSource

logger = logging.getLogger(__name__)


def reader_loop(
    stream: Iterable[str],
    source: MessageSource,
    *,
    stop_event: Optional[threading.Event] = None,
) -> int:
    """Read JSONL records from ``stream`` and dispatch them to ``source`` subscribers.

    Stops when the stream is exhausted or ``stop_event`` is set. Returns the
    number of messages delivered to at least one subscriber.
    """
    delivered = 0
    for raw_line in stream:
        if stop_event is not None and stop_event.is_set():
            break

        line = raw_line.strip()
        if not line:
            continue

        try:
            decoded = _decode_line(line, source)
        except Exception:
            logger.exception("Skipping unreadable line: %.200r", line)
            continue
        if decoded is None:
            continue
        topic, kind, message = decoded
        if source.dispatch(topic, kind, message):
            delivered += 1
    return delivered


def _decode_line(line: str, source: MessageSource) -> Optional[Tuple[str, str, Any]]:
    """Return ``(topic, kind, message)`` if some subscriber wants this line."""
    parsed = codec.parse_line(line)
    if parsed is None:
        return None
    topic, record = parsed

    subscribed_kinds = {kind for kind, _ in source.subscriptions(topic)}
    if not subscribed_kinds:
        return None

    kind = codec.infer_kind(record)
    if kind not in subscribed_kinds:
        logger.debug("No subscriber for %s as %r", topic, kind)
        return None

    message = codec.decode_record(record, kind)
    if message is None:
        return None
    return topic, kind, message


class LineStreamSource(MessageSource):
    """Dispatch JSON lines from ``stream`` on a background reader thread.

    Messages go to this source's own subscribers unless ``target`` names
    another source whose subscription table should be used.
    """

    def __init__(
        self,
        stream: Iterable[str],
        *,
        thread_name: str = "JointlogStreamReader",
        on_close: Optional[Callable[[], None]] = None,
        close_stream: bool = True,
        target: Optional[MessageSource] = None,
    ) -> None:
        super().__init__()
        self._stream = stream
        self._thread_name = thread_name
        self._on_close = on_close
        self._close_stream = close_stream
        self._target = target
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.delivered = 0

    def start(self) -> None:
        if self._thread is not None:
            return

        def _run() -> None:
            try:
                self.delivered = reader_loop(
                    self._stream, self._target or self, stop_event=self._stop_event
                )
            except Exception:
                logger.exception("Stream reader %s stopped with an error", self._thread_name)
            else:
                logger.info("Stream reader %s reached end of input", self._thread_name)

        self._thread = threading.Thread(target=_run, name=self._thread_name, daemon=True)
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def close(self) -> None:
        self._stop_event.set()
        if self._on_close is not None:
            try:
                self._on_close()
            except Exception:
                logger.exception("Error closing stream for %s", self._thread_name)
        close = getattr(self._stream, "close", None) if self._close_stream else None
        if callable(close):
            try:
                close()
            except Exception:
                logger.debug("Ignoring error while closing stream", exc_info=True)


def stdin_source() -> LineStreamSource:
    """
    Convenience wrapper that reads the feed from ``sys.stdin``.
    """
    import sys

    return LineStreamSource(
        sys.stdin,
        thread_name="JointlogStreamReader(stdin)",
        close_stream=False,
    )


def file_source(path: str) -> LineStreamSource:
    """Replay a JSONL capture from disk."""
    handle = open(path, "r", encoding="utf-8", errors="replace")
    return LineStreamSource(handle, thread_name=f"JointlogStreamReader({path})")
