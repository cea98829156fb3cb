"""Common interface for the pub/sub feeds the recorder listens to."""

from __future__ import annotations

import abc
import logging
import threading
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

MESSAGE_KINDS = ("joint_state", "joint_positions", "joint_velocities")

Callback = Callable[[Any], None]


class MessageSource(abc.ABC):
    """
    A live message feed keyed by topic name.

    Subclasses deliver decoded :class:`~jointlog.core.models.JointState` /
    :class:`~jointlog.core.models.JointCommand` objects to the callbacks
    registered with :meth:`subscribe`.
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[Tuple[str, Callback]]] = {}
        self._sub_lock = threading.RLock()

    def subscribe(self, topic: str, kind: str, callback: Callback) -> None:
        if kind not in MESSAGE_KINDS:
            raise ValueError(f"Unknown message kind {kind!r}; expected one of {MESSAGE_KINDS}")
        with self._sub_lock:
            self._subscriptions.setdefault(topic, []).append((kind, callback))
        logger.debug("Subscribed to %s (%s)", topic, kind)
        self._on_subscribe(topic, kind)

    def subscriptions(self, topic: str) -> List[Tuple[str, Callback]]:
        with self._sub_lock:
            return list(self._subscriptions.get(topic, ()))

    def topics(self) -> List[str]:
        with self._sub_lock:
            return list(self._subscriptions)

    def dispatch(self, topic: str, kind: str, message: Any) -> int:
        """
        Hand ``message`` to every subscriber of ``topic`` expecting ``kind``.

        Callback errors are logged and do not stop delivery to the others.
        Returns the number of callbacks invoked.
        """
        delivered = 0
        for sub_kind, callback in self.subscriptions(topic):
            if sub_kind != kind:
                continue
            try:
                callback(message)
            except Exception:
                logger.exception("Subscriber callback failed on %s", topic)
            delivered += 1
        return delivered

    def _on_subscribe(self, topic: str, kind: str) -> None:
        """Hook for sources that must create a middleware subscription."""

    @abc.abstractmethod
    def start(self) -> None:
        """Begin delivering messages."""

    @abc.abstractmethod
    def close(self) -> None:
        """Stop delivering messages and release the transport."""

    def __enter__(self) -> "MessageSource":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
