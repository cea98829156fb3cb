from __future__ import annotations

"""Recording session: latest-message buffers, fixed-rate snapshots, CSV on stop."""

import logging
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..analysis.rate import RateEstimator
from ..config.runtime import RecorderConfig
from ..dataio import csv_writer
from ..sources.base import MessageSource
from ..tools.debug import time_block
from ..tools.throttle import LogThrottle
from .latest import LatestMessage
from .models import CommandMode, JointCommand, JointState, RecordingInfo
from .sampler import PeriodicSampler, TickEvent

logger = logging.getLogger(__name__)

Sample = Tuple[JointState, Optional[JointCommand]]
SamplerFactory = Callable[..., PeriodicSampler]


class RecorderError(RuntimeError):
    """Raised when the recorder lifecycle is used out of order."""


class JointRecorder:
    """
    Sample one arm's joint state and joint command feed at a fixed rate.

    Subscriptions only refresh the latest state/command. Each sampler tick
    appends a ``(state, command)`` snapshot; when the state feed has gone
    quiet for longer than ``state_expired_timeout_s`` the recording is
    stopped early and whatever was collected is written out.
    """

    def __init__(
        self,
        source: MessageSource,
        config: Optional[RecorderConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sampler_factory: SamplerFactory = PeriodicSampler,
    ) -> None:
        self.config = (config or RecorderConfig()).sanitized()
        self.mode: CommandMode = self.config.mode
        self.arm_name = self.config.arm_name
        self._clock = clock
        self._sampler_factory = sampler_factory

        self._state: LatestMessage[JointState] = LatestMessage(clock)
        self._command: LatestMessage[JointCommand] = LatestMessage(clock)

        self._samples: List[Sample] = []
        self._samples_lock = threading.Lock()
        self._lock = threading.RLock()
        self._sampler: Optional[PeriodicSampler] = None
        self._recording = False
        self._aborted = False
        self._written: Optional[bool] = None
        self._stopped = threading.Event()
        self._output_path: Optional[Path] = None
        self._started_at: Optional[datetime] = None
        self._first_update = True

        self._rate = RateEstimator(window_size=max(2, int(self.config.record_rate_hz * 2)))
        self._rate_log = LogThrottle(self.config.rate_log_period_s, clock)
        self._expired_log = LogThrottle(self.config.expired_warn_period_s, clock)

        self.state_topic = self.config.resolved_state_topic()
        self.command_topic = self.config.resolved_command_topic()
        source.subscribe(self.state_topic, "joint_state", self.state_callback)
        source.subscribe(self.command_topic, self.mode.message_kind, self.command_callback)
        self.source = source

    # ------------------------------------------------------------------ callbacks
    def state_callback(self, msg: JointState) -> None:
        self._state.update(msg)

    def command_callback(self, msg: JointCommand) -> None:
        if msg.mode is not self.mode:
            logger.debug("Ignoring %s command while recording %s commands", msg.mode.value, self.mode.value)
            return
        self._command.update(msg)

    # ------------------------------------------------------------------ properties
    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def output_path(self) -> Optional[Path]:
        return self._output_path

    @property
    def samples(self) -> List[Sample]:
        """Copy of the collected ``(state, command)`` pairs."""
        with self._samples_lock:
            return list(self._samples)

    @property
    def latest_state(self) -> Optional[JointState]:
        return self._state.get()

    @property
    def latest_command(self) -> Optional[JointCommand]:
        return self._command.get()

    # ------------------------------------------------------------------ lifecycle
    def wait_for_first_state(
        self,
        timeout: Optional[float] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> bool:
        """
        Block until the first state message arrives.

        Returns ``False`` when ``timeout`` elapses or ``stop_event`` is set.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        poll = self.config.wait_poll_s
        while not self._state.has_message():
            if stop_event is not None and stop_event.is_set():
                return False
            if deadline is not None and time.monotonic() >= deadline:
                logger.error("No state message on %s after %.1f s", self.state_topic, timeout)
                return False
            logger.info("Waiting for first state message on %s", self.state_topic)
            if stop_event is not None:
                stop_event.wait(poll)
            else:
                time.sleep(poll)
        return True

    def start_recording(self, file_name: Path | str) -> None:
        """Clear previous samples and start sampling at ``record_rate_hz``."""
        with self._lock:
            if self._recording:
                raise RecorderError(f"already recording to {self._output_path}")
            self._output_path = Path(file_name)
            with self._samples_lock:
                self._samples.clear()
            self._aborted = False
            self._written = None
            self._first_update = True
            self._stopped.clear()
            self._rate.reset()
            self._rate_log.reset()
            self._expired_log.reset()
            self._started_at = datetime.now()
            self._recording = True
            self._sampler = self._sampler_factory(
                self.config.record_period_s,
                self.update,
                name=f"JointlogSampler({self.arm_name})",
            )
            self._sampler.start()
        logger.info(
            "Recording %s arm at %.1f Hz (%s commands) to %s",
            self.arm_name,
            self.config.record_rate_hz,
            self.mode.value,
            self._output_path,
        )

    def stop_recording(self) -> bool:
        """
        Stop sampling and write the collected samples.

        Safe to call more than once and from the sampler thread; the file is
        written exactly once. Returns whether a file was written.
        """
        with self._lock:
            if self._output_path is None:
                raise RecorderError("stop_recording() called before start_recording()")
            sampler, self._sampler = self._sampler, None
            self._recording = False
        if sampler is not None:
            sampler.stop()
        with self._lock:
            if self._written is None:
                self._written = csv_writer.write_recording(
                    self._output_path, self.samples, self.mode
                )
                self._stopped.set()
            return self._written

    def wait_until_stopped(self, timeout: Optional[float] = None) -> bool:
        """Wait for the recording to end (stop or abort); True if it did."""
        return self._stopped.wait(timeout)

    # ------------------------------------------------------------------ sampling
    def update(self, tick: Optional[TickEvent] = None) -> None:
        """Sampler callback: check freshness and append one snapshot."""
        with time_block("JointRecorder.update", log=logger):
            now = tick.current_real if tick is not None else self._clock()
            self._rate.add_sample_time(now)
            if self._first_update:
                self._first_update = False
            else:
                self._rate_log.log(
                    logger,
                    logging.INFO,
                    "Updating at %.1f Hz (jitter %.2f ms)",
                    self._rate.estimated_hz,
                    self._rate.jitter_s * 1000.0,
                )

            if not self._recording:
                return

            if self.state_expired():
                logger.error("State feed on %s went stale, aborting early", self.state_topic)
                self._aborted = True
                self.stop_recording()
                return

            state = self._state.get()
            command = self._command.get()
            with self._samples_lock:
                if self._recording:
                    self._samples.append((state, command))

    def state_expired(self) -> bool:
        """True if no state was received within ``state_expired_timeout_s``."""
        age = self._state.age(self._clock())
        if age is None:
            self._expired_log.log(
                logger, logging.WARNING, "No state received yet on %s", self.state_topic
            )
            return True
        if age > self.config.state_expired_timeout_s:
            self._expired_log.log(
                logger,
                logging.WARNING,
                "State expired. Last received state %.3f seconds ago.",
                age,
            )
            return True
        return False

    def recording_info(self) -> RecordingInfo:
        samples = self.samples
        joints = list(samples[0][0].name) if samples else []
        return RecordingInfo(
            arm_name=self.arm_name,
            command_mode=self.mode,
            record_rate_hz=self.config.record_rate_hz,
            started_at=self._started_at or datetime.now(),
            output_path=self._output_path,
            sample_count=len(samples),
            aborted=self._aborted,
            joint_names=joints,
        )
