"""Core recording pieces: message types, latest-value buffers and the sampler.

The :class:`~jointlog.core.recorder.JointRecorder` that ties them together
lives in :mod:`jointlog.core.recorder`.
"""

from .latest import LatestMessage
from .models import CommandMode, JointCommand, JointState, RecordingInfo
from .sampler import PeriodicSampler, TickEvent

__all__ = [
    "LatestMessage",
    "CommandMode",
    "JointCommand",
    "JointState",
    "RecordingInfo",
    "PeriodicSampler",
    "TickEvent",
]
