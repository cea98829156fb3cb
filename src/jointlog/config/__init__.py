"""Configuration objects and helpers for jointlog.

This package knows how to load the YAML descriptor for a recording run
(``recorder.yaml``): which arm to listen to, whether commands are position
or velocity targets, the sampling rate and the freshness timeout. The typed
dataclass (see :mod:`runtime`) is imported everywhere else so the recorder,
the CLI and the tests agree on defaults.
"""

from .app_config import AppPaths
from .runtime import RecorderConfig, config_from_mapping, load_config

__all__ = ["AppPaths", "RecorderConfig", "config_from_mapping", "load_config"]
