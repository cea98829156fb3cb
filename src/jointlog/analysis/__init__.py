"""Small numeric helpers used while recording and when reviewing recordings."""

from .rate import RateEstimator
from .tracking import TrackingSummary, tracking_error, tracking_summary

__all__ = ["RateEstimator", "TrackingSummary", "tracking_error", "tracking_summary"]
