"""Business logic services for the EduVerse application."""

from .identity_sync import IdentityReconciler, propagate_profile_change
from .metrics import MetricsSink, get_metrics_sink

__all__ = [
    "IdentityReconciler",
    "propagate_profile_change",
    "MetricsSink",
    "get_metrics_sink",
]
