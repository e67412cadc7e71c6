"""
Receiver Common module.

This module contains shared domain models, errors and configuration used
across the receiver components (server, controller, client).

The common module has no dependencies on other receiver_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .config import Settings
from .errors import ConfigurationError, ReceiverError, ValidationError
from .models import SKIPPED, Job, Outcome, OutcomeKind, PushEvent, Repository
from .notifier import Notifier

__all__ = [
    "SKIPPED",
    "ConfigurationError",
    "Job",
    "Notifier",
    "Outcome",
    "OutcomeKind",
    "PushEvent",
    "ReceiverError",
    "Repository",
    "Settings",
    "ValidationError",
]
