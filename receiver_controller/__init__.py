"""
Receiver Controller module.

This module coordinates build jobs: the per-repository running/pending
registry, the job coordinator and the runner that invokes the builder.
"""

from .coordinator import JobCoordinator
from .registry import Registry
from .runner import BuildRunner, ProcessRunner, build_args

__all__ = ["BuildRunner", "JobCoordinator", "ProcessRunner", "Registry", "build_args"]
