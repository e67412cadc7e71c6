"""
Per-repository running and pending job slots.
"""

from receiver_common.models import Job


class Registry:
    """
    Running and pending jobs keyed by repository name.

    At most one job per key is running and at most one is pending; a key
    is only ever pending while it is also running. The registry does not
    lock: all mutations happen on the coordinator's event loop.
    """

    def __init__(self) -> None:
        self.running: dict[str, Job] = {}
        self.pending: dict[str, Job] = {}

    def is_busy(self, key: str) -> bool:
        return key in self.running

    def jobs(self) -> list[Job]:
        """All running and pending jobs, running first."""
        return list(self.running.values()) + list(self.pending.values())

    def find(self, job_id: str) -> Job | None:
        for job in self.jobs():
            if job.id == job_id:
                return job
        return None
