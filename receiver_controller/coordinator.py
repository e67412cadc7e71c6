"""
Job coordination: at most one running build per repository.

The coordinator owns the running/pending registry. A push for an idle
repository starts a build immediately; a push for a busy repository takes the
single pending slot, evicting (aborting) any job already waiting there. When
a build finishes, the pending job for the same repository is promoted.

All registry mutations happen in plain synchronous methods on the event loop,
so each slot decision is atomic with respect to other submissions and
completions.
"""

import asyncio
import logging
import uuid
from collections import deque
from datetime import UTC, datetime

from receiver_common.config import VERBOSE, Settings
from receiver_common.models import SKIPPED, Job, JobEvent, Outcome, PushEvent
from receiver_common.notifier import Notifier

from .registry import Registry
from .runner import BuildRunner, build_args

logger = logging.getLogger(__name__)

# Number of finished jobs kept for the jobs API
HISTORY_SIZE = 100


class JobCoordinator:
    """
    Turns push events into serialized build jobs.

    Each job gets exactly one terminal outcome on its notifier: completed or
    failed once its build ran, or aborted if a newer push replaced it while
    it was still waiting.
    """

    def __init__(
        self,
        registry: Registry,
        runner: BuildRunner,
        settings: Settings,
        history_size: int = HISTORY_SIZE,
    ):
        """
        Initialize the coordinator.

        Args:
            registry: Running/pending slots, owned by this coordinator
            runner: Runner used to invoke the builder
            settings: Receiver settings (builder command, roots, transport)
            history_size: Number of finished jobs remembered for lookups
        """
        self.registry = registry
        self.runner = runner
        self.settings = settings
        self.history: deque[Job] = deque(maxlen=history_size)
        self._tasks: set[asyncio.Task] = set()
        # Promoted jobs whose build starts on the next loop iteration
        self._deferred: dict[str, asyncio.Handle] = {}

    def submit(self, push: PushEvent) -> Notifier | Outcome:
        """
        Submit a validated push event.

        Must be called from the event loop the coordinator runs on.

        Returns:
            The job's Notifier, or SKIPPED if the push is not for the
            repository's default branch (no job is created in that case)
        """
        if not push.is_default_branch:
            logger.debug(
                f"skipping push for {push.ref} of {push.repository.url} "
                f"(default branch is {push.repository.master_branch})"
            )
            return SKIPPED

        job_id = str(uuid.uuid4())
        job = Job(id=job_id, push=push, notifier=Notifier(job_id))
        key = job.key

        if not self.registry.is_busy(key):
            self.registry.running[key] = job
            self._start(job)
            return job.notifier

        evicted = self.registry.pending.get(key)
        self.registry.pending[key] = job
        logger.log(VERBOSE, f"queued job {push.link}")

        if evicted is not None:
            logger.log(VERBOSE, f"removing job {evicted.push.link} from queue")
            self._settle(evicted, Outcome.aborted())

        return job.notifier

    def get_job(self, job_id: str) -> Job | None:
        """Look up a running, pending or recently finished job."""
        job = self.registry.find(job_id)
        if job is not None:
            return job
        for finished in self.history:
            if finished.id == job_id:
                return finished
        return None

    def list_jobs(self) -> list[Job]:
        """Running and pending jobs, then finished jobs newest first."""
        return self.registry.jobs() + list(reversed(self.history))

    async def shutdown(self, timeout: float | None = None) -> None:
        """
        Wait for running builds and their promoted successors to finish.

        When the timeout expires, pending and not yet started jobs are
        aborted and running builds are cancelled; every job still receives
        its outcome.

        Args:
            timeout: Seconds to wait before cancelling remaining builds
                (None waits indefinitely)
        """
        try:
            await asyncio.wait_for(self._drain(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Builds still running after {timeout}s, cancelling")

            for key in list(self.registry.pending):
                self._settle(self.registry.pending.pop(key), Outcome.aborted())

            for key, handle in list(self._deferred.items()):
                handle.cancel()
                del self._deferred[key]
                self._settle(self.registry.running.pop(key), Outcome.aborted())

            tasks = list(self._tasks)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _drain(self) -> None:
        while self._tasks or self._deferred:
            if self._tasks:
                # asyncio.wait leaves the builds alone if the drain is cancelled
                await asyncio.wait(list(self._tasks))
            else:
                # A promoted job is waiting for its deferred start
                await asyncio.sleep(0)

    def _start(self, job: Job) -> None:
        """Start the build for a job that already holds the running slot."""
        self._deferred.pop(job.key, None)
        job.status = "running"
        job.start_time = datetime.now(UTC)
        task = asyncio.get_running_loop().create_task(self._run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, job: Job) -> None:
        args = build_args(job.push, self.settings)
        logger.info(f"building: {job.push.link}")

        def capture(stream: str, text: str) -> None:
            job.events.append(JobEvent(type=stream, data=text))

        try:
            outcome = await self.runner.run(self.settings.builder, args, on_output=capture)
        except asyncio.CancelledError:
            logger.error(f"Build for job {job.id} cancelled")
            if self.registry.running.get(job.key) is job:
                del self.registry.running[job.key]
            self._settle(job, Outcome.failed(error="cancelled"))
            raise
        except Exception as e:
            logger.error(f"Error running build for job {job.id}: {e}", exc_info=True)
            outcome = Outcome.failed(error=str(e))

        self._finish(job, outcome)

    def _finish(self, job: Job, outcome: Outcome) -> None:
        """
        Release the running slot of a finished job and promote its successor.

        The successor takes the running slot before the outcome is delivered,
        so subscribers that submit again observe a busy repository. Its
        process is started on the next loop iteration.
        """
        key = job.key
        if self.registry.running.get(key) is job:
            del self.registry.running[key]

        if outcome.success:
            logger.info(f"build completed: {job.push.link}")

        pending = self.registry.pending.pop(key, None)
        if pending is not None:
            self.registry.running[key] = pending
            logger.log(VERBOSE, f"starting queued job {pending.push.link}")
            self._deferred[key] = asyncio.get_running_loop().call_soon(self._start, pending)

        self._settle(job, outcome)

    def _settle(self, job: Job, outcome: Outcome) -> None:
        """Record a job's terminal state and deliver its outcome."""
        job.status = outcome.kind.value
        job.exit_code = outcome.exit_code
        job.error = outcome.error
        job.end_time = datetime.now(UTC)
        self.history.append(job)
        job.notifier.deliver(outcome)
