"""
One-shot outcome channel between a job and whoever dispatched it.
"""

import asyncio
import logging
from collections.abc import Callable

from .errors import OutcomeAlreadyDelivered
from .models import Outcome, OutcomeKind

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[Outcome], None]

# Kinds a notifier can deliver; skipped pushes never get a notifier
DELIVERABLE_KINDS = (OutcomeKind.COMPLETED, OutcomeKind.FAILED, OutcomeKind.ABORTED)


class Notifier:
    """
    Delivers exactly one Outcome for a job.

    Subscribers register per outcome kind with on(); awaiting wait() returns
    the outcome whatever its kind. Subscribing after delivery invokes the
    callback immediately if the kind matches.
    """

    def __init__(self, job_id: str | None = None) -> None:
        self.job_id = job_id
        self._outcome: Outcome | None = None
        self._callbacks: dict[OutcomeKind, list[OutcomeCallback]] = {
            kind: [] for kind in DELIVERABLE_KINDS
        }
        self._waiters: list[asyncio.Future] = []

    @property
    def done(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    def on(self, kind: OutcomeKind | str, callback: OutcomeCallback) -> "Notifier":
        """
        Subscribe to one outcome kind.

        Args:
            kind: "completed", "failed" or "aborted"
            callback: Called with the Outcome when it is delivered

        Returns:
            The notifier itself, so subscriptions can be chained
        """
        kind = OutcomeKind(kind)
        if kind not in self._callbacks:
            raise ValueError(f"Cannot subscribe to {kind.value} outcomes")

        if self._outcome is not None:
            if self._outcome.kind is kind:
                self._invoke(callback, self._outcome)
        else:
            self._callbacks[kind].append(callback)
        return self

    def deliver(self, outcome: Outcome) -> None:
        """
        Deliver the terminal outcome.

        Raises:
            OutcomeAlreadyDelivered: If an outcome was delivered before
            ValueError: If the outcome kind is not deliverable (skipped)
        """
        if self._outcome is not None:
            raise OutcomeAlreadyDelivered(
                f"Outcome {self._outcome.kind.value} already delivered"
            )
        if outcome.kind not in self._callbacks:
            raise ValueError(f"Cannot deliver {outcome.kind.value} outcome")

        self._outcome = outcome

        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(outcome)
        self._waiters.clear()

        callbacks = self._callbacks[outcome.kind]
        self._callbacks = {kind: [] for kind in DELIVERABLE_KINDS}
        for callback in callbacks:
            self._invoke(callback, outcome)

    async def wait(self) -> Outcome:
        """Wait until the outcome is delivered and return it."""
        if self._outcome is not None:
            return self._outcome
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        return await waiter

    def _invoke(self, callback: OutcomeCallback, outcome: Outcome) -> None:
        # A broken subscriber must not prevent delivery to the others
        try:
            callback(outcome)
        except Exception as e:
            logger.error(
                f"Error in {outcome.kind.value} subscriber: {e}", exc_info=True
            )
