"""
Data models for push events, build jobs and their outcomes.

These models represent the domain objects used throughout the receiver,
independent of the HTTP transport and of the external build step.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .notifier import Notifier

# Number of output chunks kept per job for the jobs API
OUTPUT_TAIL_SIZE = 200


@dataclass(frozen=True)
class Repository:
    """The repository section of a GitHub push event."""

    name: str
    url: str
    master_branch: str
    ssh_url: str | None = None
    owner: str | None = None  # Derived from the URL during validation

    def to_dict(self) -> dict[str, Any]:
        """Convert repository to the GitHub payload shape."""
        result: dict[str, Any] = {
            "name": self.name,
            "url": self.url,
            "master_branch": self.master_branch,
        }
        if self.ssh_url is not None:
            result["ssh_url"] = self.ssh_url
        return result


@dataclass(frozen=True)
class PushEvent:
    """
    A push notification for one repository reference.

    Immutable once received. Only the fields the receiver relies on are kept.
    """

    repository: Repository
    ref: str
    after: str  # Commit identifier the ref now points to

    @property
    def default_ref(self) -> str:
        """The full ref name of the repository's default branch."""
        return "refs/heads/" + self.repository.master_branch

    @property
    def is_default_branch(self) -> bool:
        return self.ref == self.default_ref

    @property
    def link(self) -> str:
        """Link to the pushed commit, used in log messages."""
        return f"{self.repository.url}/tree/{self.after}"

    def to_dict(self) -> dict[str, Any]:
        """Convert push to the GitHub payload shape."""
        return {
            "ref": self.ref,
            "after": self.after,
            "repository": self.repository.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], owner: str | None = None) -> "PushEvent":
        """Create a push event from an already validated payload."""
        repository = data["repository"]
        return cls(
            repository=Repository(
                name=repository["name"],
                url=repository.get("url", ""),
                master_branch=repository["master_branch"],
                ssh_url=repository.get("ssh_url"),
                owner=owner,
            ),
            ref=data["ref"],
            after=data["after"],
        )


class OutcomeKind(str, Enum):
    """Terminal results of a submission."""

    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Outcome:
    """
    The terminal result delivered exactly once for every created job.

    exit_code is set for failures of a process that actually ran; error is
    set when the builder could not be started at all.
    """

    kind: OutcomeKind
    exit_code: int | None = None
    error: str | None = None

    @classmethod
    def completed(cls) -> "Outcome":
        return cls(OutcomeKind.COMPLETED, exit_code=0)

    @classmethod
    def failed(cls, exit_code: int | None = None, error: str | None = None) -> "Outcome":
        return cls(OutcomeKind.FAILED, exit_code=exit_code, error=error)

    @classmethod
    def aborted(cls) -> "Outcome":
        return cls(OutcomeKind.ABORTED)

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind.value}
        if self.exit_code is not None:
            result["exit_code"] = self.exit_code
        if self.error is not None:
            result["error"] = self.error
        return result


# Returned by submit() for pushes that are not on the default branch
SKIPPED = Outcome(OutcomeKind.SKIPPED)


@dataclass
class JobEvent:
    """A chunk of builder output captured for a job."""

    type: str  # "stdout" or "stderr"
    data: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Job:
    """
    A build job for one push event.

    Jobs progress through states: queued -> running -> completed | failed,
    or queued -> aborted when superseded by a newer push. A job submitted to
    an idle repository starts directly in the running state.
    """

    id: str
    push: PushEvent
    notifier: "Notifier"
    status: str = "queued"  # "queued", "running", "completed", "failed" or "aborted"
    exit_code: int | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    start_time: datetime | None = None
    end_time: datetime | None = None
    events: deque = field(default_factory=lambda: deque(maxlen=OUTPUT_TAIL_SIZE))

    @property
    def key(self) -> str:
        """Registry key: jobs are serialized per repository name."""
        return self.push.repository.name

    def to_summary_dict(self) -> dict[str, Any]:
        """Convert job to summary format (without output, for listings)."""
        return {
            "job_id": self.id,
            "repository": self.push.repository.name,
            "commit": self.push.after,
            "status": self.status,
            "exit_code": self.exit_code,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert job to dictionary format including the output tail."""
        result = self.to_summary_dict()
        result["events"] = [event.to_dict() for event in self.events]
        return result
