"""
Invocation of the external build command.

The runner starts the builder as a separate OS process, forwards its output
to the log as it arrives and turns the exit status into an Outcome. Failures
to start the process are reported the same way and never raised.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from receiver_common.config import Settings
from receiver_common.models import Outcome, PushEvent

logger = logging.getLogger(__name__)

# Called with ("stdout" | "stderr", text) for every chunk of builder output
OutputCallback = Callable[[str, str], None]

READ_CHUNK_SIZE = 4096


def build_args(push: PushEvent, settings: Settings) -> list[str]:
    """
    Build the positional arguments passed to the builder.

    The order is fixed: repository name, clone URL, commit, clone root and
    static output root (both resolved to absolute paths).
    """
    repository = push.repository
    # GitHub push events carry the SSH clone URL separately
    if settings.use_ssh and repository.ssh_url:
        clone_url = repository.ssh_url
    else:
        clone_url = repository.url

    return [
        repository.name,
        clone_url,
        push.after,
        settings.resolved_clone_root,
        settings.resolved_static_root,
    ]


class BuildRunner(ABC):
    """
    Abstract interface for running one build.

    Implementations must always return an Outcome (completed or failed) and
    must not raise for build or spawn failures.
    """

    @abstractmethod
    async def run(
        self,
        command: str,
        args: list[str],
        on_output: OutputCallback | None = None,
    ) -> Outcome:
        """
        Run the build command to completion.

        Args:
            command: Executable to invoke
            args: Positional arguments
            on_output: Optional callback receiving output chunks

        Returns:
            Outcome.completed() for exit code 0, Outcome.failed() otherwise
        """
        pass


class ProcessRunner(BuildRunner):
    """Runs the builder with asyncio subprocesses."""

    async def run(
        self,
        command: str,
        args: list[str],
        on_output: OutputCallback | None = None,
    ) -> Outcome:
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Failed to start builder {command}: {e}")
            return Outcome.failed(error=str(e))

        # Assert pipes are available (we specified PIPE)
        assert process.stdout is not None, "stdout should be available"
        assert process.stderr is not None, "stderr should be available"

        try:
            await asyncio.gather(
                self._forward(process.stdout, "stdout", logging.INFO, on_output),
                self._forward(process.stderr, "stderr", logging.ERROR, on_output),
            )
            exit_code = await process.wait()
        except asyncio.CancelledError:
            # Shutting down; do not leave the builder orphaned
            if process.returncode is None:
                process.terminate()
                await process.wait()
            raise

        if exit_code:
            logger.error(f"build failed: {command} {' '.join(args)}")
            return Outcome.failed(exit_code=exit_code)
        return Outcome.completed()

    async def _forward(
        self,
        stream: asyncio.StreamReader,
        name: str,
        level: int,
        on_output: OutputCallback | None,
    ) -> None:
        """Forward chunks from one pipe until EOF."""
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            text = chunk.decode(errors="replace")
            message = text.strip()
            if message:
                logger.log(level, message)
            if on_output is not None:
                on_output(name, text)
