import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from receiver_common.config import Settings
from receiver_common.errors import ValidationError
from receiver_common.models import Outcome, OutcomeKind
from receiver_controller.coordinator import JobCoordinator
from receiver_controller.registry import Registry
from receiver_controller.runner import ProcessRunner

from .validator import validate_push

logger = logging.getLogger(__name__)

# Global instances (initialized at startup)
settings: Settings | None = None
coordinator: JobCoordinator | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI app.

    Handles startup and shutdown events:
    - Startup: Load settings from the environment and create the coordinator
    - Shutdown: Wait for running builds (and promoted pending builds) to finish
    """
    global settings, coordinator

    if settings is None:
        settings = Settings.from_env()
    if coordinator is None:
        coordinator = JobCoordinator(
            registry=Registry(), runner=ProcessRunner(), settings=settings
        )
    logger.info(
        f"Receiving pushes for {settings.repo_owner} "
        f"(transport: {'ssh' if settings.use_ssh else 'https'})"
    )

    yield

    logger.info("Waiting for running builds to finish...")
    await coordinator.shutdown()


app = FastAPI(lifespan=lifespan)


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Raises:
        RuntimeError: If settings are not initialized
    """
    if settings is None:
        raise RuntimeError("Settings not initialized")
    return settings


def get_coordinator() -> JobCoordinator:
    """
    Get the global job coordinator.

    Raises:
        RuntimeError: If the coordinator is not initialized
    """
    if coordinator is None:
        raise RuntimeError("Coordinator not initialized")
    return coordinator


def reply(status_code: int, ok: bool, msg: str | None = None, **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"ok": ok}
    if msg is not None:
        content["msg"] = msg
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def log_failure(outcome: Outcome) -> None:
    # The runner already logged the builder output; nobody else listens here
    logger.debug(f"build outcome: {outcome.to_dict()}")


@app.api_route("/", methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"])
async def receive_event(
    request: Request,
    cfg: Settings = Depends(get_settings),
    coord: JobCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    """
    GitHub webhook endpoint.

    Answers ping events, rejects anything that is not a POSTed push event,
    validates the payload and submits it to the coordinator.
    """
    event = request.headers.get("x-github-event")
    if event == "ping":
        return reply(200, True, "pong")

    if request.method != "POST":
        logger.debug(f"method not allowed: {request.method}")
        return reply(405, False, "method not allowed")

    if event != "push":
        logger.debug(f"bad event type: {event}")
        return reply(403, False, "bad event type")

    body = await request.body()
    try:
        payload = json.loads(body)
        push = validate_push(payload, cfg)
    except ValueError as e:
        logger.error(f"bad payload: {e}")
        return reply(400, False, "bad payload")
    except ValidationError as e:
        logger.error(f"bad payload: {e.reason}")
        return reply(400, False, "bad payload")

    logger.debug(f"handling push event: {push.to_dict()}")
    result = coord.submit(push)
    if isinstance(result, Outcome):
        return reply(200, True, skipped=result.kind is OutcomeKind.SKIPPED)

    result.on("failed", log_failure)
    return reply(200, True, job_id=result.job_id)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Dictionary with status="ok" if server is running
    """
    return {"status": "ok"}


@app.get("/jobs")
async def list_jobs(
    coord: JobCoordinator = Depends(get_coordinator),
) -> list[dict[str, Any]]:
    """
    List running, pending and recently finished jobs.

    Returns:
        List of job summaries, running and pending jobs first
    """
    return [job.to_summary_dict() for job in coord.list_jobs()]


@app.get("/jobs/{job_id}")
async def get_job(
    job_id: str,
    coord: JobCoordinator = Depends(get_coordinator),
) -> dict[str, Any]:
    """
    Get job status and the tail of its builder output.

    Raises:
        HTTPException: 404 if job_id is not known
    """
    job = coord.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.to_dict()
