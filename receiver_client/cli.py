"""
Command-line client for a running push receiver.

Sends ping and push events (useful to trigger a build by hand) and shows
the receiver's jobs.
"""

import json
import os
import sys

import click

from .client import DEFAULT_SERVER_URL, build_push_payload, get_job, list_jobs, send_event


def get_server_url() -> str:
    """
    Get the receiver URL from environment variable or use default.

    Environment variables:
    - RECEIVER_SERVER_URL: Custom server URL
    """
    return os.environ.get("RECEIVER_SERVER_URL", DEFAULT_SERVER_URL)


@click.group()
@click.option("--server-url", default=None, help="Receiver URL (default: RECEIVER_SERVER_URL env or http://localhost:8000)")
@click.pass_context
def cli(ctx: click.Context, server_url: str | None):
    """Receiver CLI - send events to and inspect a push receiver."""
    ctx.ensure_object(dict)
    ctx.obj["server_url"] = server_url or get_server_url()


@cli.command()
@click.pass_context
def ping(ctx: click.Context):
    """Send a ping event."""
    try:
        status, body = send_event("ping", server_url=ctx.obj["server_url"])
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"{status} {body.get('msg', '')}".rstrip())
    if status != 200:
        sys.exit(1)


@cli.command()
@click.argument("repo")
@click.option("--owner", envvar="RECEIVER_REPO_OWNER", required=True, help="Repository owner (default: RECEIVER_REPO_OWNER env)")
@click.option("--sha", required=True, help="Commit identifier to build")
@click.option("--branch", default="master", show_default=True, help="Default branch of the repository")
@click.option("--ref", default=None, help="Pushed ref (default: refs/heads/<branch>)")
@click.pass_context
def push(ctx: click.Context, repo: str, owner: str, sha: str, branch: str, ref: str | None):
    """Send a push event for REPO."""
    payload = build_push_payload(owner, repo, sha, branch=branch, ref=ref)
    try:
        status, body = send_event("push", payload, server_url=ctx.obj["server_url"])
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if status != 200 or not body.get("ok"):
        click.echo(f"Error: receiver rejected push ({status}): {body.get('msg')}", err=True)
        sys.exit(1)

    if body.get("skipped"):
        click.echo(f"Skipped: {payload['ref']} is not the default branch")
    else:
        click.echo(f"✓ Push accepted, job ID: {body.get('job_id')}")


@cli.command("jobs")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def jobs_command(ctx: click.Context, json_output: bool):
    """List running, pending and recent jobs."""
    try:
        jobs = list_jobs(server_url=ctx.obj["server_url"])
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(jobs, indent=2))
        return

    if not jobs:
        click.echo("No jobs found.")
        return

    click.echo(f"\n{'ID':<38} {'Repository':<24} {'Commit':<12} {'Status':<10}")
    click.echo("-" * 86)
    for job in jobs:
        commit = (job.get("commit") or "")[:10]
        click.echo(f"{job['job_id']:<38} {job['repository']:<24} {commit:<12} {job['status']:<10}")
    click.echo()


@cli.command("job")
@click.argument("job_id")
@click.pass_context
def job_command(ctx: click.Context, job_id: str):
    """Show one job and the tail of its builder output."""
    try:
        job = get_job(job_id, server_url=ctx.obj["server_url"])
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if job is None:
        click.echo(f"Error: Job not found: {job_id}", err=True)
        sys.exit(1)

    click.echo("\nJob Details:")
    click.echo(f"  ID:         {job['job_id']}")
    click.echo(f"  Repository: {job['repository']}")
    click.echo(f"  Commit:     {job['commit']}")
    click.echo(f"  Status:     {job['status']}")
    if job.get("exit_code") is not None:
        click.echo(f"  Exit code:  {job['exit_code']}")
    if job.get("error"):
        click.echo(f"  Error:      {job['error']}")

    events = job.get("events") or []
    if events:
        click.echo("\nOutput:")
        for event in events:
            click.echo(event["data"], nl=False, err=event["type"] == "stderr")
    click.echo()


def main():
    """Main entry point for the receiver CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
