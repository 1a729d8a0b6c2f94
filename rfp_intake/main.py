"""Main entry point for RFP Intake."""

import argparse
import signal
import sys
import threading
from pathlib import Path

from rfp_intake.errors import RfpIntakeError
from rfp_intake.models.requests import UploadMetadata
from rfp_intake.services.container import ServiceContainer, get_container
from rfp_intake.utils.logging import get_logger, setup_logging_from_settings

logger = get_logger(__name__)


def upload_document(
    container: ServiceContainer,
    file_path: Path,
    client_name: str,
    organization_id: str,
    title: str | None = None,
    due_date: str | None = None,
    description: str | None = None,
    uploaded_by_id: str | None = None,
) -> None:
    """Upload a local document as if it came through the API."""
    metadata = UploadMetadata.model_validate(
        {"clientName": client_name, "title": title, "dueDate": due_date, "description": description}
    )
    uploads = container.uploads
    with open(file_path, "rb") as f:
        staged = uploads.stage(f, file_path.name)
    result = uploads.ingest(
        staged,
        file_path.name,
        metadata,
        organization_id=organization_id,
        uploaded_by_id=uploaded_by_id,
    )
    print(result.model_dump_json(by_alias=True, indent=2))


def show_status(container: ServiceContainer, rfp_id: str, organization_id: str) -> None:
    """Print status and, once analyzed, the analysis result of an RFP."""
    status = container.analysis.get_analysis(rfp_id, organization_id)
    print(status.model_dump_json(by_alias=True, indent=2, exclude_none=True))


def drain_queue(container: ServiceContainer, max_jobs: int | None = None) -> int:
    """Process queued jobs in this process until none is ready.

    Returns:
        Number of jobs handled.
    """
    pool = container.workers
    handled = 0
    while max_jobs is None or handled < max_jobs:
        if not pool.run_once("drain"):
            break
        handled += 1

    logger.info("Queue drained", jobs=handled, **container.queue.stats())
    return handled


def run_worker(container: ServiceContainer) -> None:
    """Run the worker pool until SIGINT or SIGTERM."""
    settings = container.settings
    shutdown_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Received signal, shutting down", signal=signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    pool = container.workers
    pool.start()

    while not shutdown_event.wait(settings.worker_stats_interval_seconds):
        logger.info("Worker statistics", **pool.stats(), **container.queue.stats())

    if not pool.stop(timeout=settings.worker_shutdown_timeout_seconds):
        logger.warning("Workers still busy at shutdown; unfinished jobs will be redelivered")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="RFP Intake - upload, extract and analyze RFPs")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start API server")
    server_parser.add_argument("--host", default="0.0.0.0", help="Host")
    server_parser.add_argument("--port", type=int, default=8000, help="Port")
    server_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Worker command
    subparsers.add_parser("worker", help="Run the analysis worker pool")

    # Upload command
    upload_parser = subparsers.add_parser("upload", help="Upload a local document")
    upload_parser.add_argument("file", type=Path, help="Document to upload")
    upload_parser.add_argument("--client", required=True, help="Client name")
    upload_parser.add_argument("--org", required=True, help="Organization id")
    upload_parser.add_argument("--title", default=None, help="Title (defaults to filename)")
    upload_parser.add_argument("--due-date", default=None, help="Due date (YYYY-MM-DD)")
    upload_parser.add_argument("--description", default=None, help="Description")
    upload_parser.add_argument("--user", default=None, help="Uploading user id")

    # Status command
    status_parser = subparsers.add_parser("status", help="Show RFP status")
    status_parser.add_argument("rfp_id", help="RFP id")
    status_parser.add_argument("--org", required=True, help="Organization id")

    # Drain command
    drain_parser = subparsers.add_parser("drain", help="Process ready jobs in this process")
    drain_parser.add_argument("--max-jobs", type=int, default=None, help="Stop after this many jobs")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    setup_logging_from_settings()

    if args.command == "serve":
        import uvicorn
        uvicorn.run("rfp_intake.api.app:app", host=args.host, port=args.port, reload=args.reload)
        return

    container = get_container()
    try:
        if args.command == "worker":
            run_worker(container)
        elif args.command == "upload":
            upload_document(
                container,
                args.file,
                args.client,
                args.org,
                title=args.title,
                due_date=args.due_date,
                description=args.description,
                uploaded_by_id=args.user,
            )
        elif args.command == "status":
            show_status(container, args.rfp_id, args.org)
        elif args.command == "drain":
            drain_queue(container, args.max_jobs)
    except RfpIntakeError as e:
        logger.error("Command failed", command=args.command, error=e.error_code, message=e.message)
        sys.exit(1)
    finally:
        container.close()


if __name__ == "__main__":
    main()
