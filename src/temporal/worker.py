"""Temporal worker entry point for the IDP0 workflows."""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv
from temporalio.client import Client
from temporalio.worker import Worker

from ..activities import extract_document_activity
from ..config import DEFAULT_TEMPORAL_ADDRESS, DEFAULT_TEMPORAL_NAMESPACE, DEFAULT_TEMPORAL_TASK_QUEUE
from ..workflows import ExtractionWorkflow

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_DOCUMENTS = 4


def create_worker(
    client: Client,
    task_queue: str = DEFAULT_TEMPORAL_TASK_QUEUE,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT_DOCUMENTS,
) -> Worker:
    """Return a worker hosting the extraction workflow and its activity.

    Each activity processes one document, so ``max_concurrent`` bounds how
    many documents this process works on at once.
    """

    return Worker(
        client,
        task_queue=task_queue,
        workflows=[ExtractionWorkflow],
        activities=[extract_document_activity],
        max_concurrent_activities=max_concurrent,
    )


async def run_worker(
    address: str,
    namespace: str,
    task_queue: str,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT_DOCUMENTS,
) -> None:
    client = await Client.connect(address, namespace=namespace)
    worker = create_worker(client, task_queue, max_concurrent)
    logger.info("Worker listening on %s (namespace=%s, queue=%s)", address, namespace, task_queue)
    await worker.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the Temporal worker for the IDP0 workflows",
    )
    parser.add_argument(
        "--address",
        default=DEFAULT_TEMPORAL_ADDRESS,
        help="Temporal server address (host:port)",
    )
    parser.add_argument(
        "--namespace",
        default=DEFAULT_TEMPORAL_NAMESPACE,
        help="Temporal namespace",
    )
    parser.add_argument(
        "--task-queue",
        default=DEFAULT_TEMPORAL_TASK_QUEUE,
        help="Temporal task queue",
    )
    parser.add_argument(
        "--max-concurrent",
        type=int,
        default=DEFAULT_MAX_CONCURRENT_DOCUMENTS,
        help="Maximum number of documents processed at once by this worker",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main() -> None:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    asyncio.run(run_worker(args.address, args.namespace, args.task_queue, args.max_concurrent))


if __name__ == "__main__":  # pragma: no cover
    main()
