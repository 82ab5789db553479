"""
Batch orchestration.

``run_batch`` filters the input files, provisions the staging bucket, runs
``tasks.process_item`` for every remaining file on a bounded thread pool and
reports how many items failed.  A failing item never stops its siblings.

Staged objects and a run-owned bucket are deleted on normal completion and
on exceptions, but not if the process is killed mid-batch.  In that case the
``transcribe-<timestamp>`` bucket and its ``tmp/audio/`` objects have to be
removed by hand.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from . import audio_processor, storage, stt_service
from .config import BUCKET_PREFIX, BatchRequest
from .errors import PreconditionError
from .tasks import WorkItem, process_item
from .transcript_formatter import PostProcessor, post_process as default_post_process

logger = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    dispatched: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def succeeded(self) -> int:
        return self.dispatched - self.failed

    @property
    def ok(self) -> bool:
        return self.failed == 0


class FailureCounter:
    """Thread-safe count of failed items."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def filter_files(files: Iterable[str], output_dir: str) -> Tuple[List[WorkItem], int]:
    """Turn input paths into work items, dropping the ones not to process.

    A file is dropped if its extension is not supported, if its transcript
    already exists in ``output_dir`` or if an earlier file in ``files`` maps
    to the same transcript or the same staged object name.  Object names are
    lower-cased, so ``Talk.wav`` and ``talk.wav`` cannot both be staged.
    Only local paths are inspected.

    Returns:
        The work items in input order and the number of dropped files.
    """
    items: List[WorkItem] = []
    claimed = set()
    staged = set()
    skipped = 0
    for name in files:
        if not audio_processor.is_supported_audio(name):
            logger.info("File %s is not a supported format. Ignoring.", name)
            skipped += 1
            continue
        item = WorkItem.from_path(name, output_dir)
        if os.path.lexists(item.output_path):
            logger.info("File %s already transcribed. Ignoring.", name)
            skipped += 1
            continue
        if item.output_path in claimed:
            logger.info("File %s has the same output as an earlier file. Ignoring.", name)
            skipped += 1
            continue
        if item.object_name in staged:
            logger.info("File %s would be staged as %s like an earlier file. Ignoring.", name, item.object_name)
            skipped += 1
            continue
        claimed.add(item.output_path)
        staged.add(item.object_name)
        items.append(item)
    return items, skipped


def new_bucket_name() -> str:
    return f"{BUCKET_PREFIX}-{time.time_ns()}"


@contextmanager
def staging_bucket(client, project: str, bucket_name: str = "") -> Iterator[str]:
    """Yield the name of the bucket to stage audio in.

    If ``bucket_name`` is given, the bucket is assumed to exist and is left
    alone.  Otherwise a new bucket is created and deleted again on exit.
    """
    if bucket_name:
        yield bucket_name
        return

    bucket_name = new_bucket_name()
    storage.create_bucket(client, project, bucket_name)
    logger.info("Using temporary GCS bucket '%s'", bucket_name)
    try:
        yield bucket_name
    finally:
        storage.try_delete_bucket(client, bucket_name)


def run_batch(
    request: BatchRequest,
    *,
    storage_client=None,
    speech_client=None,
    post_process: PostProcessor = default_post_process,
) -> BatchOutcome:
    """Transcribe every eligible file of ``request``.

    Clients are created on demand unless passed in.  No client is created and
    no bucket is touched when no file is left after filtering.

    Raises:
        PreconditionError: If the project is missing, a client cannot be
            created or the staging bucket cannot be created.
    """
    if not request.project:
        raise PreconditionError("no project provided")

    items, skipped = filter_files(request.files, request.output_dir)
    outcome = BatchOutcome(dispatched=len(items), skipped=skipped)
    if not items:
        logger.info("No files to transcribe")
        return outcome

    if storage_client is None:
        storage_client = storage.new_client(request.project)
    if speech_client is None:
        speech_client = stt_service.new_client()

    os.makedirs(request.output_dir, exist_ok=True)
    failures = FailureCounter()

    with staging_bucket(storage_client, request.project, request.bucket) as bucket_name:

        def run(item: WorkItem) -> None:
            try:
                process_item(
                    item,
                    bucket_name=bucket_name,
                    storage_client=storage_client,
                    speech_client=speech_client,
                    mono=request.mono,
                    post_process=post_process,
                    timeout=request.timeout,
                    sox_binary=request.sox_binary,
                )
            except Exception:
                logger.exception("Failed to transcribe %s", item.source)
                failures.increment()

        logger.info(
            "Transcribing %d files with up to %d in parallel", len(items), request.max_workers
        )
        with ThreadPoolExecutor(max_workers=request.max_workers) as executor:
            for future in [executor.submit(run, item) for item in items]:
                future.result()

    outcome.failed = failures.value
    return outcome
