"""
Per-file transcription pipeline.

``process_item`` runs the steps for one input file in order:

1. Optionally remix the audio to mono into a temporary file.
2. Upload the (converted) audio to the staging bucket.
3. Run a long-running Speech-to-Text request on the staged object.
4. Post-process the returned phrases into plain text.
5. Write the text to the output path.

Each acquired resource (temporary file, staged object) is registered on an
``ExitStack`` as soon as it exists, so it is released exactly once whichever
step fails.  A failing step raises an ``ItemError`` for the orchestrator to
count.
"""

from __future__ import annotations

import logging
import os
import posixpath
import time
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Optional

from . import audio_processor, storage, stt_service
from .config import OBJECT_PREFIX
from .errors import OutputWriteError
from .transcript_formatter import PostProcessor, post_process as default_post_process

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """One input file and the names derived from it."""

    source: str
    base_name: str
    output_path: str
    object_name: str

    @classmethod
    def from_path(cls, path: str, output_dir: str) -> "WorkItem":
        base_name = os.path.basename(path)
        return cls(
            source=path,
            base_name=base_name,
            output_path=os.path.join(output_dir, base_name + ".txt"),
            object_name=posixpath.join(OBJECT_PREFIX, base_name.lower()),
        )


def process_item(
    item: WorkItem,
    *,
    bucket_name: str,
    storage_client,
    speech_client,
    mono: bool = False,
    post_process: PostProcessor = default_post_process,
    timeout: Optional[float] = None,
    sox_binary: str = "sox",
) -> str:
    """Transcribe a single file and write the result.

    Args:
        item: The file to process.
        bucket_name: Staging bucket shared by the batch.
        storage_client: Cloud Storage client.
        speech_client: Speech-to-Text client.
        mono: Remix stereo audio to mono before upload.
        post_process: Turns the recognised phrases into the output text.
        timeout: Seconds to wait for the recognition operation.
        sox_binary: ``sox`` executable used for the mono conversion.

    Returns:
        The path of the written transcript.

    Raises:
        ItemError: If any step fails.  Resources acquired so far are
            released before the exception leaves this function.
    """
    logger.info("Transcribing %s ...", item.base_name)

    with ExitStack() as cleanup:
        audio_path = item.source

        if mono:
            tmp_path = audio_processor.new_temp_path(item.source)
            cleanup.callback(audio_processor.cleanup_temp_file, tmp_path)
            audio_processor.convert_to_mono(item.source, tmp_path, sox_binary=sox_binary)
            audio_path = tmp_path

        storage.upload_file(storage_client, bucket_name, item.object_name, audio_path)
        cleanup.callback(storage.try_delete_object, storage_client, bucket_name, item.object_name)

        start = time.monotonic()
        phrases = stt_service.submit(speech_client, bucket_name, item.object_name, timeout=timeout)
        text = post_process(phrases)
        elapsed = time.monotonic() - start

        try:
            with open(item.output_path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            raise OutputWriteError(item.output_path, exc) from exc

    logger.info("Transcribed %s in %.1fs", item.base_name, elapsed)
    return item.output_path
