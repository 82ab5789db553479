"""
Google Speech-to-Text service wrapper.

``submit`` sends a long-running recognition request for an audio file that
has already been staged in Cloud Storage and blocks until the operation
finishes.  The recognition settings are fixed: 44.1 kHz LINEAR16 WAV in
US English with a single alternative per result.

Usage::

    from transcribe import stt_service

    client = stt_service.new_client()
    phrases = stt_service.submit(client, "my-bucket", "tmp/audio/example.wav")
"""

from __future__ import annotations

import logging
from concurrent import futures
from typing import List, Optional

from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exceptions
from google.cloud import speech

from .errors import PreconditionError, TranscriptionError
from .storage import gcs_uri

logger = logging.getLogger(__name__)

SAMPLE_RATE_HERTZ = 44_100
LANGUAGE_CODE = "en-US"


def new_client() -> speech.SpeechClient:
    """Return a Speech-to-Text client using Application Default Credentials."""
    try:
        return speech.SpeechClient()
    except auth_exceptions.GoogleAuthError as exc:
        raise PreconditionError(f"Failed to create speech client: {exc}") from exc


def recognition_config() -> speech.RecognitionConfig:
    return speech.RecognitionConfig(
        encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
        sample_rate_hertz=SAMPLE_RATE_HERTZ,
        language_code=LANGUAGE_CODE,
        max_alternatives=1,
    )


def submit(
    client: speech.SpeechClient,
    bucket_name: str,
    object_name: str,
    *,
    timeout: Optional[float] = None,
) -> List[str]:
    """Transcribe a staged audio file and return its phrases.

    Args:
        client: Speech-to-Text client.
        bucket_name: Bucket holding the staged audio.
        object_name: Name of the staged object.
        timeout: Seconds to wait for the operation.  ``None`` waits
            indefinitely.

    Returns:
        The transcript of every alternative of every result, in order.

    Raises:
        TranscriptionError: If the request or the wait fails.
    """
    uri = gcs_uri(bucket_name, object_name)
    audio = speech.RecognitionAudio(uri=uri)
    logger.info("Starting STT job for %s", uri)
    try:
        operation = client.long_running_recognize(config=recognition_config(), audio=audio)
        response = operation.result(timeout=timeout)
    except (gexc.GoogleAPIError, futures.TimeoutError) as exc:
        raise TranscriptionError(uri, exc) from exc
    logger.info("STT job complete for %s", uri)

    phrases: List[str] = []
    for result in response.results:
        # Requests ask for a single alternative, so there is at most one here.
        for alt in result.alternatives:
            phrases.append(alt.transcript)
    return phrases
