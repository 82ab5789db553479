"""
Exceptions raised by the transcription pipeline.

Three kinds of failure exist:

* ``PreconditionError`` aborts the whole batch before any item is dispatched.
* ``ItemError`` and its subclasses fail a single item.  The orchestrator logs
  and counts them, sibling items keep running.
* ``CleanupError`` is advisory.  It is only ever logged, never raised.
"""

from __future__ import annotations


class TranscribeError(Exception):
    """Base error for the transcribe package."""


class PreconditionError(TranscribeError):
    """Raised when the batch cannot start (missing project, credentials, bucket)."""


class ItemError(TranscribeError):
    """Raised when one step of a single item's pipeline fails."""

    step = "process"

    def __init__(self, file_name: str, cause: Exception | None = None):
        self.file_name = file_name
        self.cause = cause
        message = f"Failed to {self.step} {file_name}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ConversionError(ItemError):
    """Raised when the mono conversion utility exits with an error."""

    step = "convert"

    def __init__(self, file_name: str, output: str = "", cause: Exception | None = None):
        self.output = output
        super().__init__(file_name, cause)

    def __str__(self) -> str:
        base = super().__str__()
        if self.output:
            return f"{base}\n{self.output.strip()}"
        return base


class StorageError(ItemError):
    """Raised when staging a file in Cloud Storage fails."""

    step = "upload"


class TranscriptionError(ItemError):
    """Raised when the Speech-to-Text request or its wait fails."""

    step = "transcribe"


class OutputWriteError(ItemError):
    """Raised when the transcript cannot be written to the output path."""

    step = "write output for"


class CleanupError(TranscribeError):
    """Advisory error describing a failed release of a temporary resource."""

    def __init__(self, resource: str, cause: Exception | None = None):
        self.resource = resource
        self.cause = cause
        super().__init__(f"Failed to delete {resource}: {cause}")
