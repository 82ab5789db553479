"""
Run configuration.

A ``BatchRequest`` is built once by the CLI and never changes while the batch
runs.  A few defaults can be overridden through environment variables:

* ``LOG_LEVEL`` - logging level name (default ``INFO``).
* ``TRANSCRIBE_MAX_WORKERS`` - number of files processed at once (default 8).
* ``SOX_BINARY`` - name or path of the ``sox`` executable (default ``sox``).

Google credentials are taken from Application Default Credentials, usually
``GOOGLE_APPLICATION_CREDENTIALS``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_MAX_WORKERS = 8

# Staged objects live under this prefix in the staging bucket.
OBJECT_PREFIX = "tmp/audio"
BUCKET_PREFIX = "transcribe"


def env_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO")


def env_max_workers() -> str:
    # Left as a string so argparse validates it like a command line value.
    return os.environ.get("TRANSCRIBE_MAX_WORKERS", str(DEFAULT_MAX_WORKERS))


def env_sox_binary() -> str:
    return os.environ.get("SOX_BINARY", "sox")


@dataclass(frozen=True)
class BatchRequest:
    """Everything a batch run needs to know.

    ``bucket`` names a pre-existing staging bucket.  When empty, the run
    creates its own bucket and deletes it when done.
    """

    files: Tuple[str, ...]
    project: str
    output_dir: str = "."
    bucket: str = ""
    mono: bool = False
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout: Optional[float] = None
    sox_binary: str = "sox"

    def __post_init__(self) -> None:
        # Accept any sequence from callers but keep the request immutable.
        object.__setattr__(self, "files", tuple(self.files))
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
