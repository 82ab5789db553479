"""
Audio file utilities.

Only 44.1 kHz WAV input is supported.  Stereo recordings must be remixed to
mono before the Speech-to-Text API accepts them; that conversion is done by
the external ``sox`` utility, which must be installed separately.
"""

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from .errors import CleanupError, ConversionError

logger = logging.getLogger(__name__)


SUPPORTED_EXTENSIONS = {".wav"}


def is_supported_audio(path: str) -> bool:
    """Check whether the file at ``path`` has a supported audio extension."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def new_temp_path(source_path: str) -> str:
    """Return a fresh temporary ``.wav`` path named after ``source_path``.

    The file is created empty so that concurrent callers never share a path.
    """
    fd, tmp_path = tempfile.mkstemp(prefix=f"{Path(source_path).stem}-", suffix=".wav")
    os.close(fd)
    return tmp_path


def convert_to_mono(input_path: str, output_path: str, *, sox_binary: str = "sox") -> None:
    """Remix a stereo WAV file down to mono with ``sox``.

    Args:
        input_path: Path to the source audio file.
        output_path: Path where the converted file is written.
        sox_binary: Name or path of the ``sox`` executable.

    Raises:
        ConversionError: If ``sox`` is missing or exits with a non-zero
            status.  The combined process output is attached.
    """
    cmd = [sox_binary, input_path, output_path, "remix", "1-2"]
    try:
        result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
    except OSError as exc:
        raise ConversionError(input_path, output=f"Do you have {sox_binary} installed?", cause=exc) from exc
    if result.returncode != 0:
        raise ConversionError(
            input_path,
            output=result.stdout or "",
            cause=subprocess.CalledProcessError(result.returncode, cmd),
        )


def cleanup_temp_file(path: Optional[str]) -> None:
    """Remove a temporary file if it exists.

    Args:
        path: Path to the temporary file.  Nothing happens if ``path`` is
            ``None`` or the file does not exist.
    """
    if path and os.path.exists(path):
        try:
            os.remove(path)
        except OSError as exc:
            logger.warning("%s", CleanupError(path, exc))
