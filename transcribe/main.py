"""
Command line entrypoint.

``transcribe`` transcribes audio files using the Google Speech-to-Text API.
It is intended for bulk processing of large (> 1 min) audio files and
automates the Cloud Storage upload and removal.  Supported format: WAV
44.1 kHz, stereo or mono.

Example::

    transcribe --project my-project --out transcripts --mono a.wav b.wav
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import config
from .batch import run_batch
from .errors import PreconditionError

logger = logging.getLogger(__name__)


def setup_logging(level: Optional[str] = None) -> None:
    log_level = getattr(logging, (level or config.env_log_level()).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transcribe",
        usage="transcribe [options] file [...]",
        description=(
            "Transcribe audio files using Google Speech API. Supported format: "
            "wav 44.1kHz (stereo or mono)."
        ),
    )
    parser.add_argument("files", nargs="*", help="WAV files to transcribe")
    parser.add_argument(
        "--project",
        default="",
        help="GCP project to use. The project must have the Speech API enabled.",
    )
    parser.add_argument("--out", default=".", help="Directory to place output text files.")
    parser.add_argument(
        "--bucket",
        default="",
        help="Temporary GCS bucket to hold the audio files. If not provided, a new transient bucket will be created.",
    )
    parser.add_argument(
        "--mono", action="store_true", help="Convert stereo audio file to mono (required if stereo)."
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=config.env_max_workers(),
        help="Number of files transcribed at the same time.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each transcription. Waits indefinitely by default.",
    )
    parser.add_argument("--sox", default=config.env_sox_binary(), help="sox executable used by --mono.")
    parser.add_argument("--log-level", default=None, help="Logging level (e.g. INFO, DEBUG).")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.files:
        print("transcribe: no files provided.", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1
    if not args.project:
        print("transcribe: no project provided.", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 2
    if args.max_workers < 1:
        print("transcribe: --max-workers must be at least 1.", file=sys.stderr)
        return 2

    setup_logging(args.log_level)

    request = config.BatchRequest(
        files=args.files,
        project=args.project,
        output_dir=args.out,
        bucket=args.bucket,
        mono=args.mono,
        max_workers=args.max_workers,
        timeout=args.timeout,
        sox_binary=args.sox,
    )
    try:
        outcome = run_batch(request)
    except PreconditionError as exc:
        logger.error("%s", exc)
        return 1

    if not outcome.ok:
        logger.error("Failed to transcribe %d of %d files", outcome.failed, outcome.dispatched)
        return 1
    logger.info("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
