"""
Transcript post-processing.

The Speech-to-Text API returns one phrase per recognised result.  The
default post-processing is deliberately small: phrases are joined with
spaces and stray whitespace introduced by the join is tidied up.  The
pipeline takes the formatter as a parameter so other policies can be
plugged in.
"""

from typing import Callable, Iterable

PostProcessor = Callable[[Iterable[str]], str]


def post_process(phrases: Iterable[str]) -> str:
    """Concatenate recognised phrases into a single text.

    Args:
        phrases: Transcripts in the order the API returned them.

    Returns:
        The phrases joined by single spaces, with double spaces collapsed and
        spaces at the start of a line removed.
    """
    data = " ".join(phrases)
    data = data.replace("  ", " ")
    data = data.replace("\n ", "\n")
    return data
