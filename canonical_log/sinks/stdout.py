"""Write each line to a text stream (stdout by default)."""

import sys
from typing import TextIO


class StdoutSink:
    """Writes one JSON object per line.

    The stream is resolved at write time when not given, so test harnesses
    that swap sys.stdout still capture output.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def write(self, serialized: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(serialized + "\n")
        stream.flush()


__all__ = ["StdoutSink"]
