"""Signal-aware output writing for the treegen CLI."""

import errno
import os
import types
from pathlib import Path
from typing import Iterable, Optional, Type, Union

from treegen.cli.signal_handler import signal_handler
from treegen.types import PathType


class SafeWriter:
    """Writes text to a file path or an already open file descriptor.

    Writing stops with BrokenPipeError as soon as SIGPIPE or SIGINT has been
    received, or when the descriptor reports EPIPE, so callers can end output
    cleanly at a line boundary.

    Attributes:
        file: The path or file descriptor given at construction.
        fd: The file descriptor actually written to.
        encoding: Encoding used to turn text into bytes.
    """

    def __init__(self, file: Union[int, PathType], encoding: str = "utf-8"):
        """Initialize the writer.

        Args:
            file: A file descriptor, or a path that is opened (and truncated) for writing.
            encoding: Text encoding of the output.

        Raises:
            TypeError: If ``file`` is neither a descriptor nor a path.
            OSError: If the path cannot be opened.
        """
        self.file = file
        self.encoding = encoding
        self._closed = False

        if isinstance(file, int):
            self.fd = file
            self._file_obj = None
        elif isinstance(file, (str, os.PathLike)):
            self._file_obj = Path(file).open("wb")
            self.fd = self._file_obj.fileno()
        else:
            raise TypeError(f"Expected int, str, or PathLike, got {type(file).__name__}")

    def write(self, data: str) -> None:
        """Write a piece of text.

        Raises:
            BrokenPipeError: If a signal was received or the pipe is closed.
            OSError: If another I/O error occurs.
            ValueError: If the writer is closed.
        """
        if self._closed:
            raise ValueError("Cannot write to closed SafeWriter")

        if signal_handler.interrupted:
            raise BrokenPipeError()

        payload = data.encode(self.encoding)
        try:
            while payload:
                written = os.write(self.fd, payload)
                payload = payload[written:]
        except OSError as e:
            if e.errno == errno.EPIPE:
                raise BrokenPipeError()
            raise

    def write_lines(self, lines: Iterable[str]) -> None:
        """Write each item of ``lines`` in turn; the items carry their own newlines."""
        for line in lines:
            self.write(line)

    def close(self) -> None:
        """Close the file if this writer opened it; descriptors passed in stay open."""
        if self._closed:
            return

        if self._file_obj is not None:
            try:
                self._file_obj.close()
            except OSError as e:
                if e.errno != errno.EPIPE:
                    raise

        self._closed = True

    def __enter__(self) -> "SafeWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[types.TracebackType],
    ) -> None:
        """Close the writer, letting an exception from the block take priority over one from closing."""
        try:
            self.close()
        except OSError:
            if exc_type is None:
                raise
