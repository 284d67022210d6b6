"""Byte sources a replay can be read from.

Every read re-opens (or re-reads) the underlying data, so a replay that is still being written by Dolphin can be
polled repeatedly and each pass sees the bytes appended since the last one.
"""

from __future__ import annotations

import io
import mmap
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


class SourceError(IOError):
    def __init__(self, message, filename=None):
        super().__init__(message)
        self.filename = filename

    def __str__(self):
        return f'Source error ({self.filename or "?"}): {super().__str__()}'


class UnsupportedSourceError(TypeError):
    """The object passed as a replay source is neither a path, a buffer, nor a binary stream"""

    pass


class ReplaySource(ABC):
    @abstractmethod
    def read_all(self) -> bytes:
        pass

    @abstractmethod
    def length(self) -> int:
        pass

    def read(self, offset: int, length: int) -> bytes:
        """Returns up to `length` bytes starting at `offset`. Short reads occur at the end of the data."""
        return self.read_all()[offset : offset + length]

    @property
    def path(self) -> Path | None:
        return None


class FileSource(ReplaySource):
    def __init__(self, path: str | os.PathLike):
        self._path = Path(path)
        if not self._path.is_file():
            raise SourceError("replay file does not exist", filename=str(self._path))
        try:
            with open(self._path, "rb"):
                pass
        except OSError as exc:
            raise SourceError(str(exc), filename=str(self._path)) from exc

    @property
    def path(self) -> Path:
        return self._path

    def length(self) -> int:
        return os.path.getsize(self._path)

    def read_all(self) -> bytes:
        with open(self._path, "rb") as f:
            # mmap refuses zero-length files
            if os.fstat(f.fileno()).st_size == 0:
                return b""
            with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as m:
                return m[:]

    def read(self, offset: int, length: int) -> bytes:
        with open(self._path, "rb") as f:
            f.seek(offset)
            return f.read(length)


class BufferSource(ReplaySource):
    def __init__(self, buffer: bytes | bytearray | memoryview):
        self._buffer = bytes(buffer)

    def length(self) -> int:
        return len(self._buffer)

    def read_all(self) -> bytes:
        return self._buffer


class StreamSource(ReplaySource):
    """Seekable binary stream, e.g. an open file object or io.BytesIO"""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    @property
    def path(self) -> Path | None:
        name = getattr(self._stream, "name", None)
        return Path(name) if isinstance(name, str) else None

    def length(self) -> int:
        return self._stream.seek(0, io.SEEK_END)

    def read_all(self) -> bytes:
        self._stream.seek(0)
        return self._stream.read()


def get_source(source) -> ReplaySource:
    """Wraps a path, buffer, or binary stream in the matching ReplaySource.

    Raises SourceError if a path cannot be opened and UnsupportedSourceError for any other kind of object.
    """
    if isinstance(source, ReplaySource):
        return source
    if isinstance(source, (str, os.PathLike)):
        return FileSource(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return BufferSource(source)
    if isinstance(source, io.IOBase) and source.readable() and source.seekable():
        return StreamSource(source)

    raise UnsupportedSourceError(f"cannot read a replay from {type(source).__name__}")
