"""File sources the preview reads from."""
import io
import os
from pathlib import Path
from typing import BinaryIO, Protocol


class FileSource(Protocol):
    """Read access to a selected file."""

    @property
    def name(self) -> str: ...

    @property
    def size(self) -> int: ...

    def open(self) -> BinaryIO: ...


class LocalFileSource:
    """A file on the local filesystem."""

    def __init__(self, path: str | os.PathLike, name: str | None = None):
        self.path = Path(path)
        self._name = name or self.path.name

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def __repr__(self) -> str:
        return f"LocalFileSource({str(self.path)!r})"


class BytesFileSource:
    """An in-memory file, e.g. an upload that was never written to disk."""

    def __init__(self, name: str, data: bytes):
        self._name = name
        self._data = bytes(data)

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return len(self._data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def __repr__(self) -> str:
        return f"BytesFileSource({self._name!r}, size={len(self._data)})"
