"""Host file access with transparent handling of gzip-compressed files.

A compressed file is unpacked into a temporary file next to it when it is
opened. If anything was written, it is packed again when it is closed.
"""

from __future__ import annotations

import enum
import gzip
import os

_COMPRESSED_SUFFIXES = (".gz", "-gz", ".z", "-z", "_z", ".Z")
_TMP_SUFFIX = ".tmp"
_CHUNK_SIZE = 16 * 1024 * 1024
_PROGRESS_STEP = 128 * 1024 * 1024
_MEGABYTE = 1024 * 1024

_open_files: list[X16File] = []


class SeekOrigin(enum.IntEnum):
    """Reference point for :meth:`X16File.seek`."""

    SET = 0
    END = 1
    CUR = 2


def is_compressed_type(path: str | os.PathLike) -> bool:
    """Return True if the path names a gzip-compressed file."""
    return os.fspath(path).endswith(_COMPRESSED_SUFFIXES)


def find_extension(path: str | None, end: int | None = None) -> str | None:
    """Return the text from the last '.' at or before ``end`` to the end of ``path``.

    Without ``end`` the search starts at the end of the path, or three
    characters before it for a compressed file. A dot at the very start of
    the path is not an extension. Returns None if there is no extension.
    """
    if path is None:
        return None
    if end is None:
        end = len(path)
        if is_compressed_type(path):
            end -= 3
    index = path.rfind(".", 1, end + 1)
    return path[index:] if index > 0 else None


def _file_mode(mode: str) -> str:
    base = next((c for c in mode if c in "rwax"), None)
    if base is None:
        raise ValueError(f"invalid file mode: {mode!r}")
    return base + "b" + ("+" if "+" in mode else "")


class X16File:
    """An open host file that tracks its own position and size."""

    def __init__(self, path: str | os.PathLike, mode: str = "rb") -> None:
        self.path = os.fspath(path)
        self.compressed = is_compressed_type(self.path)
        self.modified = False
        self._pos = 0
        file_mode = _file_mode(mode)
        if self.compressed:
            self._size = self._decompress()
            try:
                self._file = open(self._tmp_path, file_mode)
            except OSError:
                os.unlink(self._tmp_path)
                raise
        else:
            self._file = open(self.path, file_mode)
            self._size = os.fstat(self._file.fileno()).st_size
        _open_files.insert(0, self)

    @property
    def _tmp_path(self) -> str:
        return self.path + _TMP_SUFFIX

    def _decompress(self) -> int:
        with gzip.open(self.path, "rb") as source, open(self._tmp_path, "wb") as target:
            print(f"Decompressing {self.path}")
            total = 0
            threshold = _PROGRESS_STEP
            while chunk := source.read(_CHUNK_SIZE):
                total += len(chunk)
                if total > threshold:
                    print(f"{total // _MEGABYTE} MB")
                    threshold += _PROGRESS_STEP
                target.write(chunk)
            print(f"{total // _MEGABYTE} MB")
        return total

    def _recompress(self) -> None:
        with open(self._tmp_path, "rb") as source, gzip.open(
            self.path, "wb", compresslevel=6
        ) as target:
            print(f"Recompressing {self.path}")
            total = 0
            threshold = _PROGRESS_STEP
            while chunk := source.read(_CHUNK_SIZE):
                total += len(chunk)
                if total > threshold and self._size:
                    print(f"{total * 100 // self._size}%")
                    threshold += _PROGRESS_STEP
                target.write(chunk)

    def close(self) -> None:
        """Close the file, packing a modified compressed file again."""
        if self._file is None:
            return
        self._file.close()
        self._file = None
        try:
            if self.compressed:
                try:
                    if self.modified:
                        self._recompress()
                finally:
                    if os.path.exists(self._tmp_path):
                        os.unlink(self._tmp_path)
        finally:
            if self in _open_files:
                _open_files.remove(self)

    def size(self) -> int:
        """Size of the file, as found when it was opened."""
        return self._size

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int, origin: SeekOrigin = SeekOrigin.SET) -> int:
        """Move to a new position, clamped to the file size; return it."""
        origin = SeekOrigin(origin)
        if origin is SeekOrigin.SET:
            self._pos = min(pos, self._size)
        elif origin is SeekOrigin.CUR:
            self._pos += pos
            if self._pos > self._size or self._pos < 0:
                self._pos = self._size
        else:
            self._pos = self._size - pos
            if self._pos < 0:
                self._pos = self._size
        return self._file.seek(self._pos)

    def read(self, size: int, count: int = 1) -> bytes:
        """Read up to ``count`` items of ``size`` bytes each."""
        data = self._file.read(size * count)
        self._pos += len(data)
        return data

    def write(self, data: bytes) -> int:
        """Write the bytes and return how many were written."""
        written = self._file.write(bytes(data))
        if written:
            self.modified = True
        self._pos += written
        return written

    def read8(self) -> int:
        """Read one byte; raise EOFError at the end of the file."""
        data = self.read(1)
        if not data:
            raise EOFError(f"end of file: {self.path}")
        return data[0]

    def write8(self, value: int) -> int:
        return self.write(bytes([value & 0xFF]))

    def __enter__(self) -> X16File:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def open_file(path: str | os.PathLike, mode: str = "rb") -> X16File:
    """Open a host file; raises OSError if it cannot be opened."""
    return X16File(path, mode)


def close_all() -> None:
    """Close every file that is still open."""
    for handle in list(_open_files):
        handle.close()