# ABOUTME: In-memory EPUB archive builder and atomic file output.
# ABOUTME: Entries accumulate by path; a single finalize step serializes them to a zip blob.

import io
import logging
import os
import stat
import tempfile
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)

MIMETYPE = "application/epub+zip"


class ArchiveError(Exception):
    """Raised when the archive cannot be assembled or written."""


class ArchiveWriter:
    """Mapping of archive-relative path to bytes, finalized exactly once.

    The `mimetype` entry is added by `finalize` as the first, uncompressed
    member, as EPUB readers expect.
    """

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}
        self._finalized = False

    def add(self, path: str, content: str | bytes) -> None:
        """Add an entry. Text is encoded as UTF-8.

        Raises:
            ArchiveError: If the path was already added or the archive is finalized.
        """
        if self._finalized:
            raise ArchiveError(f"Archive already finalized, cannot add {path}")
        if path in self._entries or path == "mimetype":
            raise ArchiveError(f"Duplicate archive entry: {path}")
        data = content.encode("utf-8") if isinstance(content, str) else content
        self._entries[path] = data

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def paths(self) -> list[str]:
        """Entry paths in insertion order."""
        return list(self._entries)

    def read(self, path: str) -> bytes:
        return self._entries[path]

    def finalize(self) -> bytes:
        """Serialize every entry into a zip blob.

        Raises:
            ArchiveError: If called twice or if serialization fails.
        """
        if self._finalized:
            raise ArchiveError("Archive already finalized")
        self._finalized = True

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w") as zf:
                zf.writestr("mimetype", MIMETYPE, compress_type=zipfile.ZIP_STORED)
                for path, data in self._entries.items():
                    zf.writestr(path, data, compress_type=zipfile.ZIP_DEFLATED)
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            raise ArchiveError(f"Failed to serialize archive: {exc}") from exc
        return buffer.getvalue()


def _output_mode(path: Path) -> int:
    """Mode for the written file: the existing file's, else 0666 minus the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_atomically(path: Path, data: bytes) -> None:
    """Write bytes to path via a temporary file in the same directory.

    Readers never observe a half-written file: the temporary file is renamed
    over the destination only after it has been fully written, and it is
    removed if anything fails. An existing destination is overwritten and
    keeps its permissions; a new file gets the usual umask-based mode.

    Raises:
        ArchiveError: If the file cannot be written.
    """
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.chmod(tmp_name, _output_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ArchiveError(f"Failed to write EPUB: {path}: {exc}") from exc
    logger.debug("Wrote %d bytes to %s", len(data), path)
