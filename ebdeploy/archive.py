"""
In-memory zip packaging of the configured project files.
"""

import io
import logging
import os
import zipfile
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Tuple

from .errors import PackagingError

logger = logging.getLogger(__name__)

ProgressFunc = Callable[[str], None]


def _walk_dir(dir_path: Path, sort_entries: bool) -> Iterator[Tuple[Path, str]]:
    """Yield (file path, archive path) for every regular file under dir_path."""
    base_name = dir_path.name

    def _raise(err: OSError):
        raise PackagingError(err.filename or str(dir_path), err.strerror or str(err)) from err

    for current, dirs, files in os.walk(dir_path, onerror=_raise):
        if sort_entries:
            dirs.sort()
            files = sorted(files)
        for name in files:
            file_path = Path(current) / name
            relative = file_path.relative_to(dir_path)
            yield file_path, "/".join((base_name,) + relative.parts)


def _write_file(zf: zipfile.ZipFile, file_path: Path, archive_path: str,
                progress: Optional[ProgressFunc]) -> None:
    if progress is not None:
        progress(archive_path)
    try:
        with open(file_path, "rb") as src, zf.open(archive_path, "w") as dst:
            while True:
                chunk = src.read(64 * 1024)
                if not chunk:
                    break
                dst.write(chunk)
    except OSError as e:
        raise PackagingError(str(file_path), e.strerror or str(e)) from e


def build_archive(root, files: Sequence[str], progress: Optional[ProgressFunc] = None,
                  flatten_files: bool = True, sort_entries: bool = False) -> bytes:
    """
    Zip the configured files and directories into memory.

    Directories are added recursively under their own base name, so
    ``config/app.yml`` is stored as ``config/app.yml``. Single files are
    stored under their base name only (``docker/Dockerfile`` becomes
    ``Dockerfile``) unless ``flatten_files`` is False, in which case their
    path relative to ``root`` is kept. Two files that map to the same
    archive path are rejected rather than written twice.

    Args:
        root: Project root the entries are relative to
        files: Entries in archive order
        progress: Optional callback invoked with each archive path
        flatten_files: Store single files under their base name
        sort_entries: Walk directories in sorted order

    Returns:
        The zip archive as bytes

    Raises:
        PackagingError: If an entry is missing, a file cannot be read, or two
            files map to the same archive path
    """
    root = Path(root)
    buffer = io.BytesIO()
    written = set()

    def add(zf: zipfile.ZipFile, file_path: Path, archive_path: str) -> None:
        if archive_path in written:
            raise PackagingError(str(file_path), f"duplicate archive path '{archive_path}'")
        written.add(archive_path)
        _write_file(zf, file_path, archive_path, progress)

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for entry in files:
            path = root / entry
            try:
                path.lstat()
            except OSError as e:
                raise PackagingError(entry, e.strerror or "does not exist") from e

            if path.is_dir():
                for file_path, archive_path in _walk_dir(path, sort_entries):
                    add(zf, file_path, archive_path)
            else:
                if flatten_files:
                    archive_path = path.name
                else:
                    archive_path = Path(os.path.normpath(entry)).as_posix()
                add(zf, path, archive_path)

    data = buffer.getvalue()
    logger.debug(f"Packaged {len(written)} files into {len(data)} bytes")
    return data
