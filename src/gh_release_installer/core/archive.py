"""Archive extraction and executable discovery."""

import os
import tarfile
import zipfile
from pathlib import Path

from gh_release_installer.domain.asset import (
    ensure_supported_format,
    is_archive_format,
)
from gh_release_installer.exceptions import (
    ExecutableNotFoundError,
    UnsupportedFormatError,
)
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)

_TAR_MODES: dict[str, str] = {
    "tar.gz": "r:gz",
    "tgz": "r:gz",
    "tar": "r:",
}

__all__ = [
    "ensure_supported_format",
    "is_archive_format",
    "locate_executable",
    "unpack",
]


def _unpack_zip(archive_path: Path, dest_dir: Path) -> None:
    root = dest_dir.resolve()
    with zipfile.ZipFile(archive_path) as zf:
        for info in zf.infolist():
            target = (root / info.filename).resolve()
            if not target.is_relative_to(root):
                msg = f"member escapes extraction directory: {info.filename}"
                raise UnsupportedFormatError(msg, archive_path.name)
            zf.extract(info, root)
            # zipfile drops Unix permissions; they live in the high bits
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                os.chmod(target, mode)


def unpack(archive_path: Path, fmt: str, dest_dir: Path) -> None:
    """Extract ``archive_path`` into ``dest_dir``.

    Args:
        archive_path: Archive file
        fmt: One of ``tar.gz``, ``tgz``, ``tar`` or ``zip``
        dest_dir: Extraction directory (created if missing)

    Raises:
        UnsupportedFormatError: If the format is not an archive format, the
            file is not a valid archive, or a member would be written
            outside ``dest_dir``.

    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    logger.debug("Extracting %s (%s) into %s", archive_path, fmt, dest_dir)

    try:
        if fmt in _TAR_MODES:
            with tarfile.open(archive_path, _TAR_MODES[fmt]) as tar:
                tar.extractall(dest_dir, filter="data")
        elif fmt == "zip":
            _unpack_zip(archive_path, dest_dir)
        else:
            msg = "not an archive format"
            raise UnsupportedFormatError(msg, fmt)
    except (tarfile.TarError, zipfile.BadZipFile) as e:
        msg = f"cannot extract {archive_path.name}: {e}"
        raise UnsupportedFormatError(msg, fmt) from e


def _is_executable(path: Path) -> bool:
    return bool(path.stat().st_mode & 0o111)


def _match_name(
    dest_dir: Path, files: list[Path], binary_name: str, project_name: str
) -> Path | None:
    direct = dest_dir / binary_name
    if direct in files:
        return direct

    names = {n for n in (binary_name, project_name) if n}
    for path in files:
        if path.name in names:
            return path
    prefixes = tuple(f"{n}-" for n in (project_name, binary_name) if n)
    for path in files:
        if prefixes and path.name.startswith(prefixes):
            return path
    return None


def locate_executable(
    dest_dir: Path, binary_name: str, project_name: str
) -> Path:
    """Find the intended executable inside an extracted tree.

    Search order, first match wins:

    1. ``dest_dir/binary_name``
    2. a file whose name equals ``binary_name`` or ``project_name``
    3. a file whose name starts with ``project_name-`` or ``binary_name-``
    4. the first file with any execute bit

    Rules 1 to 4 only consider executable files. When none match, rules
    1 to 3 are repeated over the remaining files, for archives that do not
    record mode bits. Files are visited in sorted path order.

    Raises:
        ExecutableNotFoundError: If no rule matches.

    """
    files = sorted(p for p in dest_dir.rglob("*") if p.is_file())
    executables = [p for p in files if _is_executable(p)]

    found = _match_name(dest_dir, executables, binary_name, project_name)
    if found is None and executables:
        found = executables[0]
    if found is None:
        found = _match_name(dest_dir, files, binary_name, project_name)
    if found is not None:
        return found

    msg = f"binary '{binary_name}' not found in archive"
    raise ExecutableNotFoundError(msg, str(dest_dir))
