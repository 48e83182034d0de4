"""
File system utilities for clangprobe.

This module provides the small set of file operations a probe run needs:
- Path canonicalization of compiler-reported directories
- Order-preserving deduplication of path and flag lists
- Atomic writes and write-if-changed persistence of generated artifacts
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================================
# Path Utilities
# ============================================================================


def canonicalize_directory(path: str) -> str:
    """
    Canonicalize a directory reported by a tool.

    A trailing slash is removed and the path is made absolute with ``..``
    and ``.`` components collapsed. Symlinks are left untouched, so the
    result still names the directory the tool reported.

    Args:
        path: Directory path, absolute or relative to the working directory

    Returns:
        Absolute, normalized path string

    Example:
        >>> canonicalize_directory("/usr/lib/llvm-14/lib/clang/14.0.0/../../../include/")
        '/usr/lib/llvm-14/include'
    """
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return os.path.abspath(path)


def unique(items: Iterable[T]) -> List[T]:
    """
    Remove duplicates, keeping the first occurrence of each item.

    Example:
        >>> unique(["-a", "-b", "-a"])
        ['-a', '-b']
    """
    return list(dict.fromkeys(items))


def existing_directories(paths: Iterable[str]) -> List[str]:
    """Canonicalize, deduplicate and keep only paths that are directories."""
    canonical = unique(canonicalize_directory(p) for p in unique(paths))
    return [p for p in canonical if os.path.isdir(p)]


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding, newline="") as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def write_if_changed(file_path: Union[str, Path], content: str) -> bool:
    """
    Write a text file only if its content differs from what is on disk.

    An unchanged file keeps its modification time.

    Args:
        file_path: Path to write to
        content: Full text content of the file

    Returns:
        True if the file was created or updated, False if left untouched

    Example:
        >>> write_if_changed('Makefile.variables', 'A := 1\\n')
        True
        >>> write_if_changed('Makefile.variables', 'A := 1\\n')
        False
    """
    file_path = Path(file_path)

    if file_path.is_file():
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            if f.read() == content:
                logger.debug(f"{file_path} is up to date")
                return False

    atomic_write(file_path, content)
    return True


__all__ = [
    "canonicalize_directory",
    "unique",
    "existing_directories",
    "atomic_write",
    "write_if_changed",
]
