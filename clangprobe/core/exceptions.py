"""
Centralized exception hierarchy for clangprobe.

Every failure of a probe run is terminal: components raise, and only the
CLI turns an exception into a diagnostic and an exit code.
"""

from typing import Iterable, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class ClangProbeError(Exception):
    """Base exception for all clangprobe errors."""

    pass


# ============================================================================
# Discovery Exceptions
# ============================================================================


class ToolNotFoundError(ClangProbeError):
    """Raised when no candidate satisfies the name and version constraints."""

    def __init__(
        self,
        tool: str,
        search_paths: Iterable[str] = (),
        min_version: Optional[str] = None,
    ):
        self.tool = tool
        self.search_paths = list(search_paths)
        self.min_version = min_version
        msg = f"Could not find {tool}"
        if self.search_paths:
            msg += f" in {':'.join(self.search_paths)}"
        if min_version:
            msg += f" (minimum version {min_version})"
        super().__init__(msg)


class EmptyLibrarySetError(ToolNotFoundError):
    """Raised when the library scan finds nothing to link against."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"{' and '.join(self.missing)} libraries")


class InvalidVersionError(ClangProbeError):
    """Version string without any numeric component."""

    pass


# ============================================================================
# Probe Exceptions
# ============================================================================


class MalformedProbeOutputError(ClangProbeError):
    """Raised when the compiler diagnostic probe prints too few lines."""

    def __init__(self, binary: str, line_count: int):
        self.binary = binary
        self.line_count = line_count
        super().__init__(
            f'Unexpected output from "{binary}": Expected at least two lines.'
        )


__all__ = [
    "ClangProbeError",
    "ToolNotFoundError",
    "EmptyLibrarySetError",
    "InvalidVersionError",
    "MalformedProbeOutputError",
]
