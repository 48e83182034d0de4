"""
Core functionality for clangprobe.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformInfo,
    detect_platform,
    parse_os_release,
    prefers_dynamic_llvm,
    clear_platform_cache,
)

from .filesystem import (
    canonicalize_directory,
    unique,
    existing_directories,
    atomic_write,
    write_if_changed,
)

from .exceptions import (
    ClangProbeError,
    ToolNotFoundError,
    EmptyLibrarySetError,
    InvalidVersionError,
    MalformedProbeOutputError,
)

from .shell import shell_split

from .config import ProbeConfig, path_environment

__all__ = [
    # Platform
    "PlatformInfo",
    "detect_platform",
    "parse_os_release",
    "prefers_dynamic_llvm",
    "clear_platform_cache",
    # Filesystem
    "canonicalize_directory",
    "unique",
    "existing_directories",
    "atomic_write",
    "write_if_changed",
    # Exceptions
    "ClangProbeError",
    "ToolNotFoundError",
    "EmptyLibrarySetError",
    "InvalidVersionError",
    "MalformedProbeOutputError",
    # Tokenizing
    "shell_split",
    # Configuration
    "ProbeConfig",
    "path_environment",
]
