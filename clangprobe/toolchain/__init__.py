"""
Toolchain discovery and interrogation.

Locates llvm-config and clang++, parses what they report and enumerates
the libraries to link against.
"""

from .version import compare_versions, satisfies, major_version
from .path_finder import (
    PathKind,
    VersionRequirement,
    PathConfig,
    PathSearcher,
    find_llvm_config_binary,
    find_clang_binary,
    find_os_release_file,
)
from .llvm_config import LlvmConfigInfo, query_llvm_config
from .clang_output import (
    ParsedFlags,
    split_trace_line,
    FlagClassifier,
    CommandOutputParser,
)
from .libraries import LinkageMode, find_libraries, get_lib_args
from .probe import ProbeResult, ToolchainProbe

__all__ = [
    "compare_versions",
    "satisfies",
    "major_version",
    "PathKind",
    "VersionRequirement",
    "PathConfig",
    "PathSearcher",
    "find_llvm_config_binary",
    "find_clang_binary",
    "find_os_release_file",
    "LlvmConfigInfo",
    "query_llvm_config",
    "ParsedFlags",
    "split_trace_line",
    "FlagClassifier",
    "CommandOutputParser",
    "LinkageMode",
    "find_libraries",
    "get_lib_args",
    "ProbeResult",
    "ToolchainProbe",
]
