"""
clangprobe/toolchain/path_finder.py

Name-pattern, search-path and version-gated discovery of tool binaries
and files.

A search is described by a PathConfig. Search paths are the outer loop and
name patterns the inner loop, so a pattern matched in an earlier search
path always wins over any pattern in a later one.
"""

import logging
import os
import re
import shlex
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml

from ..core.config import DEFAULT_MIN_VERSION
from ..core.exceptions import InvalidVersionError
from .version import satisfies

logger = logging.getLogger(__name__)

# Substituted with the candidate path in probe command templates
PLACEHOLDER = "%"


class PathKind(Enum):
    """What kind of filesystem entry a search accepts."""

    EXECUTABLE = "Executable"
    FILE = "File"


@dataclass(frozen=True)
class VersionRequirement:
    """
    Minimum version a candidate must report.

    Attributes:
        min_version: Lowest acceptable version, e.g. '6.0.0'
        command: Probe command template, '%' is replaced by the candidate path
        regex: Pattern with one capture group extracting the version
    """

    min_version: str
    command: str = f"{PLACEHOLDER} --version"
    regex: str = r"([0-9.]+)"

    def probe_argv(self, candidate: Path) -> List[str]:
        """Build the probe command line for a candidate."""
        return [
            token.replace(PLACEHOLDER, str(candidate))
            for token in shlex.split(self.command)
        ]


@dataclass(frozen=True)
class PathConfig:
    """
    Description of a single discovery search.

    Attributes:
        kind: Accept executables or regular files
        try_names: Ordered name patterns; a single trailing '*' matches any suffix
        search_paths: Ordered directories to look in
        version: Optional minimum version constraint
    """

    kind: PathKind
    try_names: Tuple[str, ...]
    search_paths: Tuple[str, ...]
    version: Optional[VersionRequirement] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PathConfig":
        """
        Create a PathConfig from a mapping.

        Keys: ``kind``, ``try``, ``search_paths`` and optionally
        ``version`` with ``min``, ``command`` and ``regex``.
        """
        version = None
        if data.get("version"):
            v = data["version"]
            version = VersionRequirement(
                min_version=str(v["min"]),
                command=v.get("command", f"{PLACEHOLDER} --version"),
                regex=v.get("regex", r"([0-9.]+)"),
            )

        return cls(
            kind=PathKind(data.get("kind", PathKind.EXECUTABLE.value)),
            try_names=tuple(str(name) for name in data.get("try", [])),
            search_paths=tuple(str(p) for p in data.get("search_paths", [])),
            version=version,
        )

    @classmethod
    def from_yaml(cls, text: str) -> "PathConfig":
        """
        Create a PathConfig from a YAML document.

        Example:
            >>> PathConfig.from_yaml('''
            ... kind: File
            ... try: [os-release]
            ... search_paths: [/etc, /usr/lib]
            ... ''')
        """
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError("PathConfig YAML must be a mapping")
        return cls.from_dict(data)


class PathSearcher:
    """
    Locate the first entry satisfying a PathConfig.

    Absence is not an error here; callers decide whether a missing tool is
    fatal.
    """

    def locate(self, config: PathConfig) -> Optional[Path]:
        """
        Find the first fully-qualifying candidate.

        Args:
            config: Search description

        Returns:
            Path to the candidate, or None if nothing qualifies
        """
        for search_path in config.search_paths:
            directory = Path(search_path)
            if not directory.is_dir():
                logger.debug(f"Search path does not exist: {directory}")
                continue

            for pattern in config.try_names:
                for candidate in self._candidates(directory, pattern):
                    if not self._has_kind(candidate, config.kind):
                        logger.debug(f"Skipping {candidate}: not a {config.kind.value}")
                        continue
                    if config.version and not self._check_version(
                        candidate, config.version
                    ):
                        continue
                    return candidate

        return None

    def _candidates(self, directory: Path, pattern: str) -> List[Path]:
        """
        List entries of a directory matching a name pattern.

        Wildcard matches are returned in sorted order.
        """
        if not pattern.endswith("*"):
            candidate = directory / pattern
            return [candidate] if candidate.exists() else []

        prefix = pattern[:-1]
        try:
            names = sorted(
                entry.name
                for entry in directory.iterdir()
                if entry.name.startswith(prefix)
            )
        except OSError as e:
            logger.debug(f"Error iterating {directory}: {e}")
            return []
        return [directory / name for name in names]

    def _has_kind(self, candidate: Path, kind: PathKind) -> bool:
        if not candidate.is_file():
            return False
        if kind is PathKind.EXECUTABLE:
            return os.access(candidate, os.X_OK)
        return True

    def _check_version(self, candidate: Path, requirement: VersionRequirement) -> bool:
        """
        Run the probe command and compare the reported version.

        Args:
            candidate: Path to the candidate binary
            requirement: Version constraint to apply

        Returns:
            True if the candidate reports a sufficient version
        """
        argv = requirement.probe_argv(candidate)
        logger.debug(f"Probing version: {' '.join(argv)}")

        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            logger.debug(f"Could not run {candidate}: {e}")
            return False

        match = re.search(requirement.regex, result.stdout or "")
        if not match:
            logger.debug(f"No version found in output of {candidate}")
            return False

        version = match.group(1)
        try:
            ok = satisfies(version, requirement.min_version)
        except InvalidVersionError as e:
            logger.debug(f"Skipping {candidate}: {e}")
            return False

        if not ok:
            logger.debug(
                f"Skipping {candidate}: version {version} < {requirement.min_version}"
            )
        return ok


# ============================================================================
# Standard searches
# ============================================================================


def llvm_config_search(
    search_paths: Iterable[str], min_version: str = DEFAULT_MIN_VERSION
) -> PathConfig:
    """Search description for ``llvm-config`` or ``llvm-config-*``."""
    return PathConfig(
        kind=PathKind.EXECUTABLE,
        try_names=("llvm-config", "llvm-config-*"),
        search_paths=tuple(search_paths),
        version=VersionRequirement(min_version=min_version, regex=r"([0-9.]+)"),
    )


def clang_search(
    search_paths: Iterable[str], min_version: str = DEFAULT_MIN_VERSION
) -> PathConfig:
    """Search description for ``clang++`` or ``clang++-*``."""
    return PathConfig(
        kind=PathKind.EXECUTABLE,
        try_names=("clang++", "clang++-*"),
        search_paths=tuple(search_paths),
        version=VersionRequirement(
            min_version=min_version, regex=r"clang version ([0-9.]+)"
        ),
    )


OS_RELEASE_SEARCH = PathConfig(
    kind=PathKind.FILE,
    try_names=("os-release",),
    search_paths=("/etc", "/usr/lib"),
)


def find_llvm_config_binary(
    search_paths: Sequence[str], min_version: str = DEFAULT_MIN_VERSION
) -> Optional[Path]:
    logger.info(
        f"Searching for binary `llvm-config` or `llvm-config-*` in "
        f"{':'.join(search_paths)}. Minimum version {min_version}"
    )
    return PathSearcher().locate(llvm_config_search(search_paths, min_version))


def find_clang_binary(
    search_paths: Sequence[str], min_version: str = DEFAULT_MIN_VERSION
) -> Optional[Path]:
    logger.info(
        f"Searching for binary clang++ or clang++-* in {':'.join(search_paths)}. "
        f"Minimum version {min_version}"
    )
    return PathSearcher().locate(clang_search(search_paths, min_version))


def find_os_release_file() -> Optional[Path]:
    logger.debug("Searching for file 'os-release'")
    return PathSearcher().locate(OS_RELEASE_SEARCH)


__all__ = [
    "PLACEHOLDER",
    "DEFAULT_MIN_VERSION",
    "PathKind",
    "VersionRequirement",
    "PathConfig",
    "PathSearcher",
    "llvm_config_search",
    "clang_search",
    "find_llvm_config_binary",
    "find_clang_binary",
    "find_os_release_file",
]
