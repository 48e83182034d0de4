"""
Pytest configuration and shared fixtures for clangprobe tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Callable

import pytest

from clangprobe.core.platform import PlatformInfo, clear_platform_cache


LLVM_VERSION = "14.0.0"


def pytest_collection_modifyitems(config, items):
    """Skip tests that run shell stub executables on Windows."""
    if sys.platform != "win32":
        return
    skip_stub = pytest.mark.skip(reason="stub executables need /bin/sh")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_stub)


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Platform detection is cached per process; keep tests independent."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def platform_linux() -> PlatformInfo:
    """Linux platform info."""
    return PlatformInfo("linux", "x64")


@pytest.fixture
def platform_macos() -> PlatformInfo:
    """macOS platform info."""
    return PlatformInfo("macos", "arm64")


@pytest.fixture
def make_executable() -> Callable[[Path, str], Path]:
    """
    Factory writing a ``#!/bin/sh`` script and marking it executable.

    Usage:
        make_executable(tmp_path / "bin" / "clang++", 'echo "clang version 14.0.0"')
    """

    def _make(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture
def fake_llvm(tmp_path, make_executable) -> SimpleNamespace:
    """
    A fake LLVM installation with stub llvm-config and clang++.

    Layout:
        llvm/bin/llvm-config     reports version, flags and directories
        llvm/bin/clang++         prints a version, or two -### trace lines
        llvm/lib/                libclangBasic.a, libclangAST.a, libLLVMSupport.a
        llvm/lib/clang/14.0.0/include
        llvm/include/c++         reported through -internal-isystem
    """
    root = tmp_path / "llvm"
    bin_dir = root / "bin"
    lib_dir = root / "lib"
    cxx_include = root / "include" / "c++"
    clang_include = lib_dir / "clang" / LLVM_VERSION / "include"

    for directory in (bin_dir, lib_dir, cxx_include, clang_include):
        directory.mkdir(parents=True, exist_ok=True)

    for name in ("libclangBasic.a", "libclangAST.a", "libLLVMSupport.a"):
        (lib_dir / name).write_bytes(b"!<arch>\n")

    llvm_config = make_executable(
        bin_dir / "llvm-config",
        "\n".join(
            [
                'case "$1" in',
                f"  --version) echo {LLVM_VERSION} ;;",
                f'  --cxxflags) echo "-I{root}/include -std=c++17 -fno-exceptions -Wall -D_GNU_SOURCE" ;;',
                f'  --ldflags) echo "-L{lib_dir}  -Wl,-rpath" ;;',
                f"  --bindir) echo {bin_dir} ;;",
                f"  --libdir) echo {lib_dir} ;;",
                "esac",
            ]
        ),
    )

    compile_line = (
        f' "{bin_dir}/clang-14" "-cc1" "-triple" "x86_64-pc-linux-gnu"'
        f' "-resource-dir" "{lib_dir}/clang/{LLVM_VERSION}"'
        f' "-internal-isystem" "{cxx_include}" "-internal-isystem" "{root}/missing"'
        ' "-o" "/tmp/probe.o" "-x" "c++" "probe.cpp"'
    )
    link_line = (
        ' "/usr/bin/ld" "-pie" "-o" "a.out"'
        f' "-L{lib_dir}/" "-L{root}/nonexistent" "/tmp/probe.o"'
    )
    clang = make_executable(
        bin_dir / "clang++",
        "\n".join(
            [
                'if [ "$1" = "--version" ]; then',
                f'  echo "clang version {LLVM_VERSION}"',
                '  echo "Target: x86_64-pc-linux-gnu"',
                "  exit 0",
                "fi",
                "cat >&2 <<'EOF'",
                f"clang version {LLVM_VERSION}",
                "Target: x86_64-pc-linux-gnu",
                compile_line,
                link_line,
                "EOF",
            ]
        ),
    )

    return SimpleNamespace(
        root=root,
        bin_dir=bin_dir,
        lib_dir=lib_dir,
        cxx_include=cxx_include,
        clang_include=clang_include,
        llvm_config=llvm_config,
        clang=clang,
        version=LLVM_VERSION,
    )
