"""
clangprobe - locate an LLVM/Clang toolchain and generate build configuration.

Finds llvm-config and clang++ (subject to a minimum version), asks clang
for its system include and library directories, enumerates the LLVM and
Clang libraries to link against, and writes the generated header, make
variables and integration test configuration used by the build.
"""

try:
    from importlib.metadata import version

    __version__ = version("clangprobe")
except Exception:
    __version__ = "0.1.0"

__all__ = ["__version__"]
