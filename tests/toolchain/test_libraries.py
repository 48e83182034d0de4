"""
Tests for clangprobe.toolchain.libraries module.
"""

from clangprobe.toolchain.libraries import (
    END_GROUP,
    START_GROUP,
    LinkageMode,
    find_libraries,
    get_lib_args,
)


def _touch(directory, *names):
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(b"")


class TestFindLibraries:
    """Tests for find_libraries."""

    def test_static_libraries(self, tmp_path):
        _touch(tmp_path, "libclangFoo.a", "libclangBar.a")

        libs = find_libraries([str(tmp_path)], "clang", LinkageMode.STATIC)

        assert set(libs) == {"clangFoo", "clangBar"}

    def test_prefix_filters_other_libraries(self, tmp_path):
        _touch(tmp_path, "libclangAST.a", "libLLVMSupport.a", "libz.a")

        assert find_libraries([str(tmp_path)], "clang") == ["clangAST"]
        assert find_libraries([str(tmp_path)], "LLVM") == ["LLVMSupport"]

    def test_dynamic_libraries(self, tmp_path):
        _touch(tmp_path, "libclang-cpp.so", "libclangAST.a", "libLLVM-14.so")

        assert find_libraries([str(tmp_path)], "clang", LinkageMode.DYNAMIC) == [
            "clang-cpp"
        ]
        assert find_libraries([str(tmp_path)], "LLVM", LinkageMode.DYNAMIC) == [
            "LLVM-14"
        ]

    def test_versioned_shared_objects_ignored(self, tmp_path):
        _touch(tmp_path, "libLLVM.so.14", "libclang-cpp.so.14")

        assert find_libraries([str(tmp_path)], "LLVM", LinkageMode.DYNAMIC) == []
        assert find_libraries([str(tmp_path)], "clang", LinkageMode.DYNAMIC) == []

    def test_union_across_directories(self, tmp_path):
        first, second = tmp_path / "a", tmp_path / "b"
        _touch(first, "libclangBasic.a")
        _touch(second, "libclangBasic.a", "libclangLex.a")

        libs = find_libraries([str(first), str(second)], "clang")

        assert libs == ["clangBasic", "clangLex"]

    def test_missing_directory_skipped(self, tmp_path):
        assert find_libraries([str(tmp_path / "none")], "clang") == []


class TestLinkageMode:
    def test_from_dynamic(self):
        assert LinkageMode.from_dynamic(True) is LinkageMode.DYNAMIC
        assert LinkageMode.from_dynamic(False) is LinkageMode.STATIC

    def test_suffix(self):
        assert LinkageMode.STATIC.suffix == ".a"
        assert LinkageMode.DYNAMIC.suffix == ".so"


class TestGetLibArgs:
    """Tests for get_lib_args."""

    def test_grouped_on_linux(self, platform_linux):
        assert get_lib_args(["A", "B"], platform_linux) == [
            "-Wl,--start-group",
            "-lA",
            "-lB",
            "-Wl,--end-group",
        ]

    def test_flat_on_macos(self, platform_macos):
        assert get_lib_args(["A", "B"], platform_macos) == ["-lA", "-lB"]

    def test_empty_list_grouped(self, platform_linux):
        assert get_lib_args([], platform_linux) == [START_GROUP, END_GROUP]
