"""Tests for toolchain resolution."""

import os
import sys

import pytest

from swift_api_diff.errors import ToolchainNotFound
from swift_api_diff.toolchain import Toolchain


def _tool(directory, name):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def empty_path(monkeypatch, tmp_path):
    """PATH without any Swift tools on it."""
    bare = tmp_path / "empty-bin"
    bare.mkdir()
    monkeypatch.setenv("PATH", str(bare))
    monkeypatch.setattr(sys, "platform", "linux")
    return bare


pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX executables")


def test_toolchain_dir(empty_path, tmp_path):
    bin_dir = tmp_path / "swift-5.4.2" / "bin"
    for name in ("swift", "swiftc", "swift-api-digester"):
        _tool(bin_dir, name)

    toolchain = Toolchain.resolve(toolchain_path=tmp_path / "swift-5.4.2")

    assert toolchain.swift == os.path.abspath(bin_dir / "swift")
    assert toolchain.compiler == os.path.abspath(bin_dir / "swiftc")
    assert toolchain.digester == os.path.abspath(bin_dir / "swift-api-digester")
    assert toolchain.sdk is None
    assert toolchain.build_env == {"SWIFT_EXEC": toolchain.compiler}
    assert toolchain.sdk_arguments() == []


def test_path_lookup(empty_path):
    for name in ("swift", "swiftc", "swift-api-digester"):
        _tool(empty_path, name)

    toolchain = Toolchain.resolve()
    assert os.path.dirname(toolchain.digester) == str(empty_path)


def test_explicit_overrides(empty_path, tmp_path):
    for name in ("swift", "swiftc", "swift-api-digester"):
        _tool(empty_path, name)
    custom = _tool(tmp_path / "custom", "my-swiftc")

    toolchain = Toolchain.resolve(compiler=str(custom), sdk="/some/sdk")
    assert toolchain.compiler == os.path.abspath(custom)
    assert toolchain.sdk == "/some/sdk"
    assert toolchain.sdk_arguments() == ["-sdk", "/some/sdk"]


def test_xcode_sdk_and_digester(empty_path, tmp_path):
    _tool(empty_path, "swift")
    _tool(empty_path, "swiftc")
    xcode = tmp_path / "Xcode.app"
    digester = _tool(
        xcode / "Contents/Developer/Toolchains/XcodeDefault.xctoolchain/usr/bin", "swift-api-digester"
    )
    sdk = xcode / "Contents/Developer/Platforms/MacOSX.platform/Developer/SDKs/MacOSX.sdk"
    sdk.mkdir(parents=True)

    toolchain = Toolchain.resolve(xcode_path=xcode)
    assert toolchain.digester == os.path.abspath(digester)
    assert toolchain.sdk == str(sdk.resolve())


def test_xcode_without_sdk(empty_path, tmp_path):
    for name in ("swift", "swiftc", "swift-api-digester"):
        _tool(empty_path, name)
    (tmp_path / "Xcode.app").mkdir()

    assert Toolchain.resolve(xcode_path=tmp_path / "Xcode.app").sdk is None


def test_missing_tools(empty_path):
    _tool(empty_path, "swift")
    with pytest.raises(ToolchainNotFound) as exc_info:
        Toolchain.resolve()
    assert "swiftc" in str(exc_info.value)
    assert "swift-api-digester" in str(exc_info.value)


def test_missing_explicit_tool(empty_path, tmp_path):
    for name in ("swift", "swiftc", "swift-api-digester"):
        _tool(empty_path, name)
    with pytest.raises(ToolchainNotFound):
        Toolchain.resolve(digester=str(tmp_path / "nope"))


def test_non_executable_ignored(empty_path, tmp_path):
    bin_dir = tmp_path / "tc" / "bin"
    for name in ("swift", "swiftc", "swift-api-digester"):
        _tool(bin_dir, name)
    (bin_dir / "swiftc").chmod(0o644)

    with pytest.raises(ToolchainNotFound):
        Toolchain.resolve(toolchain_path=tmp_path / "tc")


def test_symlinked_multi_call_binary_keeps_tool_names(empty_path, tmp_path):
    bin_dir = tmp_path / "usr" / "bin"
    frontend = _tool(bin_dir, "swift-frontend")
    for name in ("swift", "swiftc", "swift-api-digester"):
        (bin_dir / name).symlink_to(frontend.name)

    toolchain = Toolchain.resolve(toolchain_path=tmp_path / "usr")

    assert os.path.basename(toolchain.swift) == "swift"
    assert os.path.basename(toolchain.compiler) == "swiftc"
    assert os.path.basename(toolchain.digester) == "swift-api-digester"
    assert toolchain.build_env == {"SWIFT_EXEC": str(bin_dir / "swiftc")}


def test_symlinked_tools_on_path_keep_tool_names(empty_path, tmp_path):
    frontend = _tool(tmp_path / "real", "swift-frontend")
    for name in ("swift", "swiftc", "swift-api-digester"):
        (empty_path / name).symlink_to(frontend)

    toolchain = Toolchain.resolve(digester=str(empty_path / "swift-api-digester"))

    assert toolchain.swift == str(empty_path / "swift")
    assert toolchain.compiler == str(empty_path / "swiftc")
    assert toolchain.digester == str(empty_path / "swift-api-digester")
