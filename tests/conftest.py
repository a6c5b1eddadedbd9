"""Shared fixtures: a fake toolchain and a scripted stand-in for run_process."""

from pathlib import Path

import pytest

from swift_api_diff.errors import ProcessFailed
from swift_api_diff.toolchain import Toolchain


class FakeRunner:
    """Records every command and plays back scripted tool behaviour.

    `diagnose` maps (first input, second input) dump names to the text the
    digester writes on stderr. `fail` maps a program name or subcommand
    ("build", "--dump-sdk", "-diagnose-sdk") to an exit code.
    """

    def __init__(self, diagnose=None, fail=None, build_stderr=b""):
        self.calls = []
        self.diagnose = diagnose or {}
        self.fail = fail or {}
        self.build_stderr = build_stderr

    def __call__(self, executable, arguments=(), env=None, stdout=None, stderr=None, cwd=None):
        arguments = [str(a) for a in arguments]
        self.calls.append({"executable": str(executable), "arguments": arguments, "env": env})
        step = arguments[0]
        command = [str(executable)] + arguments

        if step == "build":
            if self.build_stderr and stderr:
                stderr(self.build_stderr)
        elif step == "--dump-sdk":
            if step not in self.fail:
                output = Path(arguments[arguments.index("-o") + 1])
                output.write_text('{"ABIRoot": {}}')
        elif step == "-diagnose-sdk":
            first = Path(arguments[arguments.index("--input-paths") + 1]).name
            second = Path(arguments[arguments.index("-input-paths") + 1]).name
            text = self.diagnose.get((first, second), "")
            if text and stderr:
                stderr(text.encode("utf-8"))

        if step in self.fail:
            if stderr:
                stderr(f"error: {step} failed\n".encode())
            raise ProcessFailed(command, self.fail[step])

    def steps(self):
        return [call["arguments"][0] for call in self.calls]


@pytest.fixture
def toolchain():
    return Toolchain(
        swift="/toolchain/bin/swift",
        compiler="/toolchain/bin/swiftc",
        digester="/toolchain/bin/swift-api-digester",
        sdk="/Applications/Xcode.app/Contents/Developer/Platforms/MacOSX.platform/Developer/SDKs/MacOSX.sdk",
    )


@pytest.fixture
def make_package(tmp_path):
    """Create a directory that looks like a Swift package."""
    def _make(name):
        package = tmp_path / name
        package.mkdir()
        (package / "Package.swift").write_text("// swift-tools-version:5.3\n")
        return package
    return _make
