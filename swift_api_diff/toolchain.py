"""Location of the Swift tools used by the pipeline."""

import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ToolchainNotFound

logger = logging.getLogger(__name__)

DEFAULT_XCODE_PATH = Path("/Applications/Xcode.app")

_XCODE_SDK = Path("Contents/Developer/Platforms/MacOSX.platform/Developer/SDKs/MacOSX.sdk")
_XCODE_TOOLCHAIN_BIN = Path("Contents/Developer/Toolchains/XcodeDefault.xctoolchain/usr/bin")


def _executable(path: Path) -> Optional[str]:
    if path.is_file() and os.access(path, os.X_OK):
        return os.path.abspath(path)
    return None


def _locate(name: str, explicit: Optional[str], *search_dirs: Optional[Path]) -> Optional[str]:
    """Resolve a tool: explicit setting, then search dirs, then PATH."""
    if explicit:
        # Absolute path (avoid PATH hijacking later on) without following
        # symlinks: swift, swiftc and swift-api-digester are usually links to
        # one multi-call binary that picks its mode from argv[0]
        found = shutil.which(explicit) or _executable(Path(explicit).expanduser())
        return os.path.abspath(found) if found else None
    for directory in search_dirs:
        if directory is None:
            continue
        found = _executable(directory / name)
        if found:
            return found
    found = shutil.which(name)
    return os.path.abspath(found) if found else None


@dataclass(frozen=True)
class Toolchain:
    """Absolute paths of the tools one pipeline run invokes."""

    swift: str
    compiler: str
    digester: str
    sdk: Optional[str] = None

    @property
    def build_env(self) -> dict:
        """Environment overrides for `swift build`."""
        return {"SWIFT_EXEC": self.compiler}

    def sdk_arguments(self) -> list:
        return ["-sdk", self.sdk] if self.sdk else []

    @classmethod
    def resolve(
        cls,
        toolchain_path: Optional[Path] = None,
        xcode_path: Optional[Path] = None,
        swift: Optional[str] = None,
        compiler: Optional[str] = None,
        digester: Optional[str] = None,
        sdk: Optional[str] = None,
    ) -> "Toolchain":
        """Find every tool or raise ToolchainNotFound.

        Args:
            toolchain_path: Toolchain root holding bin/swiftc and
                bin/swift-api-digester.
            xcode_path: Xcode.app bundle; provides the macOS SDK and a
                fallback digester. Defaults to /Applications/Xcode.app on
                macOS when it exists.
            swift, compiler, digester, sdk: Explicit overrides.
        """
        if xcode_path is None and sys.platform == "darwin" and DEFAULT_XCODE_PATH.is_dir():
            xcode_path = DEFAULT_XCODE_PATH

        toolchain_bin = Path(toolchain_path).expanduser() / "bin" if toolchain_path else None
        xcode_bin = Path(xcode_path).expanduser() / _XCODE_TOOLCHAIN_BIN if xcode_path else None

        tools = {
            "swift": _locate("swift", swift, toolchain_bin, xcode_bin),
            "swiftc": _locate("swiftc", compiler, toolchain_bin, xcode_bin),
            "swift-api-digester": _locate("swift-api-digester", digester, toolchain_bin, xcode_bin),
        }
        missing = [name for name, path in tools.items() if not path]
        if missing:
            raise ToolchainNotFound(
                f"Swift tools not found: {', '.join(missing)}. "
                f"Install a Swift toolchain or pass --xcode-path / set toolchain_path in the config."
            )

        if sdk is None and xcode_path is not None:
            candidate = Path(xcode_path).expanduser() / _XCODE_SDK
            if candidate.is_dir():
                sdk = str(candidate.resolve())
            else:
                logger.warning("macOS SDK not found under %s, running digester without -sdk", xcode_path)

        toolchain = cls(
            swift=tools["swift"],
            compiler=tools["swiftc"],
            digester=tools["swift-api-digester"],
            sdk=sdk,
        )
        logger.debug("Using toolchain %s", toolchain)
        return toolchain
