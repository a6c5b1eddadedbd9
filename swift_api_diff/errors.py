"""Exception hierarchy for swift-api-diff."""

from pathlib import Path
from typing import Optional, Sequence


class ApiDiffError(Exception):
    """Base class for every error raised by the pipeline."""


class ValidationFailed(ApiDiffError, ValueError):
    """Invalid command line options or configuration."""


class ToolchainNotFound(ApiDiffError, RuntimeError):
    """A required Swift tool could not be located."""


class ProcessError(ApiDiffError, RuntimeError):
    """An external process did not complete successfully."""

    def __init__(self, command: Sequence[str], message: str):
        self.command = list(command)
        super().__init__(message)

    @property
    def program(self) -> str:
        return Path(self.command[0]).name if self.command else "?"


class ProcessLaunchFailed(ProcessError):
    """The executable could not be started at all."""

    def __init__(self, command: Sequence[str], reason: str):
        self.reason = reason
        super().__init__(command, f"could not launch {Path(command[0]).name}: {reason}")


class ProcessFailed(ProcessError):
    """The process exited with a non-zero status."""

    def __init__(self, command: Sequence[str], code: int):
        self.code = code
        super().__init__(command, f"{Path(command[0]).name} exited with status {code}")


class ProcessSignaled(ProcessError):
    """The process was terminated by a signal."""

    def __init__(self, command: Sequence[str], signal: int):
        self.signal = signal
        super().__init__(command, f"{Path(command[0]).name} terminated by signal {signal}")


class BuildFailed(ApiDiffError, RuntimeError):
    """`swift build` failed for one of the packages."""

    def __init__(self, package_path: Path, details: str = ""):
        self.package_path = package_path
        self.details = details
        message = f"failed to build package at {package_path}"
        if details:
            message += f": {details}"
        super().__init__(message)


class DumpFailed(ApiDiffError, RuntimeError):
    """The digester could not produce an interface dump."""

    def __init__(self, module: str, details: str = ""):
        self.module = module
        self.details = details
        message = f"failed to dump interface of module {module!r}"
        if details:
            message += f": {details}"
        super().__init__(message)


class ReportIOFailed(ApiDiffError, RuntimeError):
    """A raw report file could not be read or written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"report file {path}: {reason}")


class ReportParseError(ApiDiffError, ValueError):
    """Raw digester output could not be turned into a report."""


class UnknownCategoryError(ReportParseError):
    """A section header that is not one of the known categories."""

    def __init__(self, line: str, line_number: Optional[int] = None):
        self.line = line
        self.line_number = line_number
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"unrecognized report section header{where}: {line}")
