"""Structural comparison of two interface dumps."""

import sys
from pathlib import Path

from .process import BufferSink, run_process, stream_sink, tee
from .toolchain import Toolchain


class DiffExecutor:
    """Runs `swift-api-digester -diagnose-sdk` on a pair of dumps."""

    def __init__(self, toolchain: Toolchain, verbose: bool = False, runner=run_process):
        self.toolchain = toolchain
        self.verbose = verbose
        self._run = runner

    def diff(self, dump_a: Path, dump_b: Path) -> str:
        """Diagnose `dump_b` against `dump_a` and return the raw report text.

        The digester prints its findings on stderr; that stream is the
        report. Only declarations missing from `dump_b` are reported as
        removed, so callers wanting additions diff the other way round too.
        """
        cmd = ["-diagnose-sdk"]
        cmd.extend(self.toolchain.sdk_arguments())
        cmd.extend(["--input-paths", str(dump_a), "-input-paths", str(dump_b)])

        report = BufferSink()
        echo = stream_sink(sys.stderr) if self.verbose else None
        self._run(self.toolchain.digester, cmd, stdout=echo, stderr=tee(report, echo))
        return report.text()
