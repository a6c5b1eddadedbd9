"""Blocking execution of external tools with streamed output."""

import logging
import os
import shlex
import subprocess
import threading
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Union

from .errors import ProcessFailed, ProcessLaunchFailed, ProcessSignaled

logger = logging.getLogger(__name__)

OutputSink = Callable[[bytes], None]
PathLike = Union[str, Path]

_CHUNK_SIZE = 64 * 1024


class BufferSink:
    """Collects every chunk written to it in memory."""

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    def __call__(self, chunk: bytes) -> None:
        self._chunks.append(chunk)

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)

    def text(self, encoding: str = "utf-8") -> str:
        return self.getvalue().decode(encoding, errors="replace")

    def tail(self, limit: int = 300) -> str:
        """Last `limit` characters of the stripped text, for error messages."""
        stripped = self.text().strip()
        return stripped[-limit:] if stripped else ""


def stream_sink(stream) -> OutputSink:
    """Echo chunks to a stream as they arrive.

    Text streams are written through their underlying binary buffer when they
    have one (sys.stderr does), otherwise chunks are decoded first.
    """
    target = getattr(stream, "buffer", None)

    def _write(chunk: bytes) -> None:
        if target is not None:
            target.write(chunk)
            target.flush()
        else:
            stream.write(chunk.decode("utf-8", errors="replace"))
            stream.flush()

    return _write


def tee(*sinks: Optional[OutputSink]) -> Optional[OutputSink]:
    """Fan a stream out to several sinks; ``None`` entries are skipped."""
    active = [s for s in sinks if s is not None]
    if not active:
        return None
    if len(active) == 1:
        return active[0]

    def _write(chunk: bytes) -> None:
        for sink in active:
            sink(chunk)

    return _write


def _pump(pipe, sink: OutputSink, failures: List[BaseException]) -> None:
    # Keep draining after a sink error so the child never blocks on a full pipe.
    with pipe:
        for chunk in iter(lambda: pipe.read1(_CHUNK_SIZE), b""):
            if failures:
                continue
            try:
                sink(chunk)
            except Exception as exc:
                failures.append(exc)


def run_process(
    executable: PathLike,
    arguments: Sequence[PathLike] = (),
    env: Optional[Mapping[str, str]] = None,
    stdout: Optional[OutputSink] = None,
    stderr: Optional[OutputSink] = None,
    cwd: Optional[PathLike] = None,
) -> None:
    """Run a command to completion.

    Args:
        executable: Program to run.
        arguments: Arguments passed after the program.
        env: Variables merged over the inherited environment (override wins).
        stdout: Sink receiving raw stdout chunks; discarded when None.
        stderr: Sink receiving raw stderr chunks; discarded when None.
        cwd: Working directory for the child.

    Raises:
        ProcessLaunchFailed: If the program cannot be started.
        ProcessFailed: If it exits with a non-zero status.
        ProcessSignaled: If it is killed by a signal.
    """
    command = [str(executable)] + [str(a) for a in arguments]

    environment = os.environ.copy()
    if env:
        environment.update(env)
        logger.debug("Environment overrides: %s", ", ".join(f"{k}={v}" for k, v in env.items()))
    logger.debug("Running: %s", shlex.join(command))

    try:
        proc = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE if stdout else subprocess.DEVNULL,
            stderr=subprocess.PIPE if stderr else subprocess.DEVNULL,
            env=environment,
            cwd=str(cwd) if cwd is not None else None,
        )
    except OSError as e:
        raise ProcessLaunchFailed(command, e.strerror or str(e)) from e

    failures: List[BaseException] = []
    pumps = []
    for pipe, sink in ((proc.stdout, stdout), (proc.stderr, stderr)):
        if pipe is None:
            continue
        thread = threading.Thread(target=_pump, args=(pipe, sink, failures), daemon=True)
        thread.start()
        pumps.append(thread)

    returncode = proc.wait()
    for thread in pumps:
        thread.join()

    if failures:
        raise failures[0]
    if returncode < 0:
        raise ProcessSignaled(command, -returncode)
    if returncode != 0:
        raise ProcessFailed(command, returncode)
