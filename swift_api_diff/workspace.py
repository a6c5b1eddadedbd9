"""Scratch directory owned by one pipeline run."""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_SCRATCH_NAME = "swift_package_version"


@dataclass(frozen=True)
class PipelineRun:
    """Paths of every artifact produced by one comparison."""

    root: Path

    @property
    def old_build_dir(self) -> Path:
        return self.root / "build_old"

    @property
    def new_build_dir(self) -> Path:
        return self.root / "build_new"

    @property
    def old_dump(self) -> Path:
        return self.root / "old.json"

    @property
    def new_dump(self) -> Path:
        return self.root / "new.json"

    @property
    def forward_report(self) -> Path:
        return self.root / "old_vs_new_report.txt"

    @property
    def reversed_report(self) -> Path:
        return self.root / "new_vs_old_report.txt"


@contextmanager
def scratch_workspace(name: str = DEFAULT_SCRATCH_NAME,
                      parent: Optional[Path] = None) -> Iterator[PipelineRun]:
    """Create the scratch tree and remove it on every exit path.

    The directory name is fixed, so two runs on the same machine at the same
    time share (and clobber) one workspace.
    """
    root = Path(parent or tempfile.gettempdir()) / name
    if root.exists():
        logger.warning("Removing stale workspace %s", root)
        shutil.rmtree(root)

    run = PipelineRun(root)
    try:
        run.old_build_dir.mkdir(parents=True)
        run.new_build_dir.mkdir()
        yield run
    finally:
        shutil.rmtree(root, ignore_errors=True)
        logger.debug("Removed workspace %s", root)
