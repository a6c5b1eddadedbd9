"""Two-pass API diff of two versions of a Swift package."""

import logging
from pathlib import Path
from typing import Optional

from .config import DiffConfig, Options, validate_options
from .differ import DiffExecutor
from .dumper import InterfaceDumper
from .process import run_process
from .report import Report, merge_reports, read_report, write_report_text
from .toolchain import Toolchain
from .workspace import scratch_workspace

logger = logging.getLogger(__name__)


class ApiDiffPipeline:
    """Builds, dumps and diffs both package versions, one step at a time."""

    def __init__(self, toolchain: Toolchain, config: Optional[DiffConfig] = None,
                 verbose: bool = False, runner=run_process,
                 scratch_parent: Optional[Path] = None):
        self.config = config or DiffConfig()
        self.dumper = InterfaceDumper(toolchain, verbose=verbose, runner=runner)
        self.differ = DiffExecutor(toolchain, verbose=verbose, runner=runner)
        self.scratch_parent = scratch_parent

    def compare(self, old_package: Path, new_package: Path, module_name: str) -> Report:
        """Return the merged report of API changes from old to new.

        Raises:
            BuildFailed, DumpFailed, ProcessError, ReportIOFailed,
            ReportParseError: Any failing step aborts the comparison.
        """
        strict = self.config.strict_categories
        with scratch_workspace(self.config.scratch_dir_name, self.scratch_parent) as run:
            logger.info("Processing old package %s ...", old_package)
            self.dumper.dump(old_package, module_name, run.old_build_dir, run.old_dump)

            logger.info("Processing new package %s ...", new_package)
            self.dumper.dump(new_package, module_name, run.new_build_dir, run.new_dump)

            logger.info("Comparing module dumps ...")
            write_report_text(run.forward_report, self.differ.diff(run.old_dump, run.new_dump))
            write_report_text(run.reversed_report, self.differ.diff(run.new_dump, run.old_dump))

            forward = read_report(run.forward_report, strict=strict)
            reversed_ = read_report(run.reversed_report, strict=strict)

        report = merge_reports(forward, reversed_)
        logger.debug("Merged report: %r", report)
        return report


def compare_packages(options: Options, config: Optional[DiffConfig] = None) -> Report:
    """Validate, locate the toolchain and run the full comparison."""
    config = config or DiffConfig()
    validate_options(options)
    toolchain = Toolchain.resolve(
        toolchain_path=config.toolchain_path,
        xcode_path=config.xcode_path,
        swift=config.swift,
        compiler=config.compiler,
        digester=config.digester,
        sdk=config.sdk,
    )
    pipeline = ApiDiffPipeline(toolchain, config, verbose=options.verbose)
    return pipeline.compare(options.old_package_path, options.new_package_path, options.module_name)
