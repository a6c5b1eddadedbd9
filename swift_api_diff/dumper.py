"""Build a Swift package and dump one module's public interface."""

import logging
import sys
from pathlib import Path
from typing import Optional

from .errors import BuildFailed, DumpFailed, ProcessError
from .process import BufferSink, OutputSink, run_process, stream_sink, tee
from .toolchain import Toolchain

logger = logging.getLogger(__name__)


class InterfaceDumper:
    """Runs `swift build` followed by `swift-api-digester --dump-sdk`."""

    def __init__(self, toolchain: Toolchain, verbose: bool = False, runner=run_process):
        self.toolchain = toolchain
        self.verbose = verbose
        self._run = runner

    def _echo(self) -> Optional[OutputSink]:
        return stream_sink(sys.stderr) if self.verbose else None

    def build(self, package_path: Path, build_dir: Path) -> Path:
        """Compile the package into `build_dir`.

        Returns:
            The debug products directory holding the compiled module.

        Raises:
            BuildFailed: If the build process fails.
        """
        errors = BufferSink()
        try:
            self._run(
                self.toolchain.swift,
                ["build", "--package-path", str(package_path), "--build-path", str(build_dir)],
                env=self.toolchain.build_env,
                stdout=self._echo(),
                stderr=tee(errors, self._echo()),
            )
        except ProcessError as e:
            raise BuildFailed(package_path, errors.tail() or str(e)) from e
        return build_dir / "debug"

    def dump(self, package_path: Path, module_name: str, build_dir: Path, output_path: Path) -> Path:
        """Build `package_path` and write the interface dump of `module_name`.

        Args:
            package_path: Directory containing Package.swift.
            module_name: Module whose public surface is dumped.
            build_dir: Build output directory, owned by the caller.
            output_path: Where the digester writes the JSON dump.

        Returns:
            output_path

        Raises:
            BuildFailed: If the package does not compile.
            DumpFailed: If the digester fails or writes nothing.
        """
        logger.info("Compiling %s ...", package_path)
        products_dir = self.build(package_path, build_dir)

        cmd = ["--dump-sdk"]
        cmd.extend(self.toolchain.sdk_arguments())
        cmd.extend([
            "-module", module_name,
            "-I", str(products_dir),
            "-o", str(output_path),
        ])

        logger.info("Dumping module %s ...", module_name)
        errors = BufferSink()
        try:
            self._run(
                self.toolchain.digester,
                cmd,
                stdout=self._echo(),
                stderr=tee(errors, self._echo()),
            )
        except ProcessError as e:
            raise DumpFailed(module_name, errors.tail() or str(e)) from e

        # The digester can exit 0 without writing anything for an unknown module
        if not output_path.exists() or output_path.stat().st_size == 0:
            raise DumpFailed(module_name, errors.tail() or f"no dump written to {output_path}")

        logger.debug("Dumped %s from %s to %s", module_name, package_path, output_path)
        return output_path
