"""Comparison options and the optional YAML configuration file.

Example config::

    toolchain_path: ~/toolchains/swift-5.4.2-RELEASE
    xcode_path: /Applications/Xcode-12.5.app
    additions_are_breaking: false
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from .errors import ValidationFailed
from .workspace import DEFAULT_SCRATCH_NAME

MANIFEST_NAME = "Package.swift"


@dataclass
class DiffConfig:
    """Toolchain and policy settings."""

    toolchain_path: Optional[Path] = None
    xcode_path: Optional[Path] = None
    swift: Optional[str] = None
    compiler: Optional[str] = None
    digester: Optional[str] = None
    sdk: Optional[str] = None
    additions_are_breaking: bool = True
    strict_categories: bool = True
    scratch_dir_name: str = DEFAULT_SCRATCH_NAME

    _PATHS = ("toolchain_path", "xcode_path")
    _FLAGS = ("additions_are_breaking", "strict_categories")

    @classmethod
    def from_dict(cls, data: dict) -> "DiffConfig":
        """Build a config from parsed YAML.

        Raises:
            ValidationFailed: On unknown keys or wrongly typed values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationFailed(f"Unknown config keys: {', '.join(unknown)}")

        values = {}
        for key, value in data.items():
            if value is None:
                continue
            if key in cls._FLAGS:
                if not isinstance(value, bool):
                    raise ValidationFailed(f"Config key '{key}' must be true or false, got {value!r}")
            elif not isinstance(value, str):
                raise ValidationFailed(f"Config key '{key}' must be a string, got {value!r}")
            elif key in cls._PATHS:
                value = Path(value).expanduser()
            values[key] = value

        if "scratch_dir_name" in values:
            name = values["scratch_dir_name"]
            if not name or "/" in name or name in (".", ".."):
                raise ValidationFailed(f"Invalid scratch_dir_name {name!r}")

        return cls(**values)

    @classmethod
    def from_yaml(cls, config_file: Path) -> "DiffConfig":
        try:
            with open(config_file) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ValidationFailed(f"Cannot read config file {config_file}: {e.strerror or e}") from e
        except yaml.YAMLError as e:
            raise ValidationFailed(f"Invalid YAML in {config_file}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationFailed(f"Config file {config_file} must contain a mapping")
        return cls.from_dict(data)

    def with_overrides(self, **overrides) -> "DiffConfig":
        """Copy with every non-None override applied (CLI flags win)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass
class Options:
    """What to compare."""

    old_package_path: Path
    new_package_path: Path
    module_name: str
    verbose: bool = False


def _has_manifest(package_path: Path) -> bool:
    return Path(package_path).is_dir() and (Path(package_path) / MANIFEST_NAME).is_file()


def validate_options(options: Options) -> None:
    """Reject unusable options before any process is launched.

    Raises:
        ValidationFailed: On an empty module name or a package directory
            without Package.swift.
    """
    if not options.module_name or not options.module_name.strip():
        raise ValidationFailed("Module name must not be empty")
    for label, path in (("Old", options.old_package_path), ("New", options.new_package_path)):
        if not _has_manifest(path):
            raise ValidationFailed(f"{label} package path {path} does not contain {MANIFEST_NAME}")
