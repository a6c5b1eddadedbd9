"""Categorized API change report built from swift-api-digester output.

The digester only reports declarations that disappeared relative to its first
input, so additions are recovered by diagnosing the dumps a second time in
reverse order and merging that run's removals into the forward report.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import ReportIOFailed, UnknownCategoryError

logger = logging.getLogger(__name__)

_HEADER_SHAPE = re.compile(r"^/\*\s.*\s\*/$")


class Category(Enum):
    """Report categories in output order.

    Each member carries its report key, the digester section title and
    whether the digester emits that section itself.
    """

    GENERIC_SIGNATURE_CHANGES = ("genericSignatureChanges", "Generic Signature Changes", True)
    RAW_REPRESENTABLE_CHANGES = ("rawRepresentableChanges", "RawRepresentable Changes", True)
    REMOVED_DECLARATIONS = ("removedDeclarations", "Removed Decls", True)
    ADDED_DECLARATIONS = ("addedDeclarations", "Added Decls", False)
    MOVED_DECLARATIONS = ("movedDeclarations", "Moved Decls", True)
    RENAMED_DECLARATIONS = ("renamedDeclarations", "Renamed Decls", True)
    TYPE_CHANGES = ("typeChanges", "Type Changes", True)
    DECL_ATTRIBUTE_CHANGES = ("declAttributeChanges", "Decl Attribute changes", True)
    FIXED_LAYOUT_TYPE_CHANGES = ("fixedLayoutTypeChanges", "Fixed-layout Type Changes", True)
    PROTOCOL_CONFORMANCE_CHANGES = ("protocolConformanceChanges", "Protocol Conformance Change", True)
    PROTOCOL_REQUIREMENT_CHANGES = ("protocolRequirementChanges", "Protocol Requirement Change", True)
    CLASS_INHERITANCE_CHANGES = ("classInheritanceChanges", "Class Inheritance Change", True)
    OTHER_CHANGES = ("otherChanges", "Others", True)

    def __init__(self, key: str, title: str, emitted: bool):
        self.key = key
        self.title = title
        self.emitted = emitted

    @property
    def header(self) -> str:
        return f"/* {self.title} */"

    @classmethod
    def from_header(cls, line: str) -> Optional["Category"]:
        """Category whose digester header is exactly `line`, if any."""
        return _HEADERS.get(line)

    @classmethod
    def from_key(cls, key: str) -> "Category":
        for category in cls:
            if category.key == key:
                return category
        raise KeyError(key)


# Added declarations have no digester header: they only come from merging.
_HEADERS: Dict[str, Category] = {c.header: c for c in Category if c.emitted}


class ChangesType(Enum):
    """Verdict for a package version change."""
    BREAKING = "breaking"
    MINOR = "minor"


class Report:
    """Change lines grouped by category, every category always present."""

    def __init__(self, changes: Optional[Mapping[Category, Iterable[str]]] = None):
        self._changes: Dict[Category, List[str]] = {c: [] for c in Category}
        for category, lines in (changes or {}).items():
            self._changes[category] = list(lines)

    def __getitem__(self, category: Category) -> List[str]:
        return list(self._changes[category])

    def __iter__(self) -> Iterator[Tuple[Category, List[str]]]:
        for category in Category:
            yield category, list(self._changes[category])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Report):
            return NotImplemented
        return self._changes == other._changes

    def __repr__(self) -> str:
        counts = ", ".join(f"{c.key}={len(v)}" for c, v in self._changes.items() if v)
        return f"Report({counts or 'empty'})"

    def append(self, category: Category, line: str) -> None:
        self._changes[category].append(line)

    def replace(self, category: Category, lines: Iterable[str]) -> "Report":
        """Copy of this report with one category's lines swapped out."""
        changes = dict(self._changes)
        changes[category] = list(lines)
        return Report(changes)

    def non_empty(self) -> List[Category]:
        return [c for c in Category if self._changes[c]]

    def is_empty(self) -> bool:
        return not self.non_empty()

    def changes_type(self, additions_are_breaking: bool = True) -> ChangesType:
        return classify_report(self, additions_are_breaking)

    def format_description(self) -> str:
        """Human-readable listing of every non-empty category."""
        lines = []
        for category in self.non_empty():
            lines.append(category.header)
            lines.extend(f" - {change}" for change in self._changes[category])
        return "\n".join(lines)

    def to_dict(self, additions_are_breaking: bool = True) -> dict:
        """Export as JSON-serializable dict"""
        return {
            "changes_type": self.changes_type(additions_are_breaking).value,
            "changes": {c.key: list(v) for c, v in self._changes.items()},
        }


def parse_report(text: str, strict: bool = True) -> Report:
    """Parse `-diagnose-sdk` output into a report.

    Lines are assigned to the category of the nearest preceding header.
    Anything before the first header (tool banners and the like) is dropped.

    Args:
        text: Raw digester diagnostic output.
        strict: Raise on a header-shaped line that is not a known category.
            When False, such a section is skipped with a warning.

    Raises:
        UnknownCategoryError: On an unrecognized header in strict mode.
    """
    report = Report()
    current: Optional[Category] = None
    skipping = False

    for number, line in enumerate(text.splitlines(), start=1):
        if not line:
            continue

        category = Category.from_header(line)
        if category is not None:
            current, skipping = category, False
            continue

        if _HEADER_SHAPE.match(line):
            if strict:
                raise UnknownCategoryError(line, number)
            logger.warning("Skipping unrecognized report section %s", line)
            current, skipping = None, True
            continue

        if current is not None:
            report.append(current, line)
        elif not skipping:
            logger.debug("Ignoring line outside any section: %s", line)

    return report


def read_report(path: Path, strict: bool = True) -> Report:
    """Load and parse a persisted raw report file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportIOFailed(Path(path), str(e)) from e
    return parse_report(text, strict=strict)


def write_report_text(path: Path, text: str) -> None:
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError as e:
        raise ReportIOFailed(Path(path), str(e)) from e


def _as_addition(line: str) -> str:
    # The verb ends the digester's sentence; a declaration name may contain it too.
    head, sep, tail = line.rpartition("removed")
    if not sep:
        return line
    return f"{head}added{tail}"


def merge_reports(forward: Report, reversed_: Report) -> Report:
    """Combine the old-vs-new report with the new-vs-old one.

    The reversed run's removals are the forward run's additions. Its other
    categories restate the forward findings from the other side and are
    dropped.
    """
    added = [_as_addition(line) for line in reversed_[Category.REMOVED_DECLARATIONS]]
    return forward.replace(Category.ADDED_DECLARATIONS, added)


def classify_report(report: Report, additions_are_breaking: bool = True) -> ChangesType:
    """Breaking if any checked category has an entry, minor otherwise.

    Args:
        report: Merged report.
        additions_are_breaking: Count added declarations as a breaking
            change. When False, a report whose only entries are additions
            is minor.
    """
    for category in report.non_empty():
        if category is Category.ADDED_DECLARATIONS and not additions_are_breaking:
            continue
        return ChangesType.BREAKING
    return ChangesType.MINOR
