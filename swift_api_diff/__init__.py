"""swift-api-diff: breaking/minor API change detection for Swift packages."""

__version__ = "0.3.0"

from .errors import ApiDiffError
from .pipeline import ApiDiffPipeline, compare_packages
from .report import Category, ChangesType, Report, classify_report, merge_reports, parse_report

__all__ = [
    "ApiDiffError",
    "ApiDiffPipeline",
    "compare_packages",
    "Category",
    "ChangesType",
    "Report",
    "classify_report",
    "merge_reports",
    "parse_report",
]
