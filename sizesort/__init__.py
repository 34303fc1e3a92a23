"""
sizesort package

Walks a folder, ranks every file and folder by size and writes a banded
text report whose header lists the line ranges of each section and band.
"""

from .errors import (
    ConfigError,
    InternalConsistencyFault,
    InvalidDivision,
    PatchFailure,
    SentinelNotFound,
    SizesortError,
)
from .patcher import PatchResult, patch_header
from .pipeline import ReportConfig, ReportOutcome, build_config, generate_report
from .report import Band, ReportLayout, SectionLayout, partition_bands, render_summary, write_report
from .scanner import ScanIssue, ScanResult, SizedEntry, TreeAggregator, aggregate, sort_by_size
from .size_utils import format_size, parse_divisions, sort_divisions

__version__ = "1.0.0"

__all__ = [
    "format_size",
    "parse_divisions",
    "sort_divisions",
    "SizedEntry",
    "ScanIssue",
    "ScanResult",
    "TreeAggregator",
    "aggregate",
    "sort_by_size",
    "Band",
    "SectionLayout",
    "ReportLayout",
    "partition_bands",
    "render_summary",
    "write_report",
    "PatchResult",
    "patch_header",
    "ReportConfig",
    "ReportOutcome",
    "build_config",
    "generate_report",
    "SizesortError",
    "ConfigError",
    "InvalidDivision",
    "InternalConsistencyFault",
    "PatchFailure",
    "SentinelNotFound",
]
