"""
Banded text report for sizesort.

The report is written top to bottom in one pass. Line three holds a single
sentinel character standing in for the three-line summary, because the
summary lists line numbers that only exist once the body is written. The
writer counts every line (the sentinel line counts as the three summary lines
it will become) and returns a ReportLayout; patcher.patch_header then swaps
the sentinel for render_summary(layout).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, TextIO, Tuple

from .errors import InternalConsistencyFault
from .scanner import SizedEntry
from .size_utils import format_size


ENCODING = "utf-8"
ENCODING_ERRORS = "backslashreplace"

SENTINEL = "#"
SUMMARY_LINE_COUNT = 3
SIZE_WIDTH = 20
PATH_MARGIN = 20

FILES_BANNER = "==== FILES START===="
FOLDERS_FULL_BANNER = "==== FOLDERS FULL START ===="
FOLDERS_PURE_BANNER = "==== FOLDERS PURE START ===="


@dataclass(frozen=True)
class Band:
    threshold: int
    start_line: int
    end_line: int


@dataclass
class SectionLayout:
    label: str
    start_line: int
    bands: List[Band] = field(default_factory=list)

    def summary_line(self) -> str:
        text = f"{self.label}: L{self.start_line} | "
        for band in self.bands:
            text += f"{format_size(band.threshold)}: L{band.start_line}-L{band.end_line} | "
        return text


@dataclass
class ReportLayout:
    files: SectionLayout
    folders_full: SectionLayout
    folders_pure: SectionLayout
    line_count: int
    sentinel_offset: int  # byte offset of SENTINEL in the encoded report

    @property
    def sections(self) -> Tuple[SectionLayout, SectionLayout, SectionLayout]:
        return self.files, self.folders_full, self.folders_pure


def render_summary(layout: ReportLayout) -> str:
    """Summary block that replaces the sentinel (no trailing newline)."""
    return "\n".join(section.summary_line() for section in layout.sections)


def rank_width(count: int) -> int:
    """Width of the rank column: digits of `count` plus room for '. '."""
    if count <= 1:
        return 3
    return math.ceil(math.log10(count)) + 3


def partition_bands(
    entries: Sequence[SizedEntry], thresholds: Sequence[int]
) -> Tuple[List[List[SizedEntry]], List[SizedEntry]]:
    """
    Split size-descending `entries` by size-descending `thresholds`.

    Band i holds the entries left after bands 0..i-1 whose size is >= thresholds[i].
    The second value is the unbanded tail below the smallest threshold.
    """
    bands: List[List[SizedEntry]] = []
    cursor = 0
    for threshold in thresholds:
        start = cursor
        while cursor < len(entries) and entries[cursor].size_bytes >= threshold:
            cursor += 1
        bands.append(list(entries[start:cursor]))
    return bands, list(entries[cursor:])


def _one_line(text: str) -> str:
    return text.replace("\r", "\\r").replace("\n", "\\n")


def _size_map(entries: Sequence[SizedEntry]) -> Dict[str, int]:
    return {entry.path: entry.size_bytes for entry in entries}


class BandedReportWriter:
    """Writes the report body to a text stream and tracks line and byte positions."""

    def __init__(self, out: TextIO, *, path_width: int):
        self._out = out
        self.path_width = path_width
        self.lines_written = 0
        self.bytes_written = 0

    def _line(self, text: str = "") -> int:
        self._out.write(text + "\n")
        self.lines_written += 1
        self.bytes_written += len(text.encode(ENCODING, ENCODING_ERRORS)) + 1
        return self.lines_written

    def _placeholder(self) -> int:
        offset = self.bytes_written
        self._out.write(SENTINEL + "\n")
        self.lines_written += SUMMARY_LINE_COUNT
        self.bytes_written += len(SENTINEL) + 1
        return offset

    def _row(self, rank: int, width: int, path: str, sizes: Sequence[int]) -> str:
        text = f"{rank}. ".ljust(width) + f"'{_one_line(path)}'".ljust(self.path_width)
        return text + "".join(format_size(size).ljust(SIZE_WIDTH) for size in sizes)

    def _section(
        self,
        banner: str,
        label: str,
        columns: Sequence[str],
        entries: Sequence[SizedEntry],
        thresholds: Sequence[int],
        sizes_of: Callable[[SizedEntry], Sequence[int]],
    ) -> SectionLayout:
        section = SectionLayout(label=label, start_line=self._line(banner))
        width = rank_width(len(entries))
        self._line(columns[0].ljust(width) + columns[1].ljust(self.path_width)
                   + "".join(c.ljust(SIZE_WIDTH) for c in columns[2:]))

        bands, tail = partition_bands(entries, thresholds)
        rank = 0
        for threshold, members in zip(thresholds, bands):
            start = self._line(f"Marker Start {format_size(threshold)}")
            for entry in members:
                rank += 1
                self._line(self._row(rank, width, entry.path, sizes_of(entry)))
            end = self._line(f"Marker End {format_size(threshold)}")
            section.bands.append(Band(threshold, start, end))
        for entry in tail:
            rank += 1
            self._line(self._row(rank, width, entry.path, sizes_of(entry)))
        return section

    def write(
        self,
        root_label: str,
        total_bytes: int,
        files: Sequence[SizedEntry],
        dirs_full: Sequence[SizedEntry],
        dirs_pure: Sequence[SizedEntry],
        file_divisions: Sequence[int],
        folder_divisions: Sequence[int],
    ) -> ReportLayout:
        pure_sizes = _size_map(dirs_pure)
        full_sizes = _size_map(dirs_full)

        def lookup(sizes: Dict[str, int], path: str, kind: str) -> int:
            try:
                return sizes[path]
            except KeyError:
                raise InternalConsistencyFault(f"folder '{path}' has no {kind} size") from None

        self._line(f"Sorted Output {_one_line(root_label)} [{format_size(total_bytes)}]")
        self._line()
        sentinel_offset = self._placeholder()
        self._line()

        files_section = self._section(
            FILES_BANNER, "Files", ("Rank", "File", "Size"),
            files, file_divisions,
            lambda e: (e.size_bytes,),
        )
        self._line()
        full_section = self._section(
            FOLDERS_FULL_BANNER, "Folders fullsort", ("Rank", "Folder", "Size (Full)", "Size (Pure)"),
            dirs_full, folder_divisions,
            lambda e: (e.size_bytes, lookup(pure_sizes, e.path, "pure")),
        )
        self._line()
        pure_section = self._section(
            FOLDERS_PURE_BANNER, "Folders puresort", ("Rank", "Folder", "Size (Full)", "Size (Pure)"),
            dirs_pure, folder_divisions,
            lambda e: (lookup(full_sizes, e.path, "full"), e.size_bytes),
        )
        return ReportLayout(
            files=files_section,
            folders_full=full_section,
            folders_pure=pure_section,
            line_count=self.lines_written,
            sentinel_offset=sentinel_offset,
        )


def write_report(
    out: TextIO,
    root_label: str,
    total_bytes: int,
    files: Sequence[SizedEntry],
    dirs_full: Sequence[SizedEntry],
    dirs_pure: Sequence[SizedEntry],
    file_divisions: Sequence[int] = (),
    folder_divisions: Sequence[int] = (),
    *,
    longest_path: Optional[int] = None,
) -> ReportLayout:
    """
    Write the full report body to `out` and return its layout.

    All entry sequences must already be sorted by size (largest first) and both
    division sequences must be sorted descending. `longest_path` sizes the path
    column; it defaults to the longest path among the given entries.
    """
    if longest_path is None:
        longest_path = max((len(e.path) for e in (*files, *dirs_full)), default=0)
    writer = BandedReportWriter(out, path_width=longest_path + PATH_MARGIN)
    return writer.write(root_label, total_bytes, files, dirs_full, dirs_pure, file_divisions, folder_divisions)
