"""
Directory walker that totals file and folder sizes.

A single post-order pass produces three collections:
  - files:      one entry per non-directory child
  - dirs_full:  one entry per directory, size including all descendants
  - dirs_pure:  one entry per directory, size of its direct files only

Filesystem errors never abort the walk. They are logged, kept as ScanIssue
records, and the affected node counts as 0 bytes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union


logger = logging.getLogger(__name__)

# (files_seen, dirs_seen)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class SizedEntry:
    path: str
    size_bytes: int


@dataclass(frozen=True)
class ScanIssue:
    path: str
    operation: str  # "scandir", "stat" or "loop"
    message: str


@dataclass
class ScanResult:
    root: str
    files: List[SizedEntry] = field(default_factory=list)
    dirs_full: List[SizedEntry] = field(default_factory=list)
    dirs_pure: List[SizedEntry] = field(default_factory=list)
    issues: List[ScanIssue] = field(default_factory=list)
    longest_path: int = 0

    @property
    def total_bytes(self) -> int:
        """Inclusive size of the root (always the last directory recorded)."""
        return self.dirs_full[-1].size_bytes if self.dirs_full else 0


def sort_by_size(entries: Sequence[SizedEntry]) -> List[SizedEntry]:
    """Largest first; equal sizes keep walk order."""
    return sorted(entries, key=lambda entry: entry.size_bytes, reverse=True)


def _identity(path: str) -> Optional[Tuple[int, int]]:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_dev, st.st_ino


class TreeAggregator:
    """
    Post-order walker. Children are visited in name order so two walks over an
    unchanged tree record entries in the same order.
    """

    def __init__(self, *, progress: Optional[ProgressCallback] = None, follow_symlinks: bool = False):
        self.progress = progress
        self.follow_symlinks = follow_symlinks
        self._result: Optional[ScanResult] = None

    def aggregate(self, root: Union[str, os.PathLike]) -> ScanResult:
        root_path = str(Path(root).resolve())
        self._result = ScanResult(root=root_path)
        try:
            self._walk(root_path, frozenset())
            return self._result
        finally:
            self._result = None

    # ---------------------------------------------------------------- walk

    def _walk(self, path: str, ancestors: FrozenSet[Tuple[int, int]]) -> int:
        ident = _identity(path)
        if ident is not None and ident in ancestors:
            self._issue(path, "loop", "directory already open higher up this path; not descending")
            self._record_dir(path, 0, 0)
            return 0
        if ident is not None:
            ancestors = ancestors | {ident}

        try:
            with os.scandir(path) as it:
                children = sorted(it, key=lambda entry: entry.name)
        except OSError as exc:
            self._issue(path, "scandir", exc)
            self._record_dir(path, 0, 0)
            return 0

        full = 0
        pure = 0
        for entry in children:
            if self._is_dir(entry):
                full += self._walk(entry.path, ancestors)
                continue
            size = self._file_size(entry)
            full += size
            pure += size
            self._record_file(entry.path, size)

        self._record_dir(path, full, pure)
        return full

    def _is_dir(self, entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=self.follow_symlinks)
        except OSError:
            return False

    def _file_size(self, entry: os.DirEntry) -> int:
        try:
            return int(entry.stat(follow_symlinks=self.follow_symlinks).st_size)
        except OSError as exc:
            self._issue(entry.path, "stat", exc)
            return 0

    # ------------------------------------------------------------- records

    def _issue(self, path: str, operation: str, error: Union[OSError, str]) -> None:
        message = str(error)
        logger.warning("%s error at '%s': %s", operation, path, message)
        self._result.issues.append(ScanIssue(path=path, operation=operation, message=message))

    def _record_file(self, path: str, size: int) -> None:
        result = self._result
        result.files.append(SizedEntry(path, size))
        result.longest_path = max(result.longest_path, len(path))
        self._notify()

    def _record_dir(self, path: str, full: int, pure: int) -> None:
        result = self._result
        result.dirs_full.append(SizedEntry(path, full))
        result.dirs_pure.append(SizedEntry(path, pure))
        result.longest_path = max(result.longest_path, len(path))
        self._notify()

    def _notify(self) -> None:
        if self.progress is not None:
            self.progress(len(self._result.files), len(self._result.dirs_full))


def aggregate(
    root: Union[str, os.PathLike],
    *,
    progress: Optional[ProgressCallback] = None,
    follow_symlinks: bool = False,
) -> ScanResult:
    """Walk `root` and return unsorted file, full-folder and pure-folder sizes."""
    return TreeAggregator(progress=progress, follow_symlinks=follow_symlinks).aggregate(root)
