"""
End-to-end report generation: validate, scan, sort, write, patch.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from .errors import ConfigError, InvalidDivision, PatchFailure
from .patcher import patch_header
from .report import ENCODING, ENCODING_ERRORS, ReportLayout, render_summary, write_report
from .scanner import ProgressCallback, ScanResult, aggregate, sort_by_size
from .size_utils import parse_divisions, sort_divisions


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class ReportConfig:
    root: Path
    output: Path
    file_divisions: Tuple[int, ...] = ()
    folder_divisions: Tuple[int, ...] = ()
    follow_symlinks: bool = False


@dataclass
class ReportOutcome:
    output_path: Path
    scan: ScanResult
    layout: ReportLayout
    patch_error: Optional[PatchFailure] = field(default=None)

    @property
    def patched(self) -> bool:
        return self.patch_error is None


def _parse(label: str, text: str) -> Tuple[int, ...]:
    try:
        return tuple(sort_divisions(parse_divisions(text or "")))
    except InvalidDivision as exc:
        raise InvalidDivision(exc.token, f"{exc.reason} (in {label} divisions)") from exc


def build_config(
    root: PathLike,
    output: PathLike,
    file_divisions: str = "",
    folder_divisions: str = "",
    *,
    follow_symlinks: bool = False,
) -> ReportConfig:
    """
    Validate user input and return a ReportConfig.

    Raises ConfigError (exit codes: 1 root missing, 2 root not a directory,
    3 bad division, 4 bad output path) before anything touches the disk.
    """
    # Path("") is the current directory; a blank root is a missing root.
    if not str(root).strip():
        raise ConfigError("no folder given", exit_code=1)
    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise ConfigError(f"folder does not exist: {root}", exit_code=1)
    if not root_path.is_dir():
        raise ConfigError(f"path is not a directory: {root}", exit_code=2)

    output_path = Path(output).expanduser().absolute()
    if not str(output).strip() or output_path.is_dir():
        raise ConfigError(f"output is not a file path: {output}", exit_code=4)
    if not output_path.parent.is_dir():
        raise ConfigError(f"output directory does not exist: {output_path.parent}", exit_code=4)

    files = _parse("file", file_divisions)
    folders = _parse("folder", folder_divisions)

    return ReportConfig(
        root=root_path.resolve(),
        output=output_path,
        file_divisions=files,
        folder_divisions=folders,
        follow_symlinks=follow_symlinks,
    )


def generate_report(config: ReportConfig, *, progress: Optional[ProgressCallback] = None) -> ReportOutcome:
    """
    Run the whole pipeline for `config`.

    Traversal problems end up in outcome.scan.issues. A failed patch leaves the
    unpatched report in place and is returned as outcome.patch_error.
    """
    started = time.time()
    scan = aggregate(config.root, progress=progress, follow_symlinks=config.follow_symlinks)
    logger.debug(
        "Scanned %d files, %d directories under '%s' in %.2fs (%d issues)",
        len(scan.files), len(scan.dirs_full), scan.root, time.time() - started, len(scan.issues),
    )

    files = sort_by_size(scan.files)
    dirs_full = sort_by_size(scan.dirs_full)
    dirs_pure = sort_by_size(scan.dirs_pure)

    with open(config.output, "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline="\n") as fh:
        layout = write_report(
            fh,
            scan.root,
            scan.total_bytes,
            files,
            dirs_full,
            dirs_pure,
            config.file_divisions,
            config.folder_divisions,
            longest_path=scan.longest_path,
        )
    logger.debug("Wrote %d lines to '%s'", layout.line_count, config.output)

    outcome = ReportOutcome(output_path=config.output, scan=scan, layout=layout)
    try:
        patch_header(config.output, render_summary(layout), start_offset=layout.sentinel_offset)
    except PatchFailure as exc:
        logger.error("Summary patch failed: %s", exc)
        outcome.patch_error = exc
    return outcome
