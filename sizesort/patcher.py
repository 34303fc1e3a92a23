"""
Splice the summary block into an already written report.

The report is streamed into a temp file that lives next to it (same
filesystem), with the first sentinel replaced by the summary, and the temp
file is then moved over the report with os.replace. The original report is
only ever replaced by a complete copy.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .errors import PatchFailure, SentinelNotFound
from .report import ENCODING, ENCODING_ERRORS, SENTINEL


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
TEMP_PREFIX = "~sizesort-"


@dataclass(frozen=True)
class PatchResult:
    output_path: Path
    bytes_written: int


def _copy_until_sentinel(src: BinaryIO, dst: BinaryIO, sentinel: bytes, start_offset: int) -> Optional[bytes]:
    """
    Copy `src` to `dst` up to (not including) the first `sentinel` found at or
    after `start_offset`. Returns the bytes read past the sentinel, or None
    when the end of `src` is reached without finding it.
    """
    consumed = 0
    while True:
        chunk = src.read(CHUNK_SIZE)
        if not chunk:
            return None
        idx = chunk.find(sentinel, max(0, start_offset - consumed))
        if idx >= 0:
            dst.write(chunk[:idx])
            return chunk[idx + len(sentinel):]
        dst.write(chunk)
        consumed += len(chunk)


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove temp file '%s': %s", temp_path, exc)


def patch_header(
    output_path: Union[str, os.PathLike],
    summary: str,
    *,
    sentinel: str = SENTINEL,
    start_offset: int = 0,
) -> PatchResult:
    """
    Replace the first `sentinel` at or after byte `start_offset` of
    `output_path` with `summary`, atomically.

    Raises SentinelNotFound when the file has no sentinel (the report is left
    as written), or PatchFailure for I/O errors. When the final replace fails
    the temp file is kept, since it is then the only patched copy.
    """
    output_path = Path(output_path).absolute()
    marker = sentinel.encode(ENCODING)
    payload = summary.encode(ENCODING, ENCODING_ERRORS)

    try:
        fd, temp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".tmp", dir=output_path.parent)
    except OSError as exc:
        raise PatchFailure(f"could not create temp file: {exc}", stage="create-temp", output_path=output_path) from exc
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "wb") as dst, open(output_path, "rb") as src:
            rest = _copy_until_sentinel(src, dst, marker, start_offset)
            if rest is None:
                raise SentinelNotFound(
                    f"no '{sentinel}' placeholder found in report",
                    stage="scan",
                    output_path=output_path,
                )
            dst.write(payload)
            dst.write(rest)
            shutil.copyfileobj(src, dst, CHUNK_SIZE)
            bytes_written = dst.tell()
    except SentinelNotFound:
        _discard(temp_path)
        raise
    except OSError as exc:
        _discard(temp_path)
        raise PatchFailure(f"copy into temp file failed: {exc}", stage="copy", output_path=output_path) from exc

    try:
        shutil.copymode(output_path, temp_path)
    except OSError as exc:
        logger.debug("Could not copy file mode onto '%s': %s", temp_path, exc)

    try:
        os.replace(temp_path, output_path)
    except OSError as exc:
        raise PatchFailure(
            f"could not replace report with patched copy: {exc}",
            stage="replace",
            output_path=output_path,
            temp_path=temp_path,
        ) from exc

    logger.debug("Patched summary into '%s' (%d bytes)", output_path, bytes_written)
    return PatchResult(output_path=output_path, bytes_written=bytes_written)
