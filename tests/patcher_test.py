from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import pytest

from sizesort import patcher
from sizesort.errors import InternalConsistencyFault, PatchFailure, SentinelNotFound
from sizesort.patcher import CHUNK_SIZE, TEMP_PREFIX, patch_header


def _temp_files(directory: Path):
    return sorted(p.name for p in directory.iterdir() if p.name.startswith(TEMP_PREFIX))


def test_patch_replaces_sentinel_and_keeps_surroundings(tmp_path: Path):
    report = tmp_path / "report.txt"
    original = b"Sorted Output /x [1 B]\n\n#\n\n==== FILES START====\n"
    report.write_bytes(original)
    summary = "Files: L7 | \nFolders fullsort: L9 | \nFolders puresort: L11 | "

    result = patch_header(report, summary)

    patched = report.read_bytes()
    pos = original.index(b"#")
    encoded = summary.encode("utf-8")
    assert len(patched) == len(original) - 1 + len(encoded)
    assert patched[:pos] == original[:pos]
    assert patched[pos:pos + len(encoded)] == encoded
    assert patched[pos + len(encoded):] == original[pos + 1:]
    assert result.bytes_written == len(patched)
    assert result.output_path == report.absolute()
    assert _temp_files(tmp_path) == []


def test_patch_only_first_sentinel(tmp_path: Path):
    report = tmp_path / "r.txt"
    report.write_bytes(b"a#b#c")
    patch_header(report, "X")
    assert report.read_bytes() == b"aXb#c"


def test_patch_honours_start_offset(tmp_path: Path):
    report = tmp_path / "r.txt"
    report.write_bytes(b"root /data/#1\n\n#\nbody\n")
    patch_header(report, "SUMMARY", start_offset=15)
    assert report.read_bytes() == b"root /data/#1\n\nSUMMARY\nbody\n"


def test_patch_sentinel_past_first_chunk(tmp_path: Path):
    report = tmp_path / "big.txt"
    head = b"x" * (CHUNK_SIZE + 10)
    tail = b"y" * (CHUNK_SIZE * 2 + 3)
    report.write_bytes(head + b"#" + tail)

    patch_header(report, "Z" * 5)
    assert report.read_bytes() == head + b"ZZZZZ" + tail


def test_patch_start_offset_spanning_chunks(tmp_path: Path):
    report = tmp_path / "big.txt"
    data = b"#" + b"x" * (CHUNK_SIZE + 5) + b"#" + b"end"
    report.write_bytes(data)
    patch_header(report, "S", start_offset=1)
    assert report.read_bytes() == b"#" + b"x" * (CHUNK_SIZE + 5) + b"Send"


def test_missing_sentinel_leaves_report_and_removes_temp(tmp_path: Path):
    report = tmp_path / "r.txt"
    report.write_bytes(b"no placeholder here\n")

    with pytest.raises(SentinelNotFound) as info:
        patch_header(report, "S")

    assert isinstance(info.value, PatchFailure)
    assert isinstance(info.value, InternalConsistencyFault)
    assert info.value.stage == "scan"
    assert report.read_bytes() == b"no placeholder here\n"
    assert _temp_files(tmp_path) == []


def test_sentinel_before_start_offset_is_ignored(tmp_path: Path):
    report = tmp_path / "r.txt"
    report.write_bytes(b"#abc")
    with pytest.raises(SentinelNotFound):
        patch_header(report, "S", start_offset=1)
    assert report.read_bytes() == b"#abc"


def test_temp_creation_failure(tmp_path: Path, monkeypatch):
    report = tmp_path / "r.txt"
    report.write_bytes(b"#")

    def boom(*args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(patcher.tempfile, "mkstemp", boom)
    with pytest.raises(PatchFailure) as info:
        patch_header(report, "S")
    assert info.value.stage == "create-temp"
    assert info.value.temp_path is None
    assert report.read_bytes() == b"#"


def test_replace_failure_keeps_temp_with_patched_report(tmp_path: Path, monkeypatch):
    report = tmp_path / "r.txt"
    report.write_bytes(b"head\n#\ntail\n")

    def boom(src, dst):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(patcher.os, "replace", boom)
    with pytest.raises(PatchFailure) as info:
        patch_header(report, "SUM")

    err = info.value
    assert err.stage == "replace"
    assert err.output_path == report.absolute()
    assert err.temp_path is not None and err.temp_path.exists()
    assert err.temp_path.parent == tmp_path
    assert err.temp_path.read_bytes() == b"head\nSUM\ntail\n"
    assert report.read_bytes() == b"head\n#\ntail\n"
    assert str(err.temp_path) in str(err) and str(report.absolute()) in str(err)


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_patch_keeps_file_mode(tmp_path: Path):
    report = tmp_path / "r.txt"
    report.write_bytes(b"#")
    os.chmod(report, 0o644)
    patch_header(report, "S")
    assert stat.S_IMODE(os.stat(report).st_mode) == 0o644


def test_missing_sentinel_with_stuck_temp_file_logs_warning(tmp_path: Path, monkeypatch, caplog):
    report = tmp_path / "r.txt"
    report.write_bytes(b"no placeholder\n")

    def refuse(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(patcher.Path, "unlink", refuse)
    with caplog.at_level(logging.WARNING, logger="sizesort.patcher"):
        with pytest.raises(SentinelNotFound):
            patch_header(report, "S")
    monkeypatch.undo()

    leftovers = _temp_files(tmp_path)
    assert len(leftovers) == 1
    assert "Could not remove temp file" in caplog.text
    assert leftovers[0] in caplog.text
    assert report.read_bytes() == b"no placeholder\n"
