import os
import stat

import pytest

from standardizer import pipeline
from standardizer.models import FileOutcome, OutcomeKind, RunSummary
from standardizer.pipeline import (
    DiscoveryError,
    discover_files,
    iter_outcomes,
    process_file,
)


def _summarize(paths):
    summary = RunSummary()
    for outcome in iter_outcomes(paths):
        summary = summary.record(outcome)
    return summary


def _scenario(root):
    (root / "a.cpp").write_bytes(b"\xef\xbb\xbfint a;\r\nint b;\r\n")
    (root / "b.h").write_bytes(b"#pragma once\r\n")
    (root / "c.cs").write_bytes(b"class C {}\nclass D {}\n")
    (root / "d.cpp").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    ro = root / "e.cpp"
    ro.write_bytes(b"int e;\n")
    os.chmod(ro, stat.S_IREAD)


def test_end_to_end_scenario(tmp_path):
    _scenario(tmp_path)
    before_b = (tmp_path / "b.h").read_bytes()
    before_d = (tmp_path / "d.cpp").read_bytes()

    outcomes = {os.path.basename(o.path): o for o in iter_outcomes(discover_files(tmp_path))}

    assert outcomes["a.cpp"].kind == OutcomeKind.CONVERTED
    assert outcomes["b.h"].kind == OutcomeKind.ALREADY_STANDARD
    assert outcomes["c.cs"].kind == OutcomeKind.CONVERTED
    assert outcomes["d.cpp"].kind == OutcomeKind.SKIPPED_BINARY
    assert outcomes["e.cpp"].kind == OutcomeKind.SKIPPED_UNWRITABLE
    assert outcomes["e.cpp"].message == "read-only"

    assert (tmp_path / "a.cpp").read_bytes() == b"int a;\r\nint b;\r\n"
    assert (tmp_path / "b.h").read_bytes() == before_b
    assert (tmp_path / "c.cs").read_bytes() == b"class C {}\r\nclass D {}\r\n"
    assert (tmp_path / "d.cpp").read_bytes() == before_d
    assert (tmp_path / "e.cpp").read_bytes() == b"int e;\n"


def test_end_to_end_summary(tmp_path):
    _scenario(tmp_path)
    summary = _summarize(discover_files(tmp_path))
    assert summary == RunSummary(
        converted=2, already_standard=1, skipped_binary=1, skipped_unwritable=1, errors=0
    )
    assert summary.total == 5


def test_second_run_converts_nothing(tmp_path):
    _scenario(tmp_path)
    (tmp_path / "f.hpp").write_bytes(b"\xfe\xff" + "x\ry".encode("utf-16-be"))
    _summarize(discover_files(tmp_path))

    again = _summarize(discover_files(tmp_path))
    assert again.converted == 0
    assert again.already_standard == 4


def test_utf16_round_trip(tmp_path):
    path = tmp_path / "wide.h"
    path.write_bytes(b"\xff\xfe" + "foo\nbar\n".encode("utf-16-le"))

    assert process_file(path).kind == OutcomeKind.CONVERTED
    assert path.read_bytes() == b"foo\r\nbar\r\n"


def test_already_standard_file_keeps_mtime(tmp_path):
    path = tmp_path / "ok.cc"
    path.write_bytes(b"int x;\r\n")
    os.utime(path, (1_000_000, 1_000_000))

    assert process_file(path).kind == OutcomeKind.ALREADY_STANDARD
    assert os.stat(path).st_mtime == 1_000_000


def test_invalid_utf8_is_an_error_and_untouched(tmp_path):
    path = tmp_path / "latin.cxx"
    raw = "// Montréal\nint x;\n".encode("latin-1")
    path.write_bytes(raw)

    outcome = process_file(path)
    assert outcome.kind == OutcomeKind.ERROR
    assert "not valid UTF-8" in outcome.message
    assert path.read_bytes() == raw


def test_access_denied(tmp_path, monkeypatch):
    path = tmp_path / "locked.cpp"
    path.write_bytes(b"int x;\n")

    def deny(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(pipeline, "read_sample", deny)
    outcome = process_file(path)
    assert outcome == FileOutcome(
        path=str(path), kind=OutcomeKind.SKIPPED_UNWRITABLE, message="access denied"
    )
    assert path.read_bytes() == b"int x;\n"


def test_missing_file_is_an_error(tmp_path):
    outcome = process_file(tmp_path / "gone.cpp")
    assert outcome.kind == OutcomeKind.ERROR
    assert outcome.message


def test_discover_files_filters_and_prunes(tmp_path):
    for rel in [
        "src/main.CPP",
        "src/util.h",
        "src/readme.txt",
        "src/noext",
        "Intermediate/gen.cpp",
        "src/saved/cache.h",
        "src/.GIT/hook.cs",
        "src/Savedata/keep.cs",
    ]:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"x\r\n")

    found = [p.relative_to(tmp_path).as_posix() for p in discover_files(tmp_path)]
    # files of a directory come before its subdirectories
    assert found == ["src/main.CPP", "src/util.h", "src/Savedata/keep.cs"]


def test_discover_files_missing_root(tmp_path):
    with pytest.raises(DiscoveryError):
        discover_files(tmp_path / "nope")


def test_discover_files_root_under_excluded_dir(tmp_path):
    root = tmp_path / "Proj" / "Saved" / "Source"
    root.mkdir(parents=True)
    (root / "gen.cpp").write_bytes(b"int x;\n")

    assert discover_files(root) == []
