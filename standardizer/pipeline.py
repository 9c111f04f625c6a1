"""
Per-file driver: reads, classifies and rewrites files on disk.

Sampling, the full read and the rewrite each open and close their own
handle. Every per-file failure ends up as a FileOutcome; only directory
enumeration can raise out of this module.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .models import FileOutcome, OutcomeKind
from .normalize import (
    decode_lines,
    describe_decode_failure,
    detect_bom,
    encode_canonical,
    looks_binary,
    needs_rewrite,
)
from .rules import EXCLUDED_DIR_NAMES, SAMPLE_SIZE, TARGET_EXTENSIONS

logger = logging.getLogger(__name__)


class DiscoveryError(Exception):
    """The target directory could not be enumerated."""


def _raise_walk_error(exc: OSError) -> None:
    raise DiscoveryError(f"cannot enumerate {exc.filename}: {exc.strerror}") from exc


def discover_files(
    root: Path,
    extensions: Sequence[str] = TARGET_EXTENSIONS,
    excluded_dirs: Sequence[str] = EXCLUDED_DIR_NAMES,
) -> List[Path]:
    """Recursively list target files under ``root`` in a stable order."""
    wanted = {ext.lower() for ext in extensions}
    excluded = {name.lower() for name in excluded_dirs}

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        # the root's own ancestors count too: a root under Saved/ yields nothing
        if any(part.lower() in excluded for part in Path(dirpath).parts):
            dirnames[:] = []
            continue
        # prune in place so excluded trees are never walked
        dirnames[:] = sorted(d for d in dirnames if d.lower() not in excluded)
        for name in sorted(filenames):
            if os.path.splitext(name)[1].lower() in wanted:
                found.append(Path(dirpath) / name)
    return found


def is_read_only(path: Path) -> bool:
    return not os.stat(path).st_mode & stat.S_IWRITE


def read_sample(path: Path, size: int = SAMPLE_SIZE) -> bytes:
    with open(path, "rb") as fh:
        return fh.read(size)


def read_all(path: Path) -> bytes:
    with open(path, "rb") as fh:
        return fh.read()


def rewrite_file(path: Path, lines: List[str]) -> None:
    """Overwrite ``path`` in place with UTF-8 (no BOM) and CRLF after every line.

    This is a direct overwrite, not a temp-file rename: an interrupted write
    leaves the file truncated.
    """
    data = encode_canonical(lines)
    with open(path, "wb") as fh:
        fh.write(data)


def _convert(path: Path) -> OutcomeKind:
    if is_read_only(path):
        return OutcomeKind.SKIPPED_UNWRITABLE

    sample = read_sample(path)
    bom = detect_bom(sample)
    logger.debug("%s: sampled %d bytes, bom=%s", path, len(sample), bom.value)
    if looks_binary(sample, bom):
        return OutcomeKind.SKIPPED_BINARY

    raw = read_all(path)
    if not needs_rewrite(raw, bom):
        return OutcomeKind.ALREADY_STANDARD

    lines = decode_lines(raw, bom)
    rewrite_file(path, lines)
    return OutcomeKind.CONVERTED


def process_file(path: Path) -> FileOutcome:
    """Standardize one file and classify what happened."""
    try:
        kind = _convert(path)
    except PermissionError:
        logger.debug("%s: access denied", path)
        return FileOutcome(
            path=str(path), kind=OutcomeKind.SKIPPED_UNWRITABLE, message="access denied"
        )
    except UnicodeDecodeError as e:
        message = describe_decode_failure(e)
        logger.warning("%s: %s", path, message)
        return FileOutcome(path=str(path), kind=OutcomeKind.ERROR, message=message)
    except OSError as e:
        logger.warning("%s: %s", path, e)
        return FileOutcome(path=str(path), kind=OutcomeKind.ERROR, message=str(e))

    if kind == OutcomeKind.SKIPPED_UNWRITABLE:
        return FileOutcome(path=str(path), kind=kind, message="read-only")
    return FileOutcome(path=str(path), kind=kind)


def iter_outcomes(paths: Iterable[Path]) -> Iterator[FileOutcome]:
    """Process ``paths`` strictly one at a time, in order."""
    for path in paths:
        yield process_file(path)
