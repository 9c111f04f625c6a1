"""Console rendering of per-file outcomes and the run summary."""

from __future__ import annotations

import sys
from typing import Sequence, TextIO

from .models import FileOutcome, OutcomeKind, RunSummary

_LABELS = {
    OutcomeKind.CONVERTED: "Standardized",
    OutcomeKind.ALREADY_STANDARD: "Already standard",
    OutcomeKind.SKIPPED_BINARY: "Skipped (binary-like)",
    OutcomeKind.ERROR: "Error",
}


def outcome_label(outcome: FileOutcome) -> str:
    if outcome.kind == OutcomeKind.SKIPPED_UNWRITABLE:
        return f"Skipped ({outcome.message or 'read-only'})"
    return _LABELS[outcome.kind]


def format_outcome(outcome: FileOutcome) -> str:
    line = f"  -> {outcome_label(outcome)}: {outcome.path}"
    if outcome.kind == OutcomeKind.ERROR and outcome.message:
        line += f"\n     {outcome.message}"
    return line


def format_summary(summary: RunSummary) -> str:
    return "\n".join([
        "Done.",
        f"Converted: {summary.converted}",
        f"Already standard: {summary.already_standard}",
        f"Skipped (binary-like): {summary.skipped_binary}",
        f"Skipped (read-only/access denied): {summary.skipped_unwritable}",
        f"Errors: {summary.errors}",
    ])


def print_banner(extensions: Sequence[str], out: TextIO = sys.stdout) -> None:
    print("File Format Standardization Utility", file=out)
    print(f"Converting {', '.join(extensions)} files to:", file=out)
    print("- Encoding: UTF-8 (without BOM)", file=out)
    print("- Line Endings: Windows (CRLF)", file=out)
    print(file=out)
