from __future__ import annotations

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BomCategory(str, Enum):
    NONE = "none"
    UTF8 = "utf-8"
    UTF16_LE = "utf-16-le"
    UTF16_BE = "utf-16-be"
    UTF32_LE = "utf-32-le"
    UTF32_BE = "utf-32-be"


class OutcomeKind(str, Enum):
    CONVERTED = "converted"
    ALREADY_STANDARD = "already_standard"
    SKIPPED_BINARY = "skipped_binary"
    SKIPPED_UNWRITABLE = "skipped_unwritable"
    ERROR = "error"


class FileOutcome(BaseModel):
    path: str
    kind: OutcomeKind
    # error text for ERROR, "read-only" / "access denied" for SKIPPED_UNWRITABLE
    message: Optional[str] = None


class RunSummary(BaseModel):
    converted: int = 0
    already_standard: int = 0
    skipped_binary: int = 0
    skipped_unwritable: int = 0
    errors: int = 0

    def record(self, outcome: FileOutcome) -> "RunSummary":
        """Return a new summary with ``outcome`` counted."""
        field = _SUMMARY_FIELDS[outcome.kind]
        return self.model_copy(update={field: getattr(self, field) + 1})

    @property
    def total(self) -> int:
        return (
            self.converted
            + self.already_standard
            + self.skipped_binary
            + self.skipped_unwritable
            + self.errors
        )


_SUMMARY_FIELDS = {
    OutcomeKind.CONVERTED: "converted",
    OutcomeKind.ALREADY_STANDARD: "already_standard",
    OutcomeKind.SKIPPED_BINARY: "skipped_binary",
    OutcomeKind.SKIPPED_UNWRITABLE: "skipped_unwritable",
    OutcomeKind.ERROR: "errors",
}


class StandardizedSource(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8")
    line_terminator: str = Field(default="crlf")
    content_b64: str


class StandardizeResponse(BaseModel):
    outcome: OutcomeKind
    bom: BomCategory
    standardized: Optional[StandardizedSource] = Field(default=None, examples=[None])


class HealthResponse(BaseModel):
    ok: bool = True
