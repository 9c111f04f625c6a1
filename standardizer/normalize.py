"""
Core detection and normalization logic.

Responsibilities:
- byte-order-mark detection
- binary-content heuristic
- line-ending classification
- encoding resolution
- re-encoding to UTF-8 (no BOM) with CRLF after every line

Everything here works on in-memory buffers; file I/O lives in pipeline.py.
"""

from __future__ import annotations

import re
from typing import List, NamedTuple, Optional, Tuple

from charset_normalizer import from_bytes

from .models import BomCategory, OutcomeKind
from .rules import LINE_TERMINATOR, SAMPLE_SIZE, TARGET_ENCODING


# Ordered longest-first so UTF-32 is checked before UTF-16
# (the UTF-32-LE BOM starts with the UTF-16-LE BOM)
_BOMS: Tuple[Tuple[bytes, BomCategory], ...] = (
    (b"\x00\x00\xfe\xff", BomCategory.UTF32_BE),
    (b"\xff\xfe\x00\x00", BomCategory.UTF32_LE),
    (b"\xef\xbb\xbf", BomCategory.UTF8),
    (b"\xfe\xff", BomCategory.UTF16_BE),
    (b"\xff\xfe", BomCategory.UTF16_LE),
)

_WIDE_BOMS = frozenset({
    BomCategory.UTF16_LE,
    BomCategory.UTF16_BE,
    BomCategory.UTF32_LE,
    BomCategory.UTF32_BE,
})

# Only CR, LF and CRLF terminate lines; other Unicode separators are content.
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Decoding(NamedTuple):
    codec: str
    errors: str


def detect_bom(data: bytes) -> BomCategory:
    """Classify the start of ``data`` by its byte-order-mark."""
    for marker, category in _BOMS:
        if data.startswith(marker):
            return category
    return BomCategory.NONE


def looks_binary(sample: bytes, bom: BomCategory) -> bool:
    """
    NUL bytes in the sampled prefix suggest binary content.

    UTF-16/32 text legitimately contains zero bytes, so a wide BOM always
    means text. Only the first SAMPLE_SIZE bytes are scanned.
    """
    if bom in _WIDE_BOMS:
        return False
    return b"\x00" in sample[:SAMPLE_SIZE]


def has_non_crlf_line_endings(text: str) -> bool:
    """True if ``text`` holds a bare LF or a lone CR anywhere."""
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == "\r":
            if i + 1 < n and text[i + 1] == "\n":
                i += 2
                continue
            return True
        if c == "\n":
            return True
        i += 1
    return False


def resolve_decoding(bom: BomCategory) -> Decoding:
    """
    Pick the decoding for a full-file read.

    BOM-less files are assumed UTF-8 and invalid bytes are a hard failure.
    The BOM-aware codecs consume the mark so it is never re-emitted.
    """
    if bom == BomCategory.UTF8:
        return Decoding("utf-8-sig", "replace")
    if bom in (BomCategory.UTF16_LE, BomCategory.UTF16_BE):
        return Decoding("utf-16", "replace")
    if bom in (BomCategory.UTF32_LE, BomCategory.UTF32_BE):
        return Decoding("utf-32", "replace")
    return Decoding("utf-8", "strict")


def decode_for_inspection(raw: bytes, bom: BomCategory) -> str:
    # Line-ending checks never fail on bad bytes; the strict read comes later.
    return raw.decode(resolve_decoding(bom).codec, errors="replace")


def split_lines(text: str) -> List[str]:
    lines = _LINE_BREAK.split(text)
    # A trailing terminator ends the last line, it doesn't start a new one
    if lines[-1] == "":
        lines.pop()
    return lines


def decode_lines(raw: bytes, bom: BomCategory) -> List[str]:
    """Decode ``raw`` with the resolved encoding and split it into lines.

    Raises UnicodeDecodeError for invalid UTF-8 in a BOM-less buffer.
    """
    decoding = resolve_decoding(bom)
    return split_lines(raw.decode(decoding.codec, errors=decoding.errors))


def encode_canonical(lines: List[str]) -> bytes:
    return "".join(line + LINE_TERMINATOR for line in lines).encode(TARGET_ENCODING)


def needs_rewrite(raw: bytes, bom: BomCategory) -> bool:
    if bom != BomCategory.NONE:
        return True
    return has_non_crlf_line_endings(decode_for_inspection(raw, bom))


def standardize_buffer(raw: bytes, bom: BomCategory) -> Optional[bytes]:
    """
    Return the canonical bytes for ``raw``, or None when it is already standard.

    The caller has already ruled out binary content.
    """
    if not needs_rewrite(raw, bom):
        return None
    return encode_canonical(decode_lines(raw, bom))


def standardize_bytes(raw: bytes) -> Tuple[BomCategory, OutcomeKind, Optional[bytes]]:
    """
    Run the whole pipeline over an in-memory file.

    Returns the detected BOM, the outcome and the canonical bytes (only for
    CONVERTED). Decode failures propagate as UnicodeDecodeError.
    """
    bom = detect_bom(raw[:SAMPLE_SIZE])
    if looks_binary(raw[:SAMPLE_SIZE], bom):
        return bom, OutcomeKind.SKIPPED_BINARY, None

    converted = standardize_buffer(raw, bom)
    if converted is None:
        return bom, OutcomeKind.ALREADY_STANDARD, None
    return bom, OutcomeKind.CONVERTED, converted


def describe_decode_failure(exc: UnicodeDecodeError) -> str:
    """Error text for a failed decode, with a best guess at the real encoding."""
    message = f"not valid UTF-8: {exc.reason} at byte {exc.start}"
    match = from_bytes(bytes(exc.object)).best()
    if match is not None and match.encoding not in ("utf_8", "ascii"):
        # charset-normalizer's guess is advisory only; we never decode with it
        message += f" (looks like {match.encoding})"
    return message
