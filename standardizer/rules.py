"""
Deterministic standardization rules.

This file exists to make the target format and file selection explicit.
"""

TARGET_ENCODING = "utf-8"  # UTF-8 without BOM
LINE_TERMINATOR = "\r\n"

# Prefix read for BOM detection and the binary heuristic
SAMPLE_SIZE = 8192

TARGET_EXTENSIONS = (".h", ".hpp", ".cpp", ".cc", ".cxx", ".cs")

# Generated/temporary/VCS directories, matched case-insensitively per path segment
EXCLUDED_DIR_NAMES = (
    "Intermediate",
    "Binaries",
    "Saved",
    "DerivedDataCache",
    ".git",
    ".vs",
)
