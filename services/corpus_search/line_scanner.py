"""
MODULE: services.corpus_search.line_scanner
RESPONSIBILITY: Count lines of a corpus file that contain a term (case-insensitive).
ALLOWED: pathlib.
FORBIDDEN: Network access, writes.
ERRORS: ScanOverflowError, OSError.

Lines are read with a fixed ceiling so one pathological line cannot pull an
entire file into memory.
"""

from __future__ import annotations

from pathlib import Path

from core.exceptions import ScanOverflowError


def count_matching_lines(path: Path, term: str, max_line_bytes: int) -> int:
    """
    Count lines containing ``term``, ignoring case.

    Args:
        path: Corpus file
        term: Substring to look for
        max_line_bytes: Longest accepted line, newline excluded

    Returns:
        Number of matching lines

    Raises:
        ScanOverflowError: A line is longer than ``max_line_bytes``
        OSError: The file cannot be read
    """
    needle = term.lower()
    count = 0
    with Path(path).open("rb") as file:
        while True:
            # room for a full line plus a \r\n terminator
            raw = file.readline(max_line_bytes + 2)
            if not raw:
                break
            content = raw.rstrip(b"\r\n")
            if len(content) > max_line_bytes:
                raise ScanOverflowError(
                    f"line longer than {max_line_bytes} bytes in {path}",
                    file_path=str(path),
                    limit=max_line_bytes,
                )
            line = content.decode("utf-8", errors="replace")
            if needle in line.lower():
                count += 1
    return count
