"""
MODULE: services.corpus_search.corpus_walker
RESPONSIBILITY: Discover consolidated files under the corpus root.
ALLOWED: os, pathlib, logging.
FORBIDDEN: Reading file contents.
ERRORS: None (walk errors are logged and skipped).
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator
import os

from loguru import logger

from config import CONSOLIDATED_FILE_NAME


def iter_corpus_files(corpus_root: Path, file_name: str = CONSOLIDATED_FILE_NAME) -> Iterator[Path]:
    """
    Lazily yield every consolidated file below ``corpus_root``.

    Unreadable directories are skipped, so a damaged subtree contributes no
    files instead of aborting discovery. A missing root yields nothing.
    """

    def _on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable corpus entry {getattr(error, 'filename', '')}: {error}")

    for directory, _, files in os.walk(corpus_root, onerror=_on_error):
        if file_name in files:
            path = Path(directory) / file_name
            if path.is_file():
                yield path
