"""
MODULE: services.corpus_search.search_pipeline
RESPONSIBILITY: Parallel term search over the corpus with winner-take-all selection.
ALLOWED: corpus_walker, line_scanner, Channel, ThreadPoolExecutor, logging.
FORBIDDEN: Corpus writes, network access.
ERRORS: None (per-file errors count as zero matches).

W workers scan corpus files and report a SearchHit for every file with at
least one matching line. The caller's thread folds the hits with a strict
greater-than comparison, so among equal counts the first hit to arrive wins;
arrival order depends on thread scheduling and is not defined. The winning
file is copied unmodified to the sink.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import BinaryIO, Iterable, Optional
import shutil
import threading

from loguru import logger

from config import CONSOLIDATED_FILE_NAME
from core.exceptions import ScanOverflowError
from core.models import SearchHit
from services.corpus_search.corpus_walker import iter_corpus_files
from services.corpus_search.line_scanner import count_matching_lines
from utils.channel import Channel


def select_best_hit(hits: Iterable[SearchHit]) -> Optional[SearchHit]:
    """Fold hits keeping the first one with the strictly greatest match count."""
    best: Optional[SearchHit] = None
    for hit in hits:
        if best is None or hit.match_count > best.match_count:
            best = hit
    return best


class SearchPipeline:
    """Searches the corpus for the file with the most matching lines."""

    def __init__(
        self,
        workers: int,
        max_line_bytes: int,
        file_name: str = CONSOLIDATED_FILE_NAME,
    ):
        """
        Args:
            workers: Number of scanning threads
            max_line_bytes: Line length ceiling of the scanner
            file_name: Name of the consolidated files to scan
        """
        self.workers = max(1, int(workers))
        self.max_line_bytes = max_line_bytes
        self.file_name = file_name

    def search(self, corpus_root: Path, term: str, sink: Optional[BinaryIO] = None) -> Optional[SearchHit]:
        """
        Find the best-matching corpus file and stream it to ``sink``.

        Args:
            corpus_root: Root of the corpus tree
            term: Substring to search for (case-insensitive)
            sink: Binary stream receiving the winning file (skipped when None)

        Returns:
            The winning hit, or None when no file matched
        """
        best = self.find_best(corpus_root, term)
        if best is None:
            logger.debug(f"No corpus file matches '{term}'")
            return None

        logger.debug(f"Best match for '{term}': {best.file_path} ({best.match_count} lines)")
        if sink is not None:
            try:
                with best.file_path.open("rb") as source:
                    shutil.copyfileobj(source, sink)
                sink.flush()
            except OSError as error:
                logger.warning(f"Could not stream {best.file_path}: {error}")
        return best

    def find_best(self, corpus_root: Path, term: str) -> Optional[SearchHit]:
        """Run the worker pool and reduce its hits to a single winner."""
        files: Channel[Path] = Channel(self.workers * 2)
        hits: Channel[SearchHit] = Channel(self.workers)

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="chaos-search") as pool:
            futures = [pool.submit(self._scan_worker, files, hits, term) for _ in range(self.workers)]

            feeder = threading.Thread(
                target=self._feed_files,
                args=(Path(corpus_root), files),
                name="chaos-search-feeder",
                daemon=True,
            )
            feeder.start()

            def _close_when_done() -> None:
                wait(futures)
                hits.close()

            closer = threading.Thread(target=_close_when_done, name="chaos-search-closer", daemon=True)
            closer.start()

            best = select_best_hit(hits)
            feeder.join()
            closer.join()

        return best

    def _feed_files(self, corpus_root: Path, files: Channel[Path]) -> None:
        try:
            for path in iter_corpus_files(corpus_root, self.file_name):
                files.send(path)
        finally:
            files.close()

    def _scan_worker(self, files: Channel[Path], hits: Channel[SearchHit], term: str) -> None:
        for path in files:
            try:
                count = count_matching_lines(path, term, self.max_line_bytes)
            except ScanOverflowError as error:
                logger.debug(f"Scan aborted: {error}")
                continue
            except OSError as error:
                logger.debug(f"Could not read {path}: {error}")
                continue
            if count > 0:
                hits.send(SearchHit(file_path=path, match_count=count))
