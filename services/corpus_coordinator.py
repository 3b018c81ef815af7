"""
MODULE: services.corpus_coordinator
RESPONSIBILITY: Entry points used by the command layer (download, query, list, refresh).
ALLOWED: IndexClient, DownloadExtractPipeline, SearchPipeline, logging.
FORBIDDEN: Argument parsing, process exit codes.
ERRORS: IndexLoadError, EntityNotFoundError, FilesystemError.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, List, Optional

from loguru import logger

from config.settings import Config, CorpusConfig, PipelineConfig
from core.exceptions import EntityNotFoundError, FilesystemError
from core.models import DownloadSummary, EntityDescriptor, SearchHit
from services.archive_processing.archive_extractor import ArchiveExtractor
from services.archive_processing.archive_fetcher import ArchiveFetcher
from services.archive_processing.download_pipeline import DownloadExtractPipeline, ProgressCallback
from services.corpus_search.search_pipeline import SearchPipeline
from services.index_client import IndexClient

ALL_TARGETS = "all"


class CorpusCoordinator:
    """Resolves targets from the index and drives the pipelines."""

    def __init__(
        self,
        index_client: IndexClient,
        corpus: CorpusConfig,
        pipeline: PipelineConfig,
        fetcher: Optional[ArchiveFetcher] = None,
        extractor: Optional[ArchiveExtractor] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.index_client = index_client
        self.corpus = corpus
        self.pipeline = pipeline
        self.fetcher = fetcher or ArchiveFetcher(
            temp_dir=corpus.temp_dir,
            timeout=pipeline.fetch_timeout,
            user_agent=pipeline.user_agent,
        )
        self.extractor = extractor or ArchiveExtractor(
            text_extensions=corpus.text_extensions,
            consolidated_name=corpus.consolidated_name,
        )
        self.progress_callback = progress_callback
        self._entities: Optional[List[EntityDescriptor]] = None

    @classmethod
    def from_config(cls, config: Config, progress_callback: Optional[ProgressCallback] = None) -> "CorpusCoordinator":
        index_client = IndexClient(
            url=config.index.url,
            cache_path=config.index.cache_path,
            timeout=config.pipeline.fetch_timeout,
        )
        return cls(index_client, config.corpus, config.pipeline, progress_callback=progress_callback)

    @property
    def corpus_root(self) -> Path:
        return Path(self.corpus.root)

    def load_index(self, refresh: bool = False) -> List[EntityDescriptor]:
        """Index entities for this invocation (fetched once, then kept in memory)."""
        if refresh or self._entities is None:
            self._entities = self.index_client.get_entities(refresh=refresh)
        return self._entities

    def refresh_index(self) -> List[EntityDescriptor]:
        return self.load_index(refresh=True)

    def list_entities(self) -> List[str]:
        return [entity.name for entity in self.load_index()]

    def resolve_targets(self, target: str) -> List[EntityDescriptor]:
        """
        Every entity for ``all``, otherwise the first entity whose name matches ignoring case.

        Raises:
            EntityNotFoundError: No entity has that name
        """
        entities = self.load_index()
        if target == ALL_TARGETS:
            return list(entities)

        wanted = target.casefold()
        for entity in entities:
            if entity.name.casefold() == wanted:
                return [entity]
        raise EntityNotFoundError(target)

    def run_download(self, target: str, workers: Optional[int] = None) -> DownloadSummary:
        """
        Download and extract one program or all of them.

        Args:
            target: Program name or ``all``
            workers: Pool size (configured default when None)

        Returns:
            DownloadSummary
        """
        targets = self.resolve_targets(target)

        try:
            self.corpus_root.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise FilesystemError(f"cannot create corpus root: {error}", str(self.corpus_root)) from error

        pipeline = DownloadExtractPipeline(
            fetcher=self.fetcher,
            extractor=self.extractor,
            corpus_root=self.corpus_root,
            workers=workers or self.pipeline.workers,
            progress_callback=self.progress_callback,
        )
        summary = pipeline.run(targets)
        if summary.extraction_errors:
            logger.warning(
                f"{len(summary.extraction_errors)} program(s) fetched but not extracted: "
                f"{', '.join(sorted(summary.extraction_errors))}"
            )
        return summary

    def run_query(self, term: str, workers: Optional[int] = None, sink: Optional[BinaryIO] = None) -> Optional[SearchHit]:
        """
        Stream the corpus file with the most lines containing ``term``.

        Returns:
            The winning hit, or None when nothing matched
        """
        search = SearchPipeline(
            workers=workers or self.pipeline.workers,
            max_line_bytes=self.pipeline.max_line_bytes,
            file_name=self.corpus.consolidated_name,
        )
        return search.search(self.corpus_root, term, sink)
