"""
MODULE: services.archive_processing.download_pipeline
RESPONSIBILITY: Two-stage worker pool pipeline: fetch archives, then consolidate them into the corpus.
ALLOWED: ArchiveFetcher, ArchiveExtractor, Channel, ThreadPoolExecutor, logging.
FORBIDDEN: Index loading, CLI concerns, search.
ERRORS: None (per-entity errors are collected into the DownloadSummary).

Pipeline layout:

    jobs (pre-loaded, closed) -> W fetch workers -> results (2W) -> driver
    driver -> extraction jobs (2W) -> W extract workers -> corpus

The driver is the only reader of the results channel and the only owner of
the success/failure counters. A supervisor thread closes the results channel
once every fetch worker has returned. Extract workers delete each temp archive
after the extraction attempt, whatever its outcome. The tally counts fetch
outcomes only; extraction failures are reported separately.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
import re
import threading

from loguru import logger

from core.exceptions import HarvesterError
from core.models import DownloadSummary, EntityDescriptor, EntityState, ExtractionJob, FetchOutcome
from services.archive_processing.archive_extractor import ArchiveExtractor
from services.archive_processing.archive_fetcher import ArchiveFetcher
from utils.channel import Channel

ProgressCallback = Callable[[str, EntityState, Optional[str]], None]


class DownloadExtractPipeline:
    """Downloads and consolidates program archives with bounded worker pools."""

    def __init__(
        self,
        fetcher: ArchiveFetcher,
        extractor: ArchiveExtractor,
        corpus_root: Path,
        workers: int,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            fetcher: Archive fetcher shared by the fetch workers
            extractor: Archive extractor shared by the extract workers
            corpus_root: Root of the corpus tree
            workers: Pool size of each stage
            progress_callback: Called as (entity_name, state, detail) from worker threads
        """
        self.fetcher = fetcher
        self.extractor = extractor
        self.corpus_root = Path(corpus_root)
        self.workers = max(1, int(workers))
        self.progress_callback = progress_callback

    def _update_progress(self, name: str, state: EntityState, detail: Optional[str] = None) -> None:
        """Report a state transition through the callback"""
        logger.debug(f"{name}: {state.value}" + (f" ({detail})" if detail else ""))
        if self.progress_callback:
            try:
                self.progress_callback(name, state, detail)
            except Exception as error:
                logger.debug(f"Progress callback failed: {error}")

    def select_eligible(self, entities: Iterable[EntityDescriptor]) -> List[EntityDescriptor]:
        """Fetchable entities, first occurrence of each corpus directory only."""
        eligible: List[EntityDescriptor] = []
        owners: Dict[Path, str] = {}
        for entity in entities:
            if not entity.is_fetchable:
                continue
            directory = self.entity_dir(entity.name)
            if directory in owners:
                if owners[directory] != entity.name:
                    logger.warning(
                        f"[-] Skipping {entity.name!r}: directory {directory.name!r} "
                        f"already belongs to {owners[directory]!r}"
                    )
                continue
            owners[directory] = entity.name
            eligible.append(entity)
        return eligible

    def entity_dir(self, name: str) -> Path:
        """Corpus directory of an entity."""
        safe_name = re.sub(r"[<>:\"/\\|?*\x00]", "_", name).strip()
        if safe_name in ("", ".", ".."):
            safe_name = safe_name.replace(".", "_") or "_"
        return self.corpus_root / safe_name

    def run(self, entities: Iterable[EntityDescriptor]) -> DownloadSummary:
        """
        Download and extract every fetchable entity.

        Args:
            entities: Target entities (non-fetchable ones are skipped)

        Returns:
            DownloadSummary with fetch-level counters and per-entity reasons
        """
        entities = list(entities)
        eligible = self.select_eligible(entities)
        summary = DownloadSummary(skipped_count=len(entities) - len(eligible))

        logger.info(f"[*] Downloading {len(eligible)} programs with {self.workers} workers...")
        if not eligible:
            return summary

        jobs: Channel[EntityDescriptor] = Channel()
        for descriptor in eligible:
            self._update_progress(descriptor.name, EntityState.QUEUED)
            jobs.send(descriptor)
        jobs.close()

        results: Channel[FetchOutcome] = Channel(self.workers * 2)
        extraction_jobs: Channel[ExtractionJob] = Channel(self.workers * 2)

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="chaos-fetch") as fetch_pool, \
                ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="chaos-extract") as extract_pool:
            fetch_futures = [
                fetch_pool.submit(self._fetch_worker, jobs, results)
                for _ in range(self.workers)
            ]
            supervisor = threading.Thread(
                target=self._close_when_done,
                args=(fetch_futures, results),
                name="chaos-fetch-supervisor",
                daemon=True,
            )
            supervisor.start()

            extract_futures = [
                extract_pool.submit(self._extract_worker, extraction_jobs)
                for _ in range(self.workers)
            ]

            try:
                for outcome in results:
                    name = outcome.descriptor.name
                    if not outcome.ok:
                        summary.failure_count += 1
                        summary.fetch_errors[name] = str(outcome.error)
                        logger.error(f"[-] Download {name}: {outcome.error}")
                        continue
                    summary.success_count += 1
                    extraction_jobs.send(ExtractionJob(outcome.descriptor, outcome.temp_archive_path))
            finally:
                extraction_jobs.close()

            for future in extract_futures:
                summary.extraction_errors.update(future.result())
            supervisor.join()

        logger.info(f"[*] Complete: {summary.success_count} success, {summary.failure_count} failed")
        return summary

    @staticmethod
    def _close_when_done(futures: List[Future], results: Channel) -> None:
        wait(futures)
        for future in futures:
            error = future.exception()
            if error is not None:
                logger.error(f"Fetch worker stopped: {error!r}")
        results.close()

    def _fetch_worker(self, jobs: Channel[EntityDescriptor], results: Channel[FetchOutcome]) -> None:
        for descriptor in jobs:
            self._update_progress(descriptor.name, EntityState.FETCHING)
            try:
                temp_path = self.fetcher.fetch(descriptor)
                outcome = FetchOutcome(descriptor, temp_archive_path=temp_path)
                self._update_progress(descriptor.name, EntityState.FETCHED, str(temp_path))
            except HarvesterError as error:
                outcome = FetchOutcome(descriptor, error=error)
                self._update_progress(descriptor.name, EntityState.FETCH_FAILED, str(error))
            except Exception as error:
                logger.exception(f"Unexpected error while fetching {descriptor.name}")
                outcome = FetchOutcome(descriptor, error=error)
                self._update_progress(descriptor.name, EntityState.FETCH_FAILED, str(error))
            results.send(outcome)

    def _extract_worker(self, extraction_jobs: Channel[ExtractionJob]) -> Dict[str, str]:
        failures: Dict[str, str] = {}
        for job in extraction_jobs:
            name = job.descriptor.name
            self._update_progress(name, EntityState.EXTRACTING)
            try:
                self.extractor.extract(job.temp_archive_path, self.entity_dir(name))
            except HarvesterError as error:
                failures[name] = str(error)
                logger.warning(f"[-] Unzip {name}: {error}")
                self._update_progress(name, EntityState.EXTRACT_FAILED, str(error))
            except Exception as error:
                failures[name] = str(error)
                logger.exception(f"Unexpected error while extracting {name}")
                self._update_progress(name, EntityState.EXTRACT_FAILED, str(error))
            else:
                logger.info(f"[+] {name}")
                self._update_progress(name, EntityState.DONE)
            finally:
                self._discard(job.temp_archive_path)
        return failures

    @staticmethod
    def _discard(temp_path: Path) -> None:
        try:
            Path(temp_path).unlink(missing_ok=True)
        except OSError as error:
            logger.warning(f"Could not delete temp archive {temp_path}: {error}")
