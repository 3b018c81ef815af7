"""
MODULE: core.models
RESPONSIBILITY: Define domain data structures (dataclasses, enums).
ALLOWED: Dataclasses, Enums, Typing.
FORBIDDEN: Business logic, IO operations.
ERRORS: None.

Data models of the harvester:
- Entity descriptors loaded from the dataset index
- Transient records passed between pipeline stages
- Summaries returned to the command layer
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


class EntityState(Enum):
    """Lifecycle of one entity inside the download-extract pipeline"""
    QUEUED = "queued"
    FETCHING = "fetching"
    FETCH_FAILED = "fetch_failed"
    FETCHED = "fetched"
    EXTRACTING = "extracting"
    EXTRACT_FAILED = "extract_failed"
    DONE = "done"

    @property
    def is_terminal(self) -> bool:
        return self in (EntityState.FETCH_FAILED, EntityState.EXTRACT_FAILED, EntityState.DONE)


@dataclass(frozen=True)
class EntityDescriptor:
    """
    One program of the dataset index

    Attributes:
        name: Program name, also the corpus subdirectory name
        source_url: URL of the program's zip archive
        item_count: Number of records the index advertises for the program
    """
    name: str
    source_url: str
    item_count: int

    @property
    def is_fetchable(self) -> bool:
        """Entities without a URL or with no items are skipped silently."""
        return bool(self.source_url) and self.item_count > 0

    @classmethod
    def from_index_record(cls, record: Mapping[str, Any]) -> "EntityDescriptor":
        """Build a descriptor from one record of index.json (keys ``name``, ``URL``, ``count``)."""
        try:
            count = int(record.get("count") or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(
            name=str(record.get("name") or ""),
            source_url=str(record.get("URL") or ""),
            item_count=count,
        )


@dataclass
class FetchOutcome:
    """Result of one fetch attempt, consumed exactly once by the pipeline driver"""
    descriptor: EntityDescriptor
    temp_archive_path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ExtractionJob:
    """Work item for the extraction stage; always backed by a successful FetchOutcome"""
    descriptor: EntityDescriptor
    temp_archive_path: Path


@dataclass(frozen=True)
class SearchHit:
    """A corpus file with at least one matching line"""
    file_path: Path
    match_count: int


@dataclass
class DownloadSummary:
    """
    Aggregate outcome of one download run

    Attributes:
        success_count: Entities whose archive was fetched (regardless of extraction)
        failure_count: Entities whose fetch failed
        skipped_count: Entities filtered out as non-fetchable
        fetch_errors: Fetch failure reason per entity name
        extraction_errors: Extraction failure reason per entity name
    """
    success_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    fetch_errors: Dict[str, str] = field(default_factory=dict)
    extraction_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count
