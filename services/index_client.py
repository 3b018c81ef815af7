"""
MODULE: services.index_client
RESPONSIBILITY: Fetch, cache and decode the dataset index.
ALLOWED: requests, json, logging.
FORBIDDEN: Archive downloads, corpus access.
ERRORS: IndexLoadError.

The index is a JSON array of {"name", "URL", "count", ...} records. It is
cached on disk and re-fetched only on refresh or when the cache is missing.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import json
import os

import requests
from loguru import logger

from core.exceptions import IndexLoadError
from core.models import EntityDescriptor


class IndexClient:
    """Dataset index access with a local file cache."""

    def __init__(
        self,
        url: str,
        cache_path: Path,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.cache_path = Path(cache_path)
        self.timeout = timeout
        self.http_session = session or requests.Session()

    @property
    def is_cached(self) -> bool:
        return self.cache_path.is_file()

    def fetch_index(self) -> Path:
        """Download the index into the cache file."""
        logger.info("[*] Fetching index.json...")
        try:
            response = self.http_session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as error:
            raise IndexLoadError(f"Error fetching index: {error}", source=self.url) from error

        part_path = self.cache_path.with_name(self.cache_path.name + ".part")
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            part_path.write_bytes(response.content)
            os.replace(part_path, self.cache_path)
        except OSError as error:
            part_path.unlink(missing_ok=True)
            raise IndexLoadError(f"Error caching index: {error}", source=str(self.cache_path)) from error

        logger.info("[+] Index cached")
        return self.cache_path

    def load_index(self) -> List[EntityDescriptor]:
        """Decode the cached index."""
        try:
            data = json.loads(self.cache_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            raise IndexLoadError(f"Error loading index: {error}", source=str(self.cache_path)) from error

        if not isinstance(data, list):
            raise IndexLoadError("Error loading index: expected a JSON array", source=str(self.cache_path))

        entities = [EntityDescriptor.from_index_record(record) for record in data if isinstance(record, dict)]
        logger.debug(f"Loaded {len(entities)} programs from {self.cache_path}")
        return entities

    def get_entities(self, refresh: bool = False) -> List[EntityDescriptor]:
        """
        Return the index, fetching it first when asked to or when no cache exists.

        Raises:
            IndexLoadError: The index could not be fetched or decoded
        """
        if refresh or not self.is_cached:
            self.fetch_index()
        return self.load_index()
