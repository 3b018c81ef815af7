"""
MODULE: services.archive_processing.archive_fetcher
RESPONSIBILITY: Download one program archive into a temporary file.
ALLOWED: requests, tempfile, logging.
FORBIDDEN: Archive parsing, corpus writes.
ERRORS: NetworkError.

Module for fetching program archives.

The ArchiveFetcher guarantees that a call either returns the path of a fully
written temp file (the caller owns its cleanup) or raises without leaving a
temp file behind.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
import os
import tempfile

import requests
from loguru import logger

from core.exceptions import NetworkError
from core.models import EntityDescriptor


class ArchiveFetcher:
    """Fetches program archives over HTTP."""

    CHUNK_SIZE = 8192
    TEMP_PREFIX = "chaos-"
    TEMP_SUFFIX = ".zip"

    def __init__(
        self,
        temp_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
        user_agent: str = "chaos-harvester/1.0",
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            temp_dir: Directory for temp archives (system temp dir when None)
            timeout: Request timeout in seconds; None keeps the request unbounded
            user_agent: User-Agent header
            session: HTTP session to reuse
        """
        self.temp_dir = Path(temp_dir) if temp_dir else None
        self.timeout = timeout
        self.http_session = session or requests.Session()
        self.http_session.headers.update({"User-Agent": user_agent, "Accept": "*/*"})

    def fetch(self, descriptor: EntityDescriptor) -> Path:
        """
        Download the archive of a program.

        Args:
            descriptor: Program to fetch

        Returns:
            Path of the temp archive

        Raises:
            NetworkError: Transport error, non-200 status or interrupted body copy
        """
        url = descriptor.source_url
        logger.debug(f"Fetching {descriptor.name} from {url}")

        try:
            response = self.http_session.get(url, timeout=self.timeout, stream=True)
        except requests.RequestException as error:
            raise NetworkError(str(error), url=url) from error

        with response:
            if response.status_code != 200:
                raise NetworkError(
                    f"status {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            return self._save_body(response, url)

    def _save_body(self, response: requests.Response, url: str) -> Path:
        if self.temp_dir is not None:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
        fd, raw_path = tempfile.mkstemp(
            prefix=self.TEMP_PREFIX,
            suffix=self.TEMP_SUFFIX,
            dir=str(self.temp_dir) if self.temp_dir else None,
        )
        temp_path = Path(raw_path)

        try:
            with os.fdopen(fd, "wb") as file:
                for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                    if chunk:
                        file.write(chunk)
        except (requests.RequestException, OSError) as error:
            temp_path.unlink(missing_ok=True)
            raise NetworkError(f"body copy failed: {error}", url=url) from error
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {url} to {temp_path}")
        return temp_path
