"""
Download-extract pipeline services.

Fetches program archives and consolidates their text members into the corpus.
"""

from .archive_fetcher import ArchiveFetcher
from .archive_extractor import ArchiveExtractor
from .download_pipeline import DownloadExtractPipeline

__all__ = [
    'ArchiveFetcher',
    'ArchiveExtractor',
    'DownloadExtractPipeline',
]
