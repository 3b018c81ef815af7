"""
MODULE: core.exceptions
RESPONSIBILITY: Define harvester-specific exception classes.
ALLOWED: Inheriting from HarvesterError.
FORBIDDEN: Business logic.
ERRORS: None.

Custom exceptions of the harvester. Every error except IndexLoadError is local
to one entity or one corpus file and never aborts a whole pipeline run.
"""

from typing import Optional


class HarvesterError(Exception):
    """Base exception of the harvester"""
    pass


class ConfigurationError(HarvesterError):
    """Invalid configuration value"""
    pass


class IndexLoadError(HarvesterError):
    """The dataset index could not be fetched or decoded"""
    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class EntityNotFoundError(HarvesterError):
    """A named entity is not present in the index"""
    def __init__(self, name: str):
        super().__init__(f"Program '{name}' not found")
        self.name = name


class NetworkError(HarvesterError):
    """Archive fetch failed (transport error or non-200 status)"""
    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ArchiveError(HarvesterError):
    """Archive could not be opened or one of its members could not be copied"""
    def __init__(self, message: str, archive_path: Optional[str] = None):
        super().__init__(message)
        self.archive_path = archive_path


class FilesystemError(HarvesterError):
    """Directory or file creation failed"""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ScanOverflowError(HarvesterError):
    """A line of a corpus file exceeds the scan buffer ceiling"""
    def __init__(self, message: str, file_path: Optional[str] = None,
                 limit: Optional[int] = None):
        super().__init__(message)
        self.file_path = file_path
        self.limit = limit
