"""
MODULE: services.archive_processing.archive_extractor
RESPONSIBILITY: Consolidate the plain-text members of a zip archive into one file.
ALLOWED: zipfile, shutil, logging.
FORBIDDEN: Network access, deleting the source archive.
ERRORS: ArchiveError, FilesystemError.

Module for extracting program archives.

Text members are concatenated in stored order, with no separator, into
<dest_dir>/consolidated.txt. The output is written to a sibling .part file and
renamed into place only when every member was copied, so a failed extraction
leaves no consolidated file rather than a truncated one.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Iterable, List, Tuple
import os
import shutil
import zipfile
import zlib

from loguru import logger

from core.exceptions import ArchiveError, FilesystemError
from config import CONSOLIDATED_FILE_NAME


class ArchiveExtractor:
    """Extracts plain-text members of zip archives."""

    COPY_BUFFER = 64 * 1024

    def __init__(
        self,
        text_extensions: Iterable[str] = (".txt",),
        consolidated_name: str = CONSOLIDATED_FILE_NAME,
    ):
        """
        Args:
            text_extensions: Member suffixes treated as plain text
            consolidated_name: Name of the output file inside each entity directory
        """
        self.text_extensions: Tuple[str, ...] = tuple(ext.lower() for ext in text_extensions)
        self.consolidated_name = consolidated_name

    def is_text_member(self, member: zipfile.ZipInfo) -> bool:
        if member.is_dir():
            return False
        return PurePosixPath(member.filename).suffix.lower() in self.text_extensions

    def extract(self, archive_path: Path, dest_dir: Path) -> Path:
        """
        Consolidate the text members of an archive.

        Args:
            archive_path: Zip archive to read
            dest_dir: Entity directory (created if missing)

        Returns:
            Path of the consolidated file

        Raises:
            ArchiveError: Archive cannot be opened or a member cannot be read
            FilesystemError: Output directory or file cannot be created
        """
        archive_path = Path(archive_path)
        dest_dir = Path(dest_dir)

        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as error:
            raise ArchiveError(f"cannot open archive: {error}", str(archive_path)) from error

        with archive:
            try:
                dest_dir.mkdir(parents=True, exist_ok=True)
            except OSError as error:
                raise FilesystemError(f"cannot create {dest_dir}: {error}", str(dest_dir)) from error

            output_path = dest_dir / self.consolidated_name
            part_path = dest_dir / f"{self.consolidated_name}.part"

            try:
                output = part_path.open("wb")
            except OSError as error:
                raise FilesystemError(f"cannot create {part_path}: {error}", str(part_path)) from error

            try:
                with output:
                    copied = self._copy_text_members(archive, output, archive_path)
                try:
                    os.replace(part_path, output_path)
                except OSError as error:
                    raise FilesystemError(f"cannot write {output_path}: {error}", str(output_path)) from error
            except BaseException:
                part_path.unlink(missing_ok=True)
                # The previous run's output must not survive a failed re-extraction
                output_path.unlink(missing_ok=True)
                raise

        logger.debug(f"Consolidated {len(copied)} member(s) of {archive_path.name} into {output_path}")
        return output_path

    def _copy_text_members(self, archive: zipfile.ZipFile, output, archive_path: Path) -> List[str]:
        copied: List[str] = []
        for member in archive.infolist():
            if not self.is_text_member(member):
                continue
            try:
                with archive.open(member) as source:
                    shutil.copyfileobj(source, output, self.COPY_BUFFER)
            except (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError) as error:
                raise ArchiveError(
                    f"cannot read member {member.filename}: {error}", str(archive_path)
                ) from error
            except OSError as error:
                raise FilesystemError(f"copy of {member.filename} failed: {error}", str(archive_path)) from error
            copied.append(member.filename)
        return copied
