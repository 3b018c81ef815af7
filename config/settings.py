"""
MODULE: config.settings
RESPONSIBILITY: Application configuration loading and validation.
ALLOWED: os, dotenv, dataclasses.
FORBIDDEN: Complex business logic, network access (only config).
ERRORS: ConfigurationError (validation).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import os
from pathlib import Path
from dotenv import load_dotenv
from loguru import logger

from config import CONSOLIDATED_FILE_NAME, CORPUS_DIR, INDEX_CACHE_PATH, INDEX_URL
from core.exceptions import ConfigurationError

DEFAULT_MAX_LINE_BYTES = 1024 * 1024


def default_workers() -> int:
    """Twice the number of available processing units."""
    return (os.cpu_count() or 1) * 2


@dataclass(frozen=True)
class IndexConfig:
    """Dataset index location"""
    url: str
    cache_path: Path


@dataclass(frozen=True)
class CorpusConfig:
    """On-disk corpus layout"""
    root: Path
    consolidated_name: str
    text_extensions: Tuple[str, ...]
    temp_dir: Optional[Path] = None


@dataclass(frozen=True)
class PipelineConfig:
    """Worker pools and network settings"""
    workers: int
    max_line_bytes: int
    fetch_timeout: Optional[float] = None
    user_agent: str = "chaos-harvester/1.0"


@dataclass(frozen=True)
class LoggingConfig:
    """Loguru sinks"""
    level: str
    log_dir: Optional[Path] = None


class Config:
    """
    Main configuration class, loads every setting from the environment / .env file
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Args:
            env_file: Path to a .env file (optional)
        """
        self._load_environment(env_file)
        self.index = self._load_index_config()
        self.corpus = self._load_corpus_config()
        self.pipeline = self._load_pipeline_config()
        self.logging = self._load_logging_config()

    def _load_environment(self, env_file: Optional[str]) -> None:
        """Load environment variables"""
        try:
            if env_file and os.path.exists(env_file):
                load_dotenv(env_file)
            else:
                load_dotenv()
        except Exception as e:
            logger.warning(f"Could not load .env file: {e}")

    def _get_env_var(self, key: str, default: Any = None, required: bool = False) -> Any:
        """
        Read an environment variable

        Args:
            key: Variable name
            default: Value used when the variable is unset
            required: Raise when the variable is unset

        Returns:
            Variable value or default

        Raises:
            ConfigurationError: If a required variable is missing
        """
        value = os.getenv(key)

        if value is None or value == "":
            if required:
                raise ConfigurationError(f"Required environment variable {key} is not set")
            return default

        return value

    def _get_env_int(self, key: str, default: int = 0) -> int:
        """Read an int variable"""
        try:
            return int(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid int for {key}: {e}, using default: {default}")
            return default

    def _get_env_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        """Read an optional float variable"""
        value = self._get_env_var(key, default)
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid float for {key}: {e}, using default: {default}")
            return default

    def _get_env_path(self, key: str, default: Optional[Path] = None) -> Optional[Path]:
        value = self._get_env_var(key, None)
        return Path(value).expanduser() if value else default

    def _load_index_config(self) -> IndexConfig:
        return IndexConfig(
            url=self._get_env_var("CHAOS_INDEX_URL", INDEX_URL),
            cache_path=self._get_env_path("CHAOS_INDEX_CACHE", INDEX_CACHE_PATH),
        )

    def _load_corpus_config(self) -> CorpusConfig:
        raw_extensions = self._get_env_var("CHAOS_TEXT_EXTENSIONS", ".txt")
        extensions = tuple(
            ext if ext.startswith(".") else f".{ext}"
            for ext in (part.strip().lower() for part in raw_extensions.split(","))
            if ext
        )
        return CorpusConfig(
            root=self._get_env_path("CHAOS_CORPUS_DIR", CORPUS_DIR),
            consolidated_name=CONSOLIDATED_FILE_NAME,
            text_extensions=extensions or (".txt",),
            temp_dir=self._get_env_path("CHAOS_TEMP_DIR"),
        )

    def _load_pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            workers=self._get_env_int("CHAOS_WORKERS", default_workers()),
            max_line_bytes=self._get_env_int("CHAOS_SCAN_MAX_LINE_BYTES", DEFAULT_MAX_LINE_BYTES),
            # No deadline unless the operator opts in
            fetch_timeout=self._get_env_float("CHAOS_FETCH_TIMEOUT", None),
            user_agent=self._get_env_var("CHAOS_USER_AGENT", "chaos-harvester/1.0"),
        )

    def _load_logging_config(self) -> LoggingConfig:
        return LoggingConfig(
            level=self._get_env_var("LOG_LEVEL", "INFO").upper(),
            log_dir=self._get_env_path("LOG_DIR"),
        )

    def validate(self) -> None:
        """
        Validate the configuration

        Raises:
            ConfigurationError: If a value is out of range
        """
        if not self.index.url:
            raise ConfigurationError("Index URL is empty")
        if self.pipeline.workers < 1:
            raise ConfigurationError(f"Worker count must be positive, got {self.pipeline.workers}")
        if self.pipeline.max_line_bytes < 1:
            raise ConfigurationError(
                f"Scan buffer ceiling must be positive, got {self.pipeline.max_line_bytes}"
            )
        if self.pipeline.fetch_timeout is not None and self.pipeline.fetch_timeout <= 0:
            raise ConfigurationError(f"Fetch timeout must be positive, got {self.pipeline.fetch_timeout}")

    def to_dict(self) -> Dict[str, Any]:
        """Configuration as a plain dict (for debug logging)"""
        return {
            "index": {"url": self.index.url, "cache_path": str(self.index.cache_path)},
            "corpus": {
                "root": str(self.corpus.root),
                "consolidated_name": self.corpus.consolidated_name,
                "text_extensions": list(self.corpus.text_extensions),
                "temp_dir": str(self.corpus.temp_dir) if self.corpus.temp_dir else None,
            },
            "pipeline": {
                "workers": self.pipeline.workers,
                "max_line_bytes": self.pipeline.max_line_bytes,
                "fetch_timeout": self.pipeline.fetch_timeout,
            },
            "logging": {
                "level": self.logging.level,
                "log_dir": str(self.logging.log_dir) if self.logging.log_dir else None,
            },
        }
