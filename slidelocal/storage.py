"""Read-only JSON storage for slide configurations."""

import fcntl
import json
import logging
import os
from contextlib import contextmanager
from typing import Optional

from pydantic import ValidationError

from .config import get_settings
from .models import SlideConfig, SlidesFile

logger = logging.getLogger(__name__)


def _redact(entry: dict) -> dict:
    return {k: v for k, v in entry.items() if k != "code"}


class SlideStorage:
    """Loads slide configurations from slides.json.

    The file is never written; device codes stay where the operator put them.
    """

    def __init__(self, file_path: Optional[str] = None):
        self.file_path = file_path or get_settings().slides_file
        self._cache: Optional[SlidesFile] = None

    def _invalidate_cache(self) -> None:
        self._cache = None

    @contextmanager
    def _locked_file(self):
        """Open the file for reading under a shared lock."""
        with open(self.file_path, 'r') as f:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                yield f
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def _read_data(self) -> SlidesFile:
        """Read and parse JSON data."""
        if not os.path.exists(self.file_path):
            logger.warning(f"Slides file not found: {self.file_path}")
            return SlidesFile()
        try:
            with self._locked_file() as f:
                return SlidesFile.model_validate(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid slides file {self.file_path}: {e}")
            return SlidesFile()

    def _load(self) -> SlidesFile:
        if self._cache is None:
            self._cache = self._read_data()
        return self._cache

    def reload(self) -> None:
        """Drop cached data so the next read hits the file."""
        self._invalidate_cache()

    @property
    def poll_interval(self) -> int:
        """Platform-wide polling interval in milliseconds."""
        value = self._load().poll_interval
        return value if value is not None else get_settings().default_poll_interval

    def list_slides(self) -> list[SlideConfig]:
        """List valid slide configurations, skipping broken entries."""
        slides = []
        for entry in self._load().slides:
            if not entry.get("name") or not entry.get("host"):
                logger.warning(f"Slide missing name or host in config: {json.dumps(_redact(entry))}")
                continue
            try:
                slides.append(SlideConfig.model_validate(entry))
            except ValidationError as e:
                fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
                logger.warning(f"Invalid slide config {entry.get('name')}: bad {fields}")

        if not slides:
            logger.warning("No slides configured. Add a 'slides' array to slides.json.")
        return slides


# Global storage instance
_storage: Optional[SlideStorage] = None


def get_storage() -> SlideStorage:
    """Get storage instance."""
    global _storage
    if _storage is None:
        _storage = SlideStorage()
    return _storage
