"""Bucket storage for uploaded resume files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from config.settings import STORAGE_DIR, STORAGE_PUBLIC_BASE_URL

logger = logging.getLogger(__name__)

RESUME_BUCKET = "user-resumes"


class BucketStorage(Protocol):
    """Operations the preference service needs from object storage."""

    def upload(self, path: str, content: bytes) -> str:
        ...

    def remove(self, path: str) -> bool:
        ...

    def path_from_url(self, url: str) -> Optional[str]:
        ...


@dataclass
class LocalBucketStorage:
    """A single bucket kept as a directory tree, served under ``public_base_url``."""

    root: Path = STORAGE_DIR
    public_base_url: str = STORAGE_PUBLIC_BASE_URL
    bucket: str = RESUME_BUCKET

    def __post_init__(self):
        self.root = Path(self.root)
        (self.root / self.bucket).mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        bucket_dir = (self.root / self.bucket).resolve()
        target = (bucket_dir / path).resolve()
        if bucket_dir not in target.parents:
            raise ValueError(f"Path escapes bucket: {path}")
        return target

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/{self.bucket}/{path}"

    def upload(self, path: str, content: bytes) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info("Stored %d bytes at %s/%s", len(content), self.bucket, path)
        return self.public_url(path)

    def remove(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            return False
        target.unlink()
        return True

    def path_from_url(self, url: str) -> Optional[str]:
        marker = f"/{self.bucket}/"
        if marker not in (url or ""):
            return None
        path = url.split(marker, 1)[1].split("?", 1)[0]
        return path or None
