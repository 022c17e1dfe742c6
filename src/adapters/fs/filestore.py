import hashlib
import mimetypes
import os
from pathlib import Path

from src.components.static_sites.models import StoredObject

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class FileSystemStore:
    """Site files on disk: key ``example.com/docs/index.html`` -> ``<base>/example.com/docs/index.html``."""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / path.lstrip("/")).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {path}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes and return the key relative to the store root."""
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        return str(target.relative_to(self.base_path))

    def get(self, key: str) -> StoredObject | None:
        """Object bytes with content type and ETag, None if absent or unsafe."""
        try:
            target = self._safe_path(key)
        except ValueError:
            return None
        if not target.is_file():
            return None
        with open(target, "rb") as f:
            data = f.read()
        content_type, _ = mimetypes.guess_type(target.name)
        return StoredObject(
            body=data,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            etag=f'"{hashlib.sha256(data).hexdigest()[:32]}"',
        )

    def delete(self, key: str) -> None:
        target = self._safe_path(key)
        if target.exists():
            os.remove(target)
