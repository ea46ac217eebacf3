from __future__ import annotations

import uuid
from pathlib import Path
from typing import Protocol

from werkzeug.utils import secure_filename

from ..core.enums import FileKind
from .model import UploadedFile

_FOLDERS = {FileKind.ATTENDANCE: "attendances", FileKind.TRANSPORTATION: "transportations"}


class FileStore(Protocol):
    """Persists uploaded blobs and hands back an opaque reference."""

    def save(self, kind: FileKind, upload: UploadedFile) -> str:
        raise NotImplementedError


class LocalFileStore(FileStore):
    """Writes uploads under ``root/<folder>/`` and returns ``/files/<folder>/<name>``."""

    def __init__(self, root: str | Path, url_prefix: str = "/files"):
        self._root = Path(root)
        self._url_prefix = url_prefix.rstrip("/")

    def save(self, kind: FileKind, upload: UploadedFile) -> str:
        folder = _FOLDERS[kind]
        name = f"{uuid.uuid4().hex}_{secure_filename(upload.filename) or 'upload'}"
        target_dir = self._root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / name).write_bytes(upload.data)
        return f"{self._url_prefix}/{folder}/{name}"
