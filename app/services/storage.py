"""Object store for report images. Files live on the local file system and are
served publicly under ``settings.MEDIA_URL``."""
from __future__ import annotations

import mimetypes
import os
import secrets
from pathlib import Path
from typing import BinaryIO, Optional

from loguru import logger

from app.core.config import settings

ALLOWED_MIMETYPES = {'image/jpeg', 'image/png', 'image/webp'}
_CHUNK_SIZE = 64 * 1024


class UploadRejected(ValueError):
    """The uploaded file is not an accepted image."""


def resolve_mimetype(content_type: Optional[str], filename: Optional[str]) -> Optional[str]:
    if content_type and content_type != 'application/octet-stream':
        return content_type
    if filename:
        return mimetypes.guess_type(filename)[0]
    return None


class LocalObjectStore:
    def __init__(self, root: Path, base_url: str, max_bytes: int) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip('/')
        self.max_bytes = max_bytes

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise FileNotFoundError(key)
        return path

    def public_url(self, key: str) -> str:
        return f'{self.base_url}/{key}'

    def make_key(self, filename: Optional[str], mimetype: str) -> str:
        extension = Path(filename or '').suffix.lower()
        if not extension:
            extension = mimetypes.guess_extension(mimetype) or ''
        return f'{secrets.token_hex(16)}{extension}'

    def store(self, stream: BinaryIO, filename: Optional[str], content_type: Optional[str]) -> tuple[str, str, int]:
        """Write the stream under a fresh key. Returns (key, mimetype, size)."""
        mimetype = resolve_mimetype(content_type, filename)
        if mimetype not in ALLOWED_MIMETYPES:
            raise UploadRejected(f'Mimetype "{mimetype}" is not allowed.')
        self.root.mkdir(parents=True, exist_ok=True)
        key = self.make_key(filename, mimetype)
        path = self._path(key)
        size = 0
        try:
            with open(path, 'wb') as target:
                while True:
                    chunk = stream.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise UploadRejected('File is too large.')
                    target.write(chunk)
        except UploadRejected:
            os.remove(path)
            raise
        if size == 0:
            os.remove(path)
            raise UploadRejected('File is empty.')
        logger.info('upload.stored', key=key, mimetype=mimetype, size=size)
        return key, mimetype, size


object_store = LocalObjectStore(settings.MEDIA_ROOT, settings.MEDIA_URL, settings.MAX_UPLOAD_BYTES)
