from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

from werkzeug.utils import secure_filename

from ..core.exceptions import UploadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilePayload:
    """An uploaded file read off the request, detached from werkzeug."""

    data: bytes
    mime_type: Optional[str] = None
    filename: Optional[str] = None

    @staticmethod
    def from_upload(upload) -> Optional["FilePayload"]:
        if upload is None or not upload.filename:
            return None
        data = upload.read()
        if not data:
            return None
        return FilePayload(data=data, mime_type=upload.mimetype, filename=upload.filename)


class ObjectStorage(Protocol):
    def upload(self, data: bytes, mime_type: Optional[str], folder: str, *, filename: Optional[str] = None) -> str:
        """Store `data` and return its public URL. Raises UploadError."""

        raise NotImplementedError


def _extension(mime_type: Optional[str], filename: Optional[str]) -> str:
    if filename:
        ext = os.path.splitext(secure_filename(filename))[1]
        if ext:
            return ext.lower()
    guessed = mimetypes.guess_extension(mime_type or "") if mime_type else None
    return guessed or ".bin"


class LocalObjectStorage(ObjectStorage):
    """Writes under `root` and serves back through `url_prefix`."""

    def __init__(self, root: str, *, url_prefix: str = "/uploads"):
        self._root = os.path.abspath(root)
        self._url_prefix = url_prefix.rstrip("/")

    def upload(self, data: bytes, mime_type: Optional[str], folder: str, *, filename: Optional[str] = None) -> str:
        folder = secure_filename(folder) or "misc"
        name = f"{uuid.uuid4().hex}{_extension(mime_type, filename)}"
        target_dir = os.path.join(self._root, folder)
        try:
            os.makedirs(target_dir, exist_ok=True)
            with open(os.path.join(target_dir, name), "wb") as fh:
                fh.write(data)
        except OSError as e:
            logger.error("Upload to %s failed: %s", target_dir, e)
            raise UploadError("File upload failed, please try again") from e
        return f"{self._url_prefix}/{folder}/{name}"
