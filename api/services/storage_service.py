"""
Local disk storage for uploaded furniture images
"""
import asyncio
import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Tuple, Union

from PIL import Image

from core.exceptions import PayloadTooLarge, UnsupportedMediaType, UploadError

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"

MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass
class StoredUpload:
    """Result of persisting one upload"""

    path: str  # /uploads/<name>, stable relative URL
    full_url: str  # absolute URL usable by the browser and the inference provider
    filename: str  # original client file name
    size: int
    mimetype: str


def probe_dimensions(source: Union[bytes, Path]) -> Tuple[int, int]:
    """Return (width, height) of an encoded image without decoding the pixels"""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    with Image.open(source) as image:
        return image.size


class UploadStore:
    """Writes uploads under a single directory with collision-free names"""

    def __init__(
        self,
        upload_dir: str,
        base_url: str,
        max_file_size: int = 10 * 1024 * 1024,
        allowed_types: Iterable[str] = tuple(MIME_EXTENSIONS),
    ):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")
        self.max_file_size = max_file_size
        self.allowed_types = set(allowed_types)

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate(self, size: int, mime_type: Optional[str]) -> None:
        if mime_type not in self.allowed_types:
            raise UnsupportedMediaType(
                "Invalid file type. Only images are allowed.",
                error=f"Unsupported MIME type: {mime_type}",
            )
        if size > self.max_file_size:
            raise PayloadTooLarge(
                "File too large",
                error=f"Maximum upload size is {self.max_file_size} bytes",
            )

    def _extension_for(self, original_filename: Optional[str], mime_type: str) -> str:
        suffix = PurePosixPath(original_filename or "").suffix.lower()
        return suffix or MIME_EXTENSIONS.get(mime_type, "")

    async def save(self, data: bytes, mime_type: str, original_filename: Optional[str] = None) -> StoredUpload:
        """Validate and persist an upload. Nothing is written when validation fails."""
        self.validate(len(data), mime_type)

        stored_name = f"{uuid.uuid4()}{self._extension_for(original_filename, mime_type)}"
        target = self.upload_dir / stored_name

        try:
            self.ensure_directory()
            await asyncio.to_thread(target.write_bytes, data)
        except OSError as e:
            logger.error(f"Upload error: failed to write {target}: {e}")
            raise UploadError("Failed to upload file", error=str(e)) from e

        path = f"{UPLOAD_URL_PREFIX}/{stored_name}"
        logger.info(f"Stored upload {original_filename!r} as {path} ({len(data)} bytes)")

        return StoredUpload(
            path=path,
            full_url=f"{self.base_url}{path}",
            filename=original_filename or stored_name,
            size=len(data),
            mimetype=mime_type,
        )

    def resolve(self, path: str) -> Path:
        """Map a /uploads/<name> path back to the file on disk"""
        name = PurePosixPath(path).name
        if not name or not path.startswith(f"{UPLOAD_URL_PREFIX}/"):
            raise UploadError("Not an upload path", error=path)
        return self.upload_dir / name

    async def dimensions(self, path: str) -> Tuple[int, int]:
        """Probe a stored upload's pixel size from disk"""
        return await asyncio.to_thread(probe_dimensions, self.resolve(path))
