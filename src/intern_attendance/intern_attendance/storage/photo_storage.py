from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, Sequence

from PIL import Image, UnidentifiedImageError

from ..core.exceptions import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)
JPEG_QUALITY = 85


@dataclass(frozen=True)
class StoredObject:
    bucket: str
    key: str
    size: int
    modified_at: Optional[datetime] = None


class PhotoStorage(Protocol):
    def save(self, bucket: str, key: str, data: bytes) -> str:
        """Store ``data`` under ``bucket/key`` and return its public URL."""
        raise NotImplementedError

    def list(self, bucket: str, *, limit: int, offset: int = 0) -> Sequence[StoredObject]:
        """Page through every object of ``bucket`` (recursive, key order)."""
        raise NotImplementedError

    def remove(self, bucket: str, keys: Sequence[str]) -> int:
        raise NotImplementedError

    def path_for(self, bucket: str, key: str) -> Path:
        raise NotImplementedError

    def open(self, bucket: str, key: str) -> Path:
        """Path of an existing object; NotFoundError otherwise."""
        raise NotImplementedError


def public_url(bucket: str, key: str) -> str:
    return f"/api/files/{bucket}/{key}"


def key_from_url(bucket: str, url: Optional[str]) -> Optional[str]:
    """Inverse of ``public_url``; None for urls outside ``bucket``."""
    prefix = public_url(bucket, "")
    if not url or not url.startswith(prefix) or len(url) == len(prefix):
        return None
    return url[len(prefix) :]


def decode_data_url(value: str, *, field_name: str = "Foto") -> bytes:
    """Decode a ``data:image/...;base64,...`` string. Bare base64 is accepted too."""

    if not value or not isinstance(value, str):
        raise ValidationError(f"{field_name} wajib diisi")

    payload = value.strip()
    match = DATA_URL_RE.match(payload)
    if match:
        mime = match.group("mime") or ""
        if mime and not mime.startswith("image/"):
            raise ValidationError(f"{field_name} harus berupa gambar")
        payload = match.group("data")

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(f"{field_name} tidak dapat dibaca (base64 tidak valid)")


def normalise_image(data: bytes, *, max_bytes: int, field_name: str = "Foto") -> bytes:
    """Check size and re-encode any supported image as JPEG.

    The size limit applies to the uploaded bytes, not to the re-encoded output.
    """

    if not data:
        raise ValidationError(f"{field_name} kosong")
    if len(data) > max_bytes:
        raise ValidationError(f"Ukuran {field_name.lower()} maksimal {max_bytes // 1024} KB")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=JPEG_QUALITY)
    except (UnidentifiedImageError, OSError):
        raise ValidationError(f"{field_name} harus berupa file gambar")
    return out.getvalue()


def photo_key(owner_id: str, taken_at: datetime, *, ext: str = "jpg") -> str:
    """``{owner}/{YYYY-MM-DD}_{epoch-ms}.jpg``; the suffix dates the object for cleanup."""

    epoch_ms = int(taken_at.timestamp() * 1000)
    return f"{owner_id}/{taken_at.strftime('%Y-%m-%d')}_{epoch_ms}.{ext}"


class FileSystemPhotoStorage(PhotoStorage):
    """Object store laid out as ``<root>/<bucket>/<key>`` on local disk."""

    def __init__(self, root_dir: str | Path):
        self._root = Path(root_dir)

    def path_for(self, bucket: str, key: str) -> Path:
        bucket_dir = (self._root / bucket).resolve()
        target = (bucket_dir / key).resolve()
        if not _is_within(target, bucket_dir) or target == bucket_dir:
            raise ValidationError("Nama file tidak valid")
        return target

    def save(self, bucket: str, key: str, data: bytes) -> str:
        target = self.path_for(bucket, key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Gagal menyimpan file {bucket}/{key}: {e}") from e
        logger.debug("Stored %s/%s (%d bytes)", bucket, key, len(data))
        return public_url(bucket, key)

    def open(self, bucket: str, key: str) -> Path:
        target = self.path_for(bucket, key)
        if not target.is_file():
            raise NotFoundError("File tidak ditemukan")
        return target

    def list(self, bucket: str, *, limit: int, offset: int = 0) -> Sequence[StoredObject]:
        bucket_dir = self._root / bucket
        if not bucket_dir.is_dir():
            return []
        try:
            keys = sorted(p.relative_to(bucket_dir).as_posix() for p in bucket_dir.rglob("*") if p.is_file())
            page = keys[offset : offset + limit]
            objects = []
            for key in page:
                stat = (bucket_dir / key).stat()
                objects.append(
                    StoredObject(
                        bucket=bucket,
                        key=key,
                        size=stat.st_size,
                        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    )
                )
            return objects
        except OSError as e:
            raise StorageError(f"Gagal membaca bucket {bucket}: {e}") from e

    def remove(self, bucket: str, keys: Sequence[str]) -> int:
        removed = 0
        for key in keys:
            target = self.path_for(bucket, key)
            try:
                target.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Gagal menghapus {bucket}/{key}: {e}") from e
            removed += 1
        return removed


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True

