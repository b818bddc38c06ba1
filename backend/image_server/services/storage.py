import asyncio
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Final
from uuid import uuid4

logger = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 64 * 1024

# Bounded so uuid + extension stays under NAME_MAX (255)
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9_-]{1,200}")
_FORBIDDEN_CHARS = ("/", "\\", "\x00")


class StorageError(Exception):
    """Raised when the filesystem rejects a write or removal."""


class InvalidFilenameError(ValueError):
    """Raised when a filename could escape the storage root."""


@dataclass(frozen=True)
class StoredObject:
    filename: str
    original_filename: str
    size: int


def _extension(original_filename: str) -> str:
    name = PurePosixPath(original_filename.replace("\\", "/")).name
    suffix = PurePosixPath(name).suffix
    return suffix if _EXTENSION_RE.fullmatch(suffix) else ""


def generate_filename(original_filename: str) -> str:
    return f"{uuid4()}{_extension(original_filename)}"


class LocalStorageService:
    """Flat directory of uploaded objects addressed by filename."""

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path).resolve()

    def _key_path(self, filename: str) -> Path:
        """Blocking: resolves symlinks, call from a worker thread."""
        if (
            not filename
            or filename.startswith(".")
            or not filename.isprintable()
            or any(char in filename for char in _FORBIDDEN_CHARS)
        ):
            raise InvalidFilenameError(filename)
        # Resolving also catches symlinks that point out of the root
        candidate = (self.base_path / filename).resolve()
        if candidate.parent != self.base_path:
            raise InvalidFilenameError(filename)
        return candidate

    def _write_atomic(self, target: Path, source: BinaryIO) -> int:
        # Fixed-length name so long targets cannot overflow NAME_MAX
        temp_path = self.base_path / f".{uuid4().hex}.tmp"
        try:
            handle = temp_path.open("xb")
        except OSError as exc:
            logger.exception("Failed to create %s", temp_path)
            raise StorageError("Failed to create file.") from exc

        size = 0
        try:
            with handle:
                while chunk := source.read(CHUNK_SIZE):
                    handle.write(chunk)
                    size += len(chunk)
            os.replace(temp_path, target)
        except OSError as exc:
            logger.exception("Failed to write %s", target)
            temp_path.unlink(missing_ok=True)
            raise StorageError("Failed to save file.") from exc
        return size

    async def save_new(self, original_filename: str, source: BinaryIO) -> StoredObject:
        filename = generate_filename(original_filename)
        target = self.base_path / filename

        def _save() -> int:
            try:
                self.base_path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.exception("Failed to create upload directory %s", self.base_path)
                raise StorageError("Failed to create upload directory.") from exc
            return self._write_atomic(target, source)

        size = await asyncio.to_thread(_save)
        return StoredObject(filename=filename, original_filename=original_filename, size=size)

    async def ensure_exists(self, filename: str) -> Path:
        def _check() -> Path:
            path = self._key_path(filename)
            if not path.is_file():
                raise FileNotFoundError(filename)
            return path

        return await asyncio.to_thread(_check)

    async def replace(self, filename: str, source: BinaryIO) -> int:
        def _replace() -> int:
            return self._write_atomic(self._key_path(filename), source)

        return await asyncio.to_thread(_replace)

    async def open_for_download(self, filename: str) -> Path:
        def _probe() -> Path:
            path = self._key_path(filename)
            try:
                with path.open("rb"):
                    pass
            except OSError:
                raise FileNotFoundError(filename) from None
            return path

        return await asyncio.to_thread(_probe)

    async def delete(self, filename: str) -> None:
        def _remove() -> None:
            path = self._key_path(filename)
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("Failed to remove %s: %s", path, exc)
                raise StorageError("Failed to remove file.") from exc

        await asyncio.to_thread(_remove)
