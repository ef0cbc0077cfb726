"""Media content store interface and implementations."""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable
from pathlib import Path, PurePosixPath

from loguru import logger

from src.sso_reconcile.core.errors import ContentStoreError


class ContentStore(ABC):
    """Abstract interface for the media file system."""

    @abstractmethod
    async def write_file(
        self, path: str, chunks: AsyncIterable[bytes], overwrite: bool = True
    ) -> None:
        """Write a stream of bytes to ``path``.

        Args:
            path: Relative media path using ``/`` separators
            chunks: Body of the file
            overwrite: Replace an existing file instead of failing

        Raises:
            ContentStoreError: If the file cannot be written
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass


def _normalize(path: str) -> PurePosixPath:
    relative = PurePosixPath(path)
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise ContentStoreError(f"Invalid media path: {path!r}")
    return relative


class LocalFileContentStore(ContentStore):
    """Content store writing below a root folder on the local file system."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def full_path(self, path: str) -> Path:
        return self._root.joinpath(*_normalize(path).parts)

    async def write_file(
        self, path: str, chunks: AsyncIterable[bytes], overwrite: bool = True
    ) -> None:
        target = self.full_path(path)
        if target.exists() and not overwrite:
            raise ContentStoreError(f"Media file already exists: {path}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".", suffix=".part")
        except OSError as e:
            raise ContentStoreError(f"Unable to create media file {path}: {e}") from e

        size = 0
        try:
            with os.fdopen(fd, "wb") as f:
                async for chunk in chunks:
                    f.write(chunk)
                    size += len(chunk)
            os.replace(tmp_name, target)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ContentStoreError(f"Unable to write media file {path}: {e}") from e
        except BaseException:
            # Interrupted stream (network error, cancellation): leave no partial file
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Wrote media file {} ({} bytes)", path, size)

    async def exists(self, path: str) -> bool:
        return self.full_path(path).exists()


class InMemoryContentStore(ContentStore):
    """Content store keeping files in memory."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.writes: list[str] = []

    async def write_file(
        self, path: str, chunks: AsyncIterable[bytes], overwrite: bool = True
    ) -> None:
        key = str(_normalize(path))
        if key in self.files and not overwrite:
            raise ContentStoreError(f"Media file already exists: {path}")
        body = b""
        async for chunk in chunks:
            body += chunk
        self.files[key] = body
        self.writes.append(key)

    async def exists(self, path: str) -> bool:
        return str(_normalize(path)) in self.files
