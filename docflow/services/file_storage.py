"""Filesystem storage for uploaded document bytes."""

from __future__ import annotations

import logging
import posixpath
import re
import secrets
import shutil
from pathlib import Path, PurePosixPath

LOGGER = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class PathTraversalError(ValueError):
    """Raised when a stored path would resolve outside the upload root."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Invalid stored path: {path!r}")
        self.path = path


def sanitize_filename(filename: str) -> str:
    """Return a filesystem-safe version of the provided filename."""

    # Client names may carry either separator regardless of the server OS.
    name = re.split(r"[\\/]", filename or "")[-1]
    cleaned = _UNSAFE_CHARS.sub("_", name)
    if cleaned in {"", ".", ".."}:
        return f"document-{secrets.token_hex(8)}"
    return cleaned


class FileStorage:
    """Persist uploads as ``{root}/{record_id}/{safe_name}``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def document_dir(self, record_id: int) -> Path:
        return self.root / str(record_id)

    def save(self, record_id: int, original_name: str, data: bytes) -> str:
        """Write ``data`` for ``record_id`` and return the path relative to the root."""

        safe_name = sanitize_filename(original_name)
        directory = self.document_dir(record_id)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / safe_name).write_bytes(data)
        LOGGER.debug("Stored %d bytes for document %s as %s", len(data), record_id, safe_name)
        return f"{record_id}/{safe_name}"

    def resolve(self, relative_path: str) -> Path:
        """Return the absolute path for a stored path, refusing anything outside the root."""

        candidate = (relative_path or "").replace("\\", "/")
        normalized = posixpath.normpath(candidate)
        parts = PurePosixPath(normalized).parts
        if (
            not candidate
            or posixpath.isabs(normalized)
            or re.match(r"^[A-Za-z]:", normalized)
            or (parts and parts[0] == "..")
        ):
            raise PathTraversalError(relative_path)
        return self.root / normalized

    def exists(self, relative_path: str) -> bool:
        """Return whether the stored file is present; invalid paths count as missing."""

        try:
            return self.resolve(relative_path).is_file()
        except PathTraversalError:
            return False

    def remove(self, record_id: int) -> bool:
        """Delete every stored file belonging to ``record_id``."""

        directory = self.document_dir(record_id)
        if not directory.exists():
            return False
        shutil.rmtree(directory)
        return True


__all__ = ["FileStorage", "PathTraversalError", "sanitize_filename"]
