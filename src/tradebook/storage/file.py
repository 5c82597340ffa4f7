"""Local JSON-file key-value store, one file per key."""

from __future__ import annotations

import contextlib
import logging
import os
import re
from pathlib import Path

from tradebook.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _key_path(root: Path, key: str) -> Path:
    """Map a key to its file, e.g. 'customCoins' -> <root>/customCoins.json.

    Raises:
        ValueError: If the key could escape the store directory.
    """
    if not _KEY_PATTERN.match(key) or key.startswith("."):
        raise ValueError(f"Invalid storage key: {key!r}")
    return root / f"{key}.json"


class FileStore(KeyValueStore):
    """Stores each key as ``<root>/<key>.json``.

    Writes go to a ``.tmp`` sibling first and are moved into place with
    os.replace, so a crash never leaves a half-written value behind.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()

    @property
    def name(self) -> str:
        return "file"

    @property
    def root(self) -> Path:
        return self._root

    def get(self, key: str) -> str | None:
        path = _key_path(self._root, key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = _key_path(self._root, key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(value), path)

    def delete(self, key: str) -> None:
        path = _key_path(self._root, key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FileStore(root={str(self._root)!r})"
