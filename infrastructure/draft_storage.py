"""
File-backed draft storage.

Each key is stored as one file under a base directory. Writes go to a
temp file in the same directory followed by os.replace(), so a reader
sees either the previous value or the new one, never a partial write.
"""

import logging
import os
import pathlib
import re
import tempfile
from typing import Optional, Union

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileDraftStorage:
    """
    DraftStorage implementation on the local filesystem.

    Args:
        base_dir: Directory holding one ``<key>.json`` file per key
    """

    def __init__(self, base_dir: Union[str, pathlib.Path]):
        self._base_dir = pathlib.Path(base_dir)

    @property
    def base_dir(self) -> pathlib.Path:
        return self._base_dir

    def _path_for(self, key: str) -> pathlib.Path:
        safe_key = _UNSAFE_KEY_CHARS.sub("_", key)
        return self._base_dir / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        """
        Atomically replace the value stored under ``key``.

        Raises:
            OSError: If the directory cannot be created or the write fails
        """
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=str(path.parent),
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as tmp_file:
                tmp_file.write(value)
                tmp_path = tmp_file.name

            os.replace(tmp_path, str(path))
        except OSError:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def remove(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass
