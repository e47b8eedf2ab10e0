# utils/file_storage.py
import os
import re
from pathlib import Path
from typing import List, Union

from loguru import logger

_FILE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


class InvalidFileIdError(ValueError):
    """The requested id could escape the storage directory or is malformed."""


class FileStorage:
    """Stores generated archives on disk under a single directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _path_for(self, file_id: str) -> Path:
        if not file_id or not _FILE_ID_PATTERN.match(file_id):
            raise InvalidFileIdError(f"Invalid file id: {file_id!r}")
        return self.root / file_id

    def store_file(self, file_id: str, data: bytes) -> Path:
        path = self._path_for(file_id)
        self.root.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".part")
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
        logger.info("Stored {} ({} bytes)", file_id, len(data))
        return path

    def has_file(self, file_id: str) -> bool:
        return self._path_for(file_id).is_file()

    def get_file_path(self, file_id: str) -> Path:
        path = self._path_for(file_id)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_id}")
        return path

    def read_file(self, file_id: str) -> bytes:
        return self.get_file_path(file_id).read_bytes()

    def delete_file(self, file_id: str) -> bool:
        path = self._path_for(file_id)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def get_all_file_ids(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir()
            if p.is_file() and not p.name.endswith(".part")
        )
