"""
File Credential Store - JSON file on local disk.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, List, Dict, Union
from momentum_auth.ports.store_port import CredentialStorePort

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path.home() / ".momentum" / "credentials.json"


class FileCredentialStore(CredentialStorePort):
    """
    Durable credential storage in a single JSON file.

    Every write rewrites the file through a temp file and os.replace, so
    a crash never leaves half a token pair on disk. The file is created
    with 0600 permissions.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize file store.

        Args:
            path: JSON file location (default ~/.momentum/credentials.json)
        """
        self._path = Path(path) if path else DEFAULT_PATH

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        """Read the whole file; a missing or corrupt file reads as empty."""
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self._path, e)
            return {}

        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, values: Dict[str, str]) -> None:
        """Atomically replace the file contents."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".credentials-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(values, f)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: Dict[str, str]) -> None:
        """Write several values in one file replacement."""
        data = self._load()
        data.update(values)
        self._save(data)

    def delete(self, *keys: str) -> int:
        data = self._load()
        removed = [k for k in keys if k in data]
        if not removed:
            return 0

        for key in removed:
            del data[key]
        self._save(data)
        return len(removed)

    def keys(self) -> List[str]:
        return list(self._load())
