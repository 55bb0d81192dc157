"""
Persistence for the remote share registry.

The registry is one JSON document holding every remote. Each mutation loads
the full set, changes it and saves the full set back.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import List

from .errors import StoreError
from .models import RemoteShare

logger = logging.getLogger(__name__)


class RemoteStore(ABC):
    """Load/save the complete set of remotes."""

    @abstractmethod
    def load(self) -> List[RemoteShare]:
        raise NotImplementedError

    @abstractmethod
    def save(self, remotes: List[RemoteShare]) -> None:
        raise NotImplementedError


class JsonRemoteStore(RemoteStore):
    """Registry stored as a JSON array in a single file."""

    DEFAULT_PATH = "/boot/config/remotes.json"
    FILE_MODE = 0o600

    def __init__(self, path: str = DEFAULT_PATH):
        self.path = path

    def load(self) -> List[RemoteShare]:
        if not os.path.exists(self.path):
            return []

        try:
            with open(self.path, 'r') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to load remotes: {e}") from e

        if not isinstance(raw, list):
            raise StoreError(f"Failed to load remotes: {self.path} does not contain a list")

        try:
            return [RemoteShare.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to load remotes: invalid record ({e})") from e

    def save(self, remotes: List[RemoteShare]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        payload = [remote.to_dict() for remote in remotes]

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".remotes-", suffix=".tmp")
            try:
                with os.fdopen(fd, 'w') as f:
                    json.dump(payload, f, indent=2)
                os.chmod(tmp_path, self.FILE_MODE)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreError(f"Failed to save remotes: {e}") from e

        logger.debug(f"Saved {len(remotes)} remotes to {self.path}")


class InMemoryRemoteStore(RemoteStore):
    """Registry held in process memory; records are copied on the way in and out."""

    def __init__(self, remotes: List[RemoteShare] = None):
        self._records = [remote.to_dict() for remote in (remotes or [])]

    def load(self) -> List[RemoteShare]:
        return [RemoteShare.from_dict(item) for item in self._records]

    def save(self, remotes: List[RemoteShare]) -> None:
        self._records = [remote.to_dict() for remote in remotes]
