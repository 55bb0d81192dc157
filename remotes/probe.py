"""Live mount state detection from the kernel mount table."""

import logging
import os
import re
from typing import Set

logger = logging.getLogger(__name__)

_OCTAL_ESCAPE = re.compile(r'\\([0-7]{3})')


def _unescape(field: str) -> str:
    """Decode the octal escapes /proc/mounts uses for spaces, tabs, etc."""
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


class MountStateProber:
    """Answers "is this path a mount target right now?"."""

    DEFAULT_MOUNTS_FILE = "/proc/mounts"

    def __init__(self, mounts_file: str = DEFAULT_MOUNTS_FILE):
        self.mounts_file = mounts_file

    def mount_targets(self) -> Set[str]:
        """
        Read the set of current mount targets.

        Raises:
            OSError: If the mount table cannot be read
        """
        targets = set()
        with open(self.mounts_file, 'r') as f:
            for line in f:
                parts = line.split()
                if len(parts) >= 2:
                    targets.add(_unescape(parts[1]))
        return targets

    def is_mounted(self, path: str) -> bool:
        """Return True if ``path`` is currently a mount target.

        An unreadable mount table is reported as "not mounted".
        """
        try:
            targets = self.mount_targets()
        except OSError as e:
            logger.warning(f"Could not check mount status for {path}: {e}")
            return False
        return os.path.normpath(path) in targets
