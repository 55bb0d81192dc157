"""Deterministic mount point layout for remote shares."""

import os
import re


_SERVER_UNSAFE = re.compile(r'[^a-zA-Z0-9.-]')
_SHARE_UNSAFE = re.compile(r'[^a-zA-Z0-9_-]')


def sanitize_server(server: str) -> str:
    """Replace every character outside ``[A-Za-z0-9.-]`` with ``_``."""
    cleaned = _SERVER_UNSAFE.sub('_', server)
    # "." and ".." are the only dot-only names that survive the allow-list
    if cleaned and set(cleaned) == {'.'}:
        cleaned = '_' * len(cleaned)
    return cleaned


def sanitize_share(share: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_``."""
    return _SHARE_UNSAFE.sub('_', share)


class MountPathResolver:
    """Maps (server, share) to ``<mount_base>/<server>/<share>``."""

    DEFAULT_MOUNT_BASE = "/mnt/remotes"

    def __init__(self, mount_base: str = DEFAULT_MOUNT_BASE):
        self.mount_base = os.path.normpath(mount_base)

    def server_dir(self, server: str) -> str:
        return os.path.join(self.mount_base, sanitize_server(server))

    def resolve(self, server: str, share: str) -> str:
        return os.path.join(self.server_dir(server), sanitize_share(share))
