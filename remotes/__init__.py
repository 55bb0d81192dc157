"""SMB/NFS remote share registry and mount management."""

from .errors import (
    ConflictError,
    DecryptionError,
    DiscoveryError,
    FeatureDisabledError,
    MountError,
    NotFoundError,
    RemoteMountError,
    StoreError,
    ValidationError,
)
from .manager import RemoteMountManager, build_manager

__all__ = [
    "ConflictError",
    "DecryptionError",
    "DiscoveryError",
    "FeatureDisabledError",
    "MountError",
    "NotFoundError",
    "RemoteMountError",
    "RemoteMountManager",
    "StoreError",
    "ValidationError",
    "build_manager",
]
