"""Data models for remote share management."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


PASSWORD_SENTINEL = "SECRET"


class RemoteType(Enum):
    """Supported network filesystem protocols."""
    SMB = "smb"
    NFS = "nfs"


class MountState(Enum):
    """Live mount state, probed from the kernel mount table."""
    MOUNTED = "mounted"
    UNMOUNTED = "unmounted"


class _Unset:
    """Marker for fields a partial update did not supply."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class RemoteShare:
    """A persisted remote share configuration."""
    id: str
    name: str
    type: RemoteType
    server: str
    share: str
    username: Optional[str] = None
    password: Optional[str] = None  # ciphertext token
    domain: Optional[str] = None
    version: Optional[str] = None
    uid: Optional[int] = None
    gid: Optional[int] = None
    auto_mount: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for persistence (password stays encrypted)."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "server": self.server,
            "share": self.share,
            "username": self.username,
            "password": self.password,
            "domain": self.domain,
            "version": self.version,
            "uid": self.uid,
            "gid": self.gid,
            "auto_mount": self.auto_mount,
        }

    def to_public_dict(self, status: MountState) -> Dict[str, Any]:
        """Serialize for API responses with live status and masked password."""
        data = self.to_dict()
        data["password"] = PASSWORD_SENTINEL
        data["status"] = status.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RemoteShare":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            type=RemoteType(data["type"]),
            server=data["server"],
            share=data["share"],
            username=data.get("username"),
            password=data.get("password"),
            domain=data.get("domain"),
            version=data.get("version"),
            uid=data.get("uid"),
            gid=data.get("gid"),
            auto_mount=bool(data.get("auto_mount", False)),
        )


@dataclass
class RemoteShareUpdate:
    """Partial update for a RemoteShare.

    Every field defaults to ``UNSET``; ``None`` is a real value meaning
    "clear this field".
    """
    name: Any = UNSET
    type: Any = UNSET
    server: Any = UNSET
    share: Any = UNSET
    username: Any = UNSET
    password: Any = UNSET
    domain: Any = UNSET
    version: Any = UNSET
    uid: Any = UNSET
    gid: Any = UNSET
    auto_mount: Any = UNSET

    IMMUTABLE_WHILE_MOUNTED = ("server", "share", "type")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RemoteShareUpdate":
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})

    def supplied(self) -> Dict[str, Any]:
        """Return only the fields the caller supplied."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


@dataclass
class MountResult:
    """Result from a mount/unmount operation."""
    success: bool
    message: str
    mount_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": self.success, "message": self.message}
        if self.mount_path:
            data["mountPath"] = self.mount_path
        return data


@dataclass
class UnmountAllResult:
    """Summary of a bulk unmount."""
    unmounted_count: int = 0
    total_mounted: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Unmounted {self.unmounted_count} of {self.total_mounted} remotes"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": True,
            "message": self.message,
            "unmountedCount": self.unmounted_count,
            "totalMounted": self.total_mounted,
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data


@dataclass
class ConnectionTestResult:
    """Outcome of a read-only reachability probe."""
    success: bool
    message: str
    type: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message, "type": self.type}


@dataclass
class RemoteStatus:
    """Point-in-time status of one remote."""
    id: str
    name: str
    status: MountState
    mount_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "mountPath": self.mount_path,
        }
