"""Error taxonomy for remote mount management."""
from __future__ import annotations

from typing import Any, Dict


class RemoteMountError(Exception):
    """Base error; carries the HTTP status the API layer should answer with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(RemoteMountError):
    status_code = 400

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "field": self.field}


class NotFoundError(RemoteMountError):
    status_code = 404


class ConflictError(RemoteMountError):
    status_code = 409


class FeatureDisabledError(RemoteMountError):
    status_code = 403

    def __init__(self, message: str = "Remote mounting is disabled in network settings") -> None:
        super().__init__(message)


class MountError(RemoteMountError):
    """An external mount tool exited non-zero or timed out."""

    def __init__(self, message: str, stderr: str = "", exit_code: int | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.exit_code is not None:
            payload["exit_code"] = self.exit_code
        if self.stderr:
            payload["stderr"] = self.stderr
        return payload


class DecryptionError(RemoteMountError):
    pass


class DiscoveryError(RemoteMountError):
    status_code = 502


class StoreError(RemoteMountError):
    pass
