"""Structural and semantic validation of remote share records."""

import re
from typing import Any, Mapping

from .errors import ValidationError
from .models import RemoteType


REQUIRED_FIELDS = ('name', 'type', 'server', 'share')
SMB_VERSIONS = ('1.0', '2.0', '3.0')
DEFAULT_SMB_VERSION = '3.0'

SERVER_PATTERN = re.compile(
    r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
    r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
    r'|^[a-zA-Z0-9.-]+$'
)

_OPTIONAL_STRINGS = ('username', 'password', 'domain')
_TYPES = tuple(t.value for t in RemoteType)


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ''


def type_value(value: Any) -> Any:
    return value.value if isinstance(value, RemoteType) else value


def validate_server(server: Any) -> None:
    if _is_blank(server):
        raise ValidationError('server', "Field 'server' is required")
    if not isinstance(server, str) or not SERVER_PATTERN.match(server.strip()):
        raise ValidationError('server', 'Invalid server format')


def validate_type(remote_type: Any) -> None:
    if _is_blank(remote_type):
        raise ValidationError('type', "Field 'type' is required")
    if type_value(remote_type) not in _TYPES:
        raise ValidationError('type', "Type must be 'smb' or 'nfs'")


def _validate_id_number(data: Mapping[str, Any], field: str) -> None:
    value = data.get(field)
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(field, f"{field.upper()} must be a non-negative integer or null")


def validate_remote(data: Mapping[str, Any]) -> None:
    """
    Validate a candidate remote before create/update.

    Args:
        data: Mapping with the remote's fields (raw input or merged record)

    Raises:
        ValidationError: Naming the first offending field
    """
    for field in REQUIRED_FIELDS:
        if _is_blank(type_value(data.get(field))):
            raise ValidationError(field, f"Field '{field}' is required")

    validate_type(data.get('type'))

    for field in ('name', 'share'):
        if not isinstance(data.get(field), str):
            raise ValidationError(field, f"Field '{field}' must be a string")

    for field in _OPTIONAL_STRINGS:
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            raise ValidationError(field, f"Field '{field}' must be a string")

    version = data.get('version')
    if version is not None:
        if type_value(data.get('type')) != RemoteType.SMB.value:
            raise ValidationError('version', 'Version is only supported for SMB remotes')
        if version not in SMB_VERSIONS:
            raise ValidationError('version', "SMB version must be '1.0', '2.0', or '3.0'")

    _validate_id_number(data, 'uid')
    _validate_id_number(data, 'gid')

    auto_mount = data.get('auto_mount')
    if auto_mount is not None and not isinstance(auto_mount, bool):
        raise ValidationError('auto_mount', "Field 'auto_mount' must be a boolean")

    validate_server(data.get('server'))


def validate_probe_target(server: Any, remote_type: Any) -> None:
    """Validate the input of a share listing request."""
    if _is_blank(server) or _is_blank(remote_type):
        raise ValidationError('server' if _is_blank(server) else 'type', 'Server and type are required')
    validate_type(remote_type)
    validate_server(server)
