from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def load_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """Load a secret from ``NAME`` or ``NAME_FILE`` environment variables."""
    file_var = os.getenv(f"{name}_FILE")
    if file_var:
        path = Path(file_var)
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    value = os.getenv(name)
    if value is not None:
        return value.strip()
    return default


def load_config() -> Dict[str, object]:
    """Read settings from the environment (call after ``load_dotenv``)."""
    return {
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO').upper(),

        # Remote share registry and mount layout
        'REMOTES_FILE': os.getenv('REMOTES_FILE', '/boot/config/remotes.json'),
        'REMOTES_MOUNT_BASE': os.getenv('REMOTES_MOUNT_BASE', '/mnt/remotes'),
        'REMOTES_MOUNTS_FILE': os.getenv('REMOTES_MOUNTS_FILE', '/proc/mounts'),

        # Feature flag source (services.remote_mounting.enabled)
        'NETWORK_SETTINGS_FILE': os.getenv('NETWORK_SETTINGS_FILE', '/boot/config/network.json'),

        # Password encryption secret; shared with the auth layer by default
        'REMOTES_SECRET': load_secret('REMOTES_SECRET') or load_secret('JWT_SECRET'),

        # External tools
        'REMOTES_COMMAND_TIMEOUT': _env_float('REMOTES_COMMAND_TIMEOUT', 60.0),
        'REMOTES_DRY_RUN': _env_bool('REMOTES_DRY_RUN', False),
    }
