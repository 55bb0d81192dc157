"""Feature flag lookup for remote mounting."""

import json
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class FeatureFlagProvider(ABC):
    """Reports whether remote mounting is administratively enabled."""

    @abstractmethod
    def is_remote_mounting_enabled(self) -> bool:
        raise NotImplementedError


class StaticFlagProvider(FeatureFlagProvider):
    def __init__(self, enabled: bool):
        self.enabled = enabled

    def is_remote_mounting_enabled(self) -> bool:
        return self.enabled


class NetworkSettingsFlagProvider(FeatureFlagProvider):
    """Reads ``services.remote_mounting.enabled`` from the network settings file.

    The file is re-read on every call so a settings change takes effect on the
    next request.
    """

    DEFAULT_PATH = "/boot/config/network.json"

    def __init__(self, path: str = DEFAULT_PATH):
        self.path = path

    def is_remote_mounting_enabled(self) -> bool:
        try:
            with open(self.path, 'r') as f:
                settings = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to check remote mounting setting, defaulting to disabled: {e}")
            return False

        if not isinstance(settings, dict):
            return False
        services = settings.get('services') or {}
        remote_mounting = services.get('remote_mounting') if isinstance(services, dict) else None
        if not isinstance(remote_mounting, dict):
            return False
        return remote_mounting.get('enabled') is True
