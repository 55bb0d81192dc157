"""Remote mount manager: CRUD and mount lifecycle for SMB/NFS remotes."""

import logging
import threading
import uuid
import weakref
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .credentials import CredentialCodec
from .discovery import ShareDiscovery
from .errors import ConflictError, FeatureDisabledError, NotFoundError, RemoteMountError
from .executor import SubprocessCommandRunner
from .models import (
    ConnectionTestResult,
    MountResult,
    MountState,
    RemoteShare,
    RemoteShareUpdate,
    RemoteStatus,
    RemoteType,
    UNSET,
    UnmountAllResult,
)
from .orchestrator import MountOrchestrator
from .paths import MountPathResolver
from .probe import MountStateProber
from .settings import FeatureFlagProvider, NetworkSettingsFlagProvider
from .store import JsonRemoteStore, RemoteStore
from .validation import DEFAULT_SMB_VERSION, validate_remote

logger = logging.getLogger(__name__)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _optional(value: Any) -> Any:
    """Trimmed string, or None for blank input."""
    if isinstance(value, str):
        return value.strip() or None
    return value


def _optional_secret(value: Any) -> Any:
    """Like _optional, but keeps the password exactly as typed."""
    if isinstance(value, str):
        return value if value.strip() else None
    return value


class RemoteMountManager:
    """
    Facade over the remote share registry and the mount tools.

    Every operation loads the registry fresh and probes live mount state;
    nothing is cached between calls.
    """

    def __init__(self,
                 store: RemoteStore,
                 codec: CredentialCodec,
                 resolver: MountPathResolver,
                 prober: MountStateProber,
                 orchestrator: MountOrchestrator,
                 discovery: ShareDiscovery,
                 flags: FeatureFlagProvider):
        self._store = store
        self._codec = codec
        self._resolver = resolver
        self._prober = prober
        self._orchestrator = orchestrator
        self._discovery = discovery
        self._flags = flags

        # entries disappear once no caller holds a reference to the lock
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    # -- helpers -----------------------------------------------------------

    def _lock_for(self, mount_path: str) -> threading.RLock:
        """Advisory lock serializing probe-then-act on one mount point."""
        with self._locks_guard:
            lock = self._locks.get(mount_path)
            if lock is None:
                lock = self._locks[mount_path] = threading.RLock()
            return lock

    def _require_enabled(self) -> None:
        if not self._flags.is_remote_mounting_enabled():
            raise FeatureDisabledError()

    def _find(self, remotes: List[RemoteShare], remote_id: str) -> Tuple[int, RemoteShare]:
        for index, remote in enumerate(remotes):
            if remote.id == remote_id:
                return index, remote
        raise NotFoundError(f"Remote with ID {remote_id} not found")

    def _mount_path(self, remote: RemoteShare) -> str:
        return self._resolver.resolve(remote.server, remote.share)

    def _state(self, remote: RemoteShare) -> MountState:
        if self._prober.is_mounted(self._mount_path(remote)):
            return MountState.MOUNTED
        return MountState.UNMOUNTED

    def _public(self, remote: RemoteShare) -> Dict[str, Any]:
        return remote.to_public_dict(self._state(remote))

    @staticmethod
    def _name_taken(remotes: List[RemoteShare], name: str, exclude_id: Optional[str] = None) -> bool:
        return any(r.name == name and r.id != exclude_id for r in remotes)

    def _require_free_mount_point(self,
                                  remotes: List[RemoteShare],
                                  server: str,
                                  share: str,
                                  exclude_id: Optional[str] = None) -> None:
        """Reject a (server, share) whose sanitized mount point belongs to a different share."""
        mount_path = self._resolver.resolve(server, share)
        for other in remotes:
            if other.id == exclude_id or (other.server, other.share) == (server, share):
                continue
            if self._mount_path(other) == mount_path:
                raise ConflictError(
                    f"Mount point {mount_path} is already used by remote '{other.name}' "
                    f"({other.server}/{other.share})"
                )

    # -- queries -----------------------------------------------------------

    def list(self) -> List[Dict[str, Any]]:
        """List all remotes with live status and masked passwords."""
        return [self._public(remote) for remote in self._store.load()]

    def get(self, remote_id: str) -> Dict[str, Any]:
        _, remote = self._find(self._store.load(), remote_id)
        return self._public(remote)

    def status(self, remote_id: str) -> RemoteStatus:
        _, remote = self._find(self._store.load(), remote_id)
        return RemoteStatus(remote.id, remote.name, self._state(remote), self._mount_path(remote))

    # -- mutations ---------------------------------------------------------

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a remote, optionally mounting it right away.

        Raises:
            FeatureDisabledError: If remote mounting is disabled
            ValidationError: If the input is invalid
            ConflictError: If the name is already in use, or the mount point
                belongs to another share
        """
        self._require_enabled()
        validate_remote(data)

        remotes = self._store.load()
        name = data['name'].strip()
        if self._name_taken(remotes, name):
            raise ConflictError(f"Remote with name '{name}' already exists")
        self._require_free_mount_point(remotes, data['server'].strip(), data['share'].strip())

        remote_type = RemoteType(data['type'])
        password = _optional_secret(data.get('password'))
        remote = RemoteShare(
            id=uuid.uuid4().hex,
            name=name,
            type=remote_type,
            server=data['server'].strip(),
            share=data['share'].strip(),
            username=_optional(data.get('username')),
            password=self._codec.encrypt(password) if password else None,
            domain=_optional(data.get('domain')),
            version=data.get('version') or (DEFAULT_SMB_VERSION if remote_type == RemoteType.SMB else None),
            uid=data.get('uid'),
            gid=data.get('gid'),
            auto_mount=bool(data.get('auto_mount', False)),
        )

        remotes.append(remote)
        self._store.save(remotes)
        logger.info(f"Created remote: {remote.name} ({remote.id})")

        if remote.auto_mount:
            try:
                logger.info(f"Auto-mounting remote: {remote.name}")
                self.mount(remote.id)
            except RemoteMountError as e:
                logger.warning(f"Failed to auto-mount remote {remote.name}: {e.message}")

        return self._public(remote)

    def _changes(self, remote: RemoteShare, patch: RemoteShareUpdate, field: str) -> bool:
        value = getattr(patch, field)
        if value is UNSET:
            return False
        current = remote.type.value if field == 'type' else getattr(remote, field)
        if isinstance(value, RemoteType):
            value = value.value
        return _strip(value) != current

    def _merge(self, remote: RemoteShare, patch: RemoteShareUpdate) -> Dict[str, Any]:
        """Apply a patch field by field; a supplied password stays plaintext here."""
        merged = remote.to_dict()

        if patch.name is not UNSET:
            merged['name'] = _strip(patch.name)
        if patch.type is not UNSET:
            merged['type'] = patch.type.value if isinstance(patch.type, RemoteType) else patch.type
        if patch.server is not UNSET:
            merged['server'] = _strip(patch.server)
        if patch.share is not UNSET:
            merged['share'] = _strip(patch.share)
        if patch.username is not UNSET:
            merged['username'] = _optional(patch.username)
        if patch.password is not UNSET:
            merged['password'] = _optional_secret(patch.password)
        if patch.domain is not UNSET:
            merged['domain'] = _optional(patch.domain)

        type_changed = merged['type'] != remote.type.value
        if patch.version is not UNSET and patch.version is not None:
            merged['version'] = patch.version
        elif type_changed or patch.version is None:
            merged['version'] = DEFAULT_SMB_VERSION if merged['type'] == RemoteType.SMB.value else None

        if patch.uid is not UNSET:
            merged['uid'] = patch.uid
        if patch.gid is not UNSET:
            merged['gid'] = patch.gid
        if patch.auto_mount is not UNSET:
            merged['auto_mount'] = patch.auto_mount

        return merged

    def update(self,
               remote_id: str,
               patch: Union[RemoteShareUpdate, Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Update a remote.

        Raises:
            NotFoundError: If the remote does not exist
            ConflictError: If server/share/type change while mounted, the new
                name is already in use, or the new mount point belongs to
                another share
            ValidationError: If the merged record is invalid
        """
        if not isinstance(patch, RemoteShareUpdate):
            patch = RemoteShareUpdate.from_dict(patch)

        remotes = self._store.load()
        index, remote = self._find(remotes, remote_id)
        old_path = self._mount_path(remote)

        with self._lock_for(old_path):
            if self._prober.is_mounted(old_path):
                if any(self._changes(remote, patch, f) for f in RemoteShareUpdate.IMMUTABLE_WHILE_MOUNTED):
                    raise ConflictError(
                        'Cannot update server, share, or type while remote is mounted. Unmount first.'
                    )

            merged = self._merge(remote, patch)
            validate_remote(merged)

            if merged['name'] != remote.name and self._name_taken(remotes, merged['name'], remote.id):
                raise ConflictError(f"Remote with name '{merged['name']}' already exists")
            self._require_free_mount_point(remotes, merged['server'], merged['share'], remote.id)

            if patch.password is not UNSET:
                merged['password'] = self._codec.encrypt(merged['password']) or None

            updated = RemoteShare.from_dict(merged)
            remotes[index] = updated
            self._store.save(remotes)

        if self._mount_path(updated) != old_path:
            self._orchestrator.cleanup_mount_point(remote.server, remote.share)

        logger.info(f"Updated remote: {updated.name} ({updated.id})")
        return self._public(updated)

    def delete(self, remote_id: str) -> Dict[str, Any]:
        """
        Delete an unmounted remote and clean up its empty directories.

        Raises:
            NotFoundError: If the remote does not exist
            ConflictError: If the remote is mounted
        """
        remotes = self._store.load()
        index, remote = self._find(remotes, remote_id)
        mount_path = self._mount_path(remote)

        with self._lock_for(mount_path):
            if self._prober.is_mounted(mount_path):
                raise ConflictError('Cannot delete mounted remote. Unmount first.')

            del remotes[index]
            self._store.save(remotes)
            self._orchestrator.cleanup_mount_point(remote.server, remote.share)

        logger.info(f"Deleted remote: {remote.name} ({remote.id})")
        return remote.to_public_dict(MountState.UNMOUNTED)

    # -- lifecycle ---------------------------------------------------------

    def mount(self, remote_id: str) -> MountResult:
        """
        Mount a remote.

        Raises:
            FeatureDisabledError: If remote mounting is disabled
            NotFoundError: If the remote does not exist
            ConflictError: If it is already mounted
            MountError: If the mount tool fails
        """
        self._require_enabled()
        _, remote = self._find(self._store.load(), remote_id)
        mount_path = self._mount_path(remote)

        with self._lock_for(mount_path):
            if self._prober.is_mounted(mount_path):
                raise ConflictError('Remote is already mounted')
            return self._orchestrator.mount(remote)

    def unmount(self, remote_id: str) -> MountResult:
        """
        Unmount a remote.

        Raises:
            NotFoundError: If the remote does not exist
            ConflictError: If it is not mounted
            MountError: If umount fails
        """
        _, remote = self._find(self._store.load(), remote_id)
        mount_path = self._mount_path(remote)

        with self._lock_for(mount_path):
            if not self._prober.is_mounted(mount_path):
                raise ConflictError('Remote is not mounted')
            return self._orchestrator.unmount(remote)

    def unmount_all(self) -> UnmountAllResult:
        """Unmount every mounted remote, collecting failures instead of stopping."""
        mounted = [r for r in self._store.load() if self._state(r) == MountState.MOUNTED]
        result = UnmountAllResult(total_mounted=len(mounted))

        for remote in mounted:
            try:
                self.unmount(remote.id)
                result.unmounted_count += 1
                logger.info(f"Unmounted remote: {remote.name} ({remote.server}/{remote.share})")
            except RemoteMountError as e:
                result.errors.append(f"Failed to unmount {remote.name}: {e.message}")

        return result

    # -- probes ------------------------------------------------------------

    def list_server_shares(self,
                           server: str,
                           remote_type: str,
                           username: Optional[str] = None,
                           password: Optional[str] = None,
                           domain: Optional[str] = None) -> List[str]:
        return self._discovery.list_server_shares(server, remote_type, username, password, domain)

    def connection_test(self, data: Mapping[str, Any]) -> ConnectionTestResult:
        return self._discovery.connection_test(data)


def build_manager(config: Mapping[str, Any]) -> RemoteMountManager:
    """Wire a RemoteMountManager from configuration values."""
    timeout = config.get('REMOTES_COMMAND_TIMEOUT')
    runner = SubprocessCommandRunner(
        default_timeout=timeout or SubprocessCommandRunner.DEFAULT_TIMEOUT,
        dry_run=bool(config.get('REMOTES_DRY_RUN', False)),
    )
    resolver = MountPathResolver(config.get('REMOTES_MOUNT_BASE') or MountPathResolver.DEFAULT_MOUNT_BASE)
    codec = CredentialCodec(config.get('REMOTES_SECRET'))

    return RemoteMountManager(
        store=JsonRemoteStore(config.get('REMOTES_FILE') or JsonRemoteStore.DEFAULT_PATH),
        codec=codec,
        resolver=resolver,
        prober=MountStateProber(config.get('REMOTES_MOUNTS_FILE') or MountStateProber.DEFAULT_MOUNTS_FILE),
        orchestrator=MountOrchestrator(runner, resolver, codec, timeout),
        discovery=ShareDiscovery(runner, timeout),
        flags=NetworkSettingsFlagProvider(
            config.get('NETWORK_SETTINGS_FILE') or NetworkSettingsFlagProvider.DEFAULT_PATH
        ),
    )
