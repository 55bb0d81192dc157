"""Mount and unmount execution for SMB and NFS remotes."""

import logging
import os
from typing import Dict, List, Optional, Tuple

from .credentials import CredentialCodec
from .errors import MountError
from .executor import CommandResult, CommandRunner
from .models import MountResult, RemoteShare, RemoteType
from .paths import MountPathResolver
from .validation import DEFAULT_SMB_VERSION

logger = logging.getLogger(__name__)


NFS_OPTIONS = 'vers=4,rsize=1048576,wsize=1048576,hard,intr,timeo=600'


class MountOrchestrator:
    """Builds mount command lines and drives mount/umount."""

    def __init__(self,
                 runner: CommandRunner,
                 resolver: MountPathResolver,
                 codec: CredentialCodec,
                 timeout: Optional[float] = None):
        self._runner = runner
        self._resolver = resolver
        self._codec = codec
        self._timeout = timeout

    def mount_path(self, remote: RemoteShare) -> str:
        return self._resolver.resolve(remote.server, remote.share)

    @staticmethod
    def _ownership_options(remote: RemoteShare) -> List[str]:
        options = []
        if remote.uid is not None:
            options.append(f"uid={remote.uid}")
        if remote.gid is not None:
            options.append(f"gid={remote.gid}")
        return options

    def build_mount_command(self,
                            remote: RemoteShare,
                            password: Optional[str] = None) -> Tuple[List[str], Dict[str, str]]:
        """
        Build the argv and extra environment for mounting a remote.

        Args:
            remote: Remote to mount
            password: Decrypted password, if any

        Returns:
            Tuple of (argv, env). The password travels in ``PASSWD`` so it
            never shows up in the process list or logs.
        """
        mount_path = self.mount_path(remote)
        env: Dict[str, str] = {}

        if remote.type == RemoteType.SMB:
            version = remote.version or DEFAULT_SMB_VERSION
            source = f"//{remote.server}/{remote.share.strip('/')}"

            if not remote.username or not password:
                options = ['guest', f"vers={version}"]
            else:
                options = [f"username={remote.username}", f"vers={version}"]
                if remote.domain:
                    options.append(f"domain={remote.domain}")
                env['PASSWD'] = password

            options.extend(self._ownership_options(remote))
            argv = ['mount', '-t', 'cifs', source, mount_path, '-o', ','.join(options)]

        elif remote.type == RemoteType.NFS:
            source = f"{remote.server}:/{remote.share.lstrip('/')}"
            options = [NFS_OPTIONS] + self._ownership_options(remote)
            argv = ['mount', '-t', 'nfs', source, mount_path, '-o', ','.join(options)]

        else:
            raise MountError(f"Unsupported remote type: {remote.type}")

        return argv, env

    def _create_mount_point(self, mount_path: str) -> None:
        try:
            os.makedirs(mount_path, exist_ok=True)
        except OSError as e:
            raise MountError(f"Failed to create mount point {mount_path}: {e}") from e
        logger.info(f"Created mount point: {mount_path}")

    @staticmethod
    def _raise_for_result(action: str, remote: RemoteShare, result: CommandResult) -> None:
        if result.success:
            return
        detail = result.stderr.strip() or result.stdout.strip() or f"exit status {result.exit_code}"
        raise MountError(
            f"Failed to {action} remote '{remote.name}': {detail}",
            stderr=result.stderr,
            exit_code=result.exit_code,
        )

    def mount(self, remote: RemoteShare) -> MountResult:
        """
        Mount a remote at its resolved mount point.

        Raises:
            MountError: If the mount point cannot be created or mount fails
            DecryptionError: If the stored password cannot be decrypted
        """
        mount_path = self.mount_path(remote)
        self._create_mount_point(mount_path)

        password = self._codec.decrypt(remote.password) if remote.password else None
        argv, env = self.build_mount_command(remote, password)

        logger.info(f"Mounting remote: {remote.name}")
        result = self._runner.run(argv, timeout=self._timeout, env=env or None)
        self._raise_for_result('mount', remote, result)

        logger.info(f"Successfully mounted remote: {remote.name} at {mount_path}")
        return MountResult(True, f"Remote '{remote.name}' mounted successfully", mount_path)

    def unmount(self, remote: RemoteShare) -> MountResult:
        """
        Unmount a remote and clean up its now-empty directories.

        Raises:
            MountError: If umount fails or times out
        """
        mount_path = self.mount_path(remote)

        logger.info(f"Unmounting remote: {remote.name}")
        result = self._runner.run(['umount', mount_path], timeout=self._timeout)
        self._raise_for_result('unmount', remote, result)

        logger.info(f"Successfully unmounted remote: {remote.name}")
        self.cleanup_mount_point(remote.server, remote.share)
        return MountResult(True, f"Remote '{remote.name}' unmounted successfully", mount_path)

    def cleanup_mount_point(self, server: str, share: str) -> None:
        """Remove the share directory and, if now empty, the server directory.

        Best effort: failures are logged and never raised.
        """
        share_path = self._resolver.resolve(server, share)
        server_path = self._resolver.server_dir(server)

        try:
            os.rmdir(share_path)
            logger.info(f"Removed empty share directory: {share_path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove share directory {share_path}: {e}")

        try:
            if os.path.isdir(server_path) and not os.listdir(server_path):
                os.rmdir(server_path)
                logger.info(f"Removed empty server directory: {server_path}")
        except OSError as e:
            logger.warning(f"Could not remove server directory {server_path}: {e}")
