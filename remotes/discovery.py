"""Share discovery and connection testing against remote servers.

Nothing in here mounts anything or touches the registry.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import DiscoveryError, ValidationError
from .executor import CommandRunner
from .models import ConnectionTestResult, RemoteType
from .validation import type_value, validate_probe_target, validate_remote

logger = logging.getLogger(__name__)


class ShareDiscovery:
    """Lists shares on a server and checks reachability of a single share."""

    PING_TIMEOUT_SECONDS = 5

    def __init__(self, runner: CommandRunner, timeout: Optional[float] = None):
        self._runner = runner
        self._timeout = timeout

    @staticmethod
    def _smb_auth(username: Optional[str],
                  password: Optional[str],
                  domain: Optional[str]) -> Tuple[List[str], Dict[str, str]]:
        if username and password:
            args = ['-U', username]
            if domain:
                args.extend(['-W', domain])
            return args, {'PASSWD': password}
        return ['-N'], {}

    def _ping(self, server: str) -> bool:
        result = self._runner.run(
            ['ping', '-c', '1', '-W', str(self.PING_TIMEOUT_SECONDS), server],
            timeout=self._timeout,
        )
        return result.success

    def _nfs_exports(self, server: str) -> List[str]:
        """Return export paths from ``showmount -e`` (header line skipped)."""
        result = self._runner.run(['showmount', '-e', server], timeout=self._timeout)
        if not result.success:
            detail = result.stderr.strip() or f"exit status {result.exit_code}"
            raise DiscoveryError(f"showmount failed: {detail}")

        exports = []
        for line in result.stdout.splitlines()[1:]:
            parts = line.split()
            if parts:
                exports.append(parts[0])
        return exports

    def _list_smb_shares(self, server: str, username, password, domain) -> List[str]:
        auth_args, env = self._smb_auth(username, password, domain)
        argv = ['smbclient', '-L', f"//{server}", '-g'] + auth_args

        logger.info(f"Listing SMB shares from {server}")
        result = self._runner.run(argv, timeout=self._timeout, env=env or None)
        if not result.success:
            detail = result.stderr.strip() or f"exit status {result.exit_code}"
            raise DiscoveryError(f"Failed to list SMB shares from {server}: {detail}")

        shares = []
        for line in result.stdout.splitlines():
            parts = line.strip().split('|')
            if len(parts) >= 2 and parts[0] == 'Disk' and parts[1]:
                shares.append(parts[1])

        if not shares:
            raise DiscoveryError(
                f"Failed to list SMB shares from {server}: No shares found or connection failed"
            )
        return shares

    def _list_nfs_shares(self, server: str) -> List[str]:
        logger.info(f"Listing NFS exports from {server}")
        if not self._ping(server):
            raise DiscoveryError(f"Failed to list NFS exports from {server}: server is not reachable")

        try:
            exports = self._nfs_exports(server)
        except DiscoveryError as e:
            raise DiscoveryError(f"Failed to list NFS exports from {server}: {e.message}") from e

        shares = [path[1:] if path.startswith('/') else path for path in exports]
        if not shares:
            raise DiscoveryError(
                f"Failed to list NFS exports from {server}: No NFS exports found or connection failed"
            )
        return shares

    def list_server_shares(self,
                           server: str,
                           remote_type: str,
                           username: Optional[str] = None,
                           password: Optional[str] = None,
                           domain: Optional[str] = None) -> List[str]:
        """
        List shares exported by a server.

        Args:
            server: Server IP or hostname
            remote_type: 'smb' or 'nfs'
            username: Optional SMB username (guest access without it)
            password: Optional SMB password
            domain: Optional SMB domain

        Returns:
            Flat list of share names

        Raises:
            ValidationError: If server or type are missing or malformed
            DiscoveryError: If the server refuses or reports no shares
        """
        validate_probe_target(server, remote_type)
        server = server.strip()

        if type_value(remote_type) == RemoteType.SMB.value:
            return self._list_smb_shares(server, username, password, domain)
        return self._list_nfs_shares(server)

    def _test_smb(self, data: Mapping[str, Any]) -> ConnectionTestResult:
        server = data['server'].strip()
        share = data['share'].strip().strip('/')
        auth_args, env = self._smb_auth(data.get('username'), data.get('password'), data.get('domain'))

        logger.info(f"Testing SMB connection to {server}/{share}")
        result = self._runner.run(
            ['smbclient', f"//{server}/{share}"] + auth_args + ['-c', 'ls'],
            timeout=self._timeout,
            env=env or None,
        )
        if not result.success:
            detail = result.stderr.strip() or result.stdout.strip() or f"exit status {result.exit_code}"
            return ConnectionTestResult(False, f"Connection test failed: {detail}", 'smb')

        return ConnectionTestResult(True, f"Successfully connected to SMB share //{server}/{share}", 'smb')

    def _test_nfs(self, data: Mapping[str, Any]) -> ConnectionTestResult:
        server = data['server'].strip()
        share = data['share'].strip().lstrip('/')

        logger.info(f"Testing NFS connection to {server}/{share}")
        if not self._ping(server):
            return ConnectionTestResult(False, f"Connection test failed: NFS server {server} is not reachable", 'nfs')

        try:
            exports = self._nfs_exports(server)
        except DiscoveryError as e:
            logger.warning(f"showmount failed, falling back to ping test: {e.message}")
            return ConnectionTestResult(
                True,
                f"NFS server {server} is reachable (share availability not verified)",
                'nfs',
            )

        if f"/{share}" not in exports and share not in exports:
            return ConnectionTestResult(
                False, f"Connection test failed: Share '/{share}' not found in NFS exports", 'nfs'
            )

        return ConnectionTestResult(True, f"Successfully connected to NFS share {server}:/{share}", 'nfs')

    def connection_test(self, data: Mapping[str, Any]) -> ConnectionTestResult:
        """Probe one candidate share read-only and report the outcome."""
        try:
            # a name is not needed to probe a share
            validate_remote({**data, 'name': data.get('name') or 'connection-test'})
        except ValidationError as e:
            return ConnectionTestResult(False, f"Connection test failed: {e.message}", str(type_value(data.get('type')) or 'unknown'))

        if type_value(data['type']) == RemoteType.SMB.value:
            return self._test_smb(data)
        return self._test_nfs(data)
