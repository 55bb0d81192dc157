"""Command execution for the remote mount tools."""

import logging
import os
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


class CommandRunner(ABC):
    """Runs an argv list and reports stdout/stderr/exit code."""

    @abstractmethod
    def run(self,
            argv: Sequence[str],
            timeout: Optional[float] = None,
            env: Optional[Dict[str, str]] = None) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """Command runner backed by subprocess with a whitelist of binaries."""

    ALLOWED_BINARIES = {'mount', 'umount', 'smbclient', 'showmount', 'ping'}
    DEFAULT_TIMEOUT = 60.0

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT, dry_run: bool = False):
        """
        Initialize the runner.

        Args:
            default_timeout: Seconds to wait when the caller gives no timeout
            dry_run: If True, commands will be logged but not executed
        """
        self.default_timeout = default_timeout
        self.dry_run = dry_run
        self._command_history: List[Dict] = []

    def run(self,
            argv: Sequence[str],
            timeout: Optional[float] = None,
            env: Optional[Dict[str, str]] = None) -> CommandResult:
        """
        Execute a whitelisted command.

        Args:
            argv: Binary and arguments; never passed through a shell
            timeout: Seconds before the command is killed
            env: Extra environment variables (used for secrets, never logged)

        Returns:
            CommandResult; timeouts and missing binaries are reported as
            failed results rather than raised
        """
        if not argv:
            raise ValueError("Command cannot be empty")

        binary = argv[0]
        if binary not in self.ALLOWED_BINARIES:
            raise ValueError(f"Binary not allowed: {binary}")

        timeout = timeout or self.default_timeout
        command_str = ' '.join(shlex.quote(arg) for arg in argv)
        logger.info(f"Executing command: {command_str}")

        self._command_history.append({
            'command': command_str,
            'dry_run': self.dry_run
        })

        if self.dry_run:
            logger.info("DRY RUN: Command would be executed")
            return CommandResult("", "", 0)

        full_env = None
        if env:
            full_env = {**os.environ, **env}

        try:
            result = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=timeout,
                env=full_env,
                check=False
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out after {timeout}s: {command_str}")
            return CommandResult("", f"Command timed out after {timeout}s", -1, timed_out=True)
        except FileNotFoundError:
            logger.error(f"Command not found: {binary}")
            return CommandResult("", f"Command not found: {binary}", 127)

        if result.returncode == 0:
            logger.debug(f"Command executed successfully: {command_str}")
        else:
            logger.error(f"Command failed with return code {result.returncode}: {command_str}")
            logger.error(f"Error output: {result.stderr.strip()}")

        return CommandResult(result.stdout, result.stderr, result.returncode)

    def get_command_history(self) -> List[Dict]:
        """Get the history of executed commands."""
        return self._command_history.copy()

    def clear_command_history(self) -> None:
        self._command_history.clear()
