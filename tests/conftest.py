"""Shared fakes for remote mount tests: a scripted command runner and a mount table file."""
import os
import sys
from types import SimpleNamespace

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from remotes.credentials import CredentialCodec
from remotes.discovery import ShareDiscovery
from remotes.executor import CommandResult, CommandRunner
from remotes.manager import RemoteMountManager
from remotes.orchestrator import MountOrchestrator
from remotes.paths import MountPathResolver
from remotes.probe import MountStateProber
from remotes.settings import StaticFlagProvider
from remotes.store import InMemoryRemoteStore


def _escape(field):
    """Encode a field the way the kernel writes /proc/mounts."""
    for char in ("\\", " ", "\t", "\n"):
        field = field.replace(char, "\\%03o" % ord(char))
    return field


class FakeMountTable:
    """A /proc/mounts look-alike backed by a temporary file."""

    def __init__(self, path):
        self.path = str(path)
        self._entries = []
        self._write()

    def _write(self):
        with open(self.path, "w") as f:
            f.write("proc /proc proc rw,nosuid 0 0\n")
            for source, target, fstype in self._entries:
                f.write(f"{_escape(source)} {_escape(target)} {fstype} rw 0 0\n")

    def add(self, target, fstype="cifs", source="//server/share"):
        self._entries.append((source, target, fstype))
        self._write()

    def remove(self, target):
        self._entries = [e for e in self._entries if e[1] != target]
        self._write()

    def targets(self):
        return [e[1] for e in self._entries]


class FakeRunner(CommandRunner):
    """Records every command; answers from ``responses`` keyed by binary.

    A response may be a CommandResult or a callable taking argv. Successful
    mount/umount commands update the attached mount table.
    """

    def __init__(self, table=None):
        self.table = table
        self.calls = []
        self.responses = {}

    def run(self, argv, timeout=None, env=None):
        argv = list(argv)
        self.calls.append(SimpleNamespace(argv=argv, timeout=timeout, env=env))

        response = self.responses.get(argv[0])
        if callable(response):
            response = response(argv)
        if response is None:
            response = CommandResult("", "", 0)

        if response.success and self.table is not None:
            if argv[0] == "mount":
                self.table.add(argv[4], fstype=argv[2], source=argv[3])
            elif argv[0] == "umount":
                self.table.remove(argv[1])
        return response

    def commands(self, binary):
        return [call.argv for call in self.calls if call.argv[0] == binary]


@pytest.fixture
def mount_table(tmp_path):
    return FakeMountTable(tmp_path / "mounts")


@pytest.fixture
def runner(mount_table):
    return FakeRunner(mount_table)


@pytest.fixture
def codec():
    return CredentialCodec("test-secret")


@pytest.fixture
def remotes_env(tmp_path, mount_table, runner, codec):
    """A fully wired manager using fakes for everything outside the process."""
    mount_base = tmp_path / "mnt" / "remotes"
    resolver = MountPathResolver(str(mount_base))
    store = InMemoryRemoteStore()
    flags = StaticFlagProvider(True)

    manager = RemoteMountManager(
        store=store,
        codec=codec,
        resolver=resolver,
        prober=MountStateProber(mount_table.path),
        orchestrator=MountOrchestrator(runner, resolver, codec, timeout=5),
        discovery=ShareDiscovery(runner, timeout=5),
        flags=flags,
    )
    return SimpleNamespace(
        manager=manager,
        runner=runner,
        table=mount_table,
        store=store,
        flags=flags,
        resolver=resolver,
        mount_base=mount_base,
        codec=codec,
    )
