"""Tests for the whitelisted subprocess command runner."""
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from remotes.executor import CommandResult, SubprocessCommandRunner


def completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestSubprocessCommandRunner:

    @patch("remotes.executor.subprocess.run")
    def test_runs_argv_without_shell(self, mock_run):
        mock_run.return_value = completed(stdout="ok\n")
        runner = SubprocessCommandRunner(default_timeout=30)

        result = runner.run(["umount", "/mnt/remotes/nas/media"])

        assert result == CommandResult("ok\n", "", 0)
        assert result.success
        args, kwargs = mock_run.call_args
        assert args[0] == ["umount", "/mnt/remotes/nas/media"]
        assert kwargs["timeout"] == 30
        assert kwargs["env"] is None
        assert "shell" not in kwargs

    @patch("remotes.executor.subprocess.run")
    def test_failure_is_returned_not_raised(self, mock_run):
        mock_run.return_value = completed(returncode=32, stderr="mount error(13): Permission denied\n")
        result = SubprocessCommandRunner().run(["mount", "-t", "cifs", "//nas/x", "/mnt/x"])

        assert not result.success
        assert result.exit_code == 32
        assert "Permission denied" in result.stderr

    @patch("remotes.executor.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="mount", timeout=5)
        result = SubprocessCommandRunner().run(["mount", "-t", "nfs", "nas:/x", "/mnt/x"], timeout=5)

        assert result.timed_out
        assert not result.success
        assert result.exit_code == -1
        assert "timed out" in result.stderr

    @patch("remotes.executor.subprocess.run")
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError()
        result = SubprocessCommandRunner().run(["showmount", "-e", "nas"])

        assert result.exit_code == 127
        assert result.stderr == "Command not found: showmount"

    @pytest.mark.parametrize("argv", [[], ["rm", "-rf", "/"], ["sh", "-c", "mount"]])
    def test_rejects_non_whitelisted_commands(self, argv):
        with patch("remotes.executor.subprocess.run") as mock_run:
            with pytest.raises(ValueError):
                SubprocessCommandRunner().run(argv)
            mock_run.assert_not_called()

    @patch("remotes.executor.subprocess.run")
    def test_extra_env_is_merged_and_not_logged(self, mock_run, caplog):
        mock_run.return_value = completed()
        runner = SubprocessCommandRunner()

        with caplog.at_level("INFO", logger="remotes.executor"):
            runner.run(["smbclient", "-L", "//nas", "-U", "bob"], env={"PASSWD": "hunter2"})

        env = mock_run.call_args[1]["env"]
        assert env["PASSWD"] == "hunter2"
        assert "PATH" in env
        assert "hunter2" not in caplog.text
        assert "hunter2" not in str(runner.get_command_history())

    @patch("remotes.executor.subprocess.run")
    def test_dry_run_skips_execution(self, mock_run):
        runner = SubprocessCommandRunner(dry_run=True)
        result = runner.run(["mount", "-t", "nfs", "nas:/x", "/mnt/x"])

        assert result.success
        mock_run.assert_not_called()
        history = runner.get_command_history()
        assert history == [{"command": "mount -t nfs nas:/x /mnt/x", "dry_run": True}]

        runner.clear_command_history()
        assert runner.get_command_history() == []
