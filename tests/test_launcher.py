"""Tests for ServerLauncher: spawn, signal forwarding, exit logging."""

import os
import signal
import sys

import pytest

from src.launcher.server_launcher import ServerLauncher, main


class FakeProcess:
    def __init__(self, pid: int = 4242, returncode: int = 0):
        self.pid = pid
        self._returncode = returncode
        self.exited = False
        self.signals = []

    def poll(self):
        return self._returncode if self.exited else None

    def send_signal(self, sig):
        self.signals.append(sig)

    def wait(self):
        self.exited = True
        return self._returncode


class FakePopen:
    def __init__(self, process=None, error=None):
        self.process = process or FakeProcess()
        self.error = error
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error:
            raise self.error
        return self.process


@pytest.fixture
def restore_handlers():
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


class TestStart:
    def test_spawn_with_cwd_and_env(self, tmp_path):
        popen = FakePopen()
        launcher = ServerLauncher(["node", "server.js"], cwd=str(tmp_path), env={"PORT": "3002"}, popen=popen)
        assert launcher.start() is True
        args, kwargs = popen.calls[0]
        assert args == ["node", "server.js"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["env"] == {"PORT": "3002"}
        # stdio inherited: no redirection kwargs
        assert "stdout" not in kwargs and "stdin" not in kwargs

    def test_env_defaults_to_copy_of_environ(self):
        launcher = ServerLauncher(["node"], popen=FakePopen())
        assert launcher.env == dict(os.environ)
        assert launcher.env is not os.environ

    def test_spawn_error_logged_returns_false(self, caplog):
        launcher = ServerLauncher(["no-such-binary"], popen=FakePopen(error=FileNotFoundError("no-such-binary")))
        assert launcher.start() is False
        assert "Failed to start server" in caplog.text

    def test_empty_command(self):
        assert ServerLauncher([], popen=FakePopen()).start() is False


class TestSignalForwarding:
    def test_forwards_same_signal(self):
        proc = FakeProcess()
        launcher = ServerLauncher(["node"], popen=FakePopen(proc))
        launcher.start()
        launcher.forward_signal(signal.SIGINT, None)
        launcher.forward_signal(signal.SIGTERM, None)
        assert proc.signals == [signal.SIGINT, signal.SIGTERM]
        assert launcher.last_forwarded == "SIGTERM"

    def test_not_forwarded_after_child_exit(self):
        proc = FakeProcess()
        launcher = ServerLauncher(["node"], popen=FakePopen(proc))
        launcher.start()
        launcher.wait()
        launcher.forward_signal(signal.SIGINT, None)
        assert proc.signals == []

    def test_signal_before_spawn_delivered_after_start(self):
        proc = FakeProcess()
        launcher = ServerLauncher(["node"], popen=FakePopen(proc))
        launcher.forward_signal(signal.SIGINT, None)
        assert launcher.start() is True
        assert proc.signals == [signal.SIGINT]
        launcher.forward_signal(signal.SIGTERM, None)
        assert proc.signals == [signal.SIGINT, signal.SIGTERM]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_installed_handler_relays_sigint(self, restore_handlers):
        proc = FakeProcess()
        launcher = ServerLauncher(["node"], popen=FakePopen(proc))
        launcher.start()
        launcher.install_signal_handlers()
        os.kill(os.getpid(), signal.SIGINT)
        assert proc.signals == [signal.SIGINT]


class TestRun:
    def test_run_waits_and_logs_exit(self, restore_handlers, caplog):
        caplog.set_level("INFO")
        proc = FakeProcess(returncode=3)
        launcher = ServerLauncher(["node"], popen=FakePopen(proc))
        assert launcher.run() == 0
        assert "Server exited with code 3" in caplog.text
        assert "child_exit" in caplog.text

    def test_run_spawn_failure_returns_one(self, restore_handlers):
        launcher = ServerLauncher(["x"], popen=FakePopen(error=PermissionError("denied")))
        assert launcher.run() == 1

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_real_child_receives_sigterm(self):
        launcher = ServerLauncher([sys.executable, "-c", "import time; time.sleep(30)"])
        assert launcher.start() is True
        launcher.forward_signal(signal.SIGTERM, None)
        assert launcher.wait() == -signal.SIGTERM

    def test_main_uses_config(self, tmp_path, monkeypatch, restore_handlers):
        cfg = tmp_path / "c.yaml"
        cfg.write_text(
            f"launcher:\n  command: [\"{sys.executable}\", \"-c\", \"pass\"]\n  cwd: {tmp_path}\n",
            encoding="utf-8",
        )
        assert main(str(cfg)) == 0
