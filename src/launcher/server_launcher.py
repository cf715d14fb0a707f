"""Backend server launcher: spawn the server command as a child, forward SIGINT/SIGTERM, log its exit.

Exactly one child. Signals are relayed verbatim; no grace period or SIGKILL escalation. The parent
keeps waiting until the child exits, then returns.
"""

import logging
import os
import signal
import subprocess
from typing import Callable, Dict, List, Optional, Sequence

from src.core.logging_utils import log_child_exit

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ServerLauncher:
    """Runs one server child process with inherited stdio."""

    def __init__(
        self,
        command: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.command: List[str] = list(command)
        self.cwd = cwd
        self.env = dict(env) if env is not None else os.environ.copy()
        self._popen = popen
        self.process: Optional[subprocess.Popen] = None
        self.last_forwarded: Optional[str] = None
        # Signal received before the child exists; delivered right after spawn
        self._pending_signal: Optional[int] = None

    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def start(self) -> bool:
        """Spawn the child. Returns False (logged) when the command cannot be started."""
        if not self.command:
            logger.error("Failed to start server: empty command")
            return False
        logger.info("Starting server: %s (cwd=%s)", " ".join(self.command), self.cwd)
        try:
            self.process = self._popen(self.command, cwd=self.cwd, env=self.env)
        except OSError as e:
            logger.error("Failed to start server: %s", e)
            return False
        logger.info("Server started (pid=%s)", self.process.pid)
        if self._pending_signal is not None:
            sig, self._pending_signal = self._pending_signal, None
            logger.info("Forwarding %s received before start", signal.Signals(sig).name)
            self._send(sig)
        return True

    def forward_signal(self, signum: int, frame=None) -> None:
        """Signal handler: relay the same signal to the child."""
        name = signal.Signals(signum).name
        logger.info("Shutting down server... (%s)", name)
        self.last_forwarded = name
        if self.process is None:
            self._pending_signal = signum
            return
        if self.is_running():
            self._send(signum)

    def _send(self, signum: int) -> None:
        try:
            self.process.send_signal(signum)
        except ProcessLookupError:
            pass

    def install_signal_handlers(self, signals: Sequence[int] = FORWARDED_SIGNALS) -> None:
        for sig in signals:
            signal.signal(sig, self.forward_signal)

    def wait(self) -> Optional[int]:
        """Block until the child exits; log and return its exit code."""
        if self.process is None:
            return None
        code = self.process.wait()
        logger.info("Server exited with code %s", code)
        log_child_exit(self.process.pid, code, signal_forwarded=self.last_forwarded)
        return code

    def run(self) -> int:
        """Install handlers, start, wait. 0 after the child exits, 1 if it could not be started."""
        self.install_signal_handlers()
        if not self.start():
            return 1
        self.wait()
        return 0


def main(config_path: Optional[str] = None) -> int:
    """Launch launcher.command in launcher.cwd from config."""
    from src.config.settings import get_launcher_config, read_config

    config, _ = read_config(config_path)
    launcher_cfg = get_launcher_config(config)
    launcher = ServerLauncher(launcher_cfg["command"], cwd=launcher_cfg["cwd"])
    return launcher.run()
