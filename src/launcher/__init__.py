"""Backend server process launcher."""

from src.launcher.server_launcher import ServerLauncher

__all__ = ["ServerLauncher"]
