"""Installing APM apps into DAOs."""

from .tasks import (
    DEFAULT_INIT_FUNCTION,
    SET_PERMISSIONS_OPEN,
    AppInstaller,
    InstallContext,
    InstallOptions,
    summarize,
)

__all__ = [
    "AppInstaller",
    "DEFAULT_INIT_FUNCTION",
    "InstallContext",
    "InstallOptions",
    "SET_PERMISSIONS_OPEN",
    "summarize",
]
