"""Credential-store location across platforms.

Resolution order:
1. OPENCODE_DATA_DIR, used verbatim as the data directory
2. The platform data directory (XDG_DATA_HOME, Application Support, APPDATA)
3. A per-OS fallback built from the home directory

When none of these can be determined a PathDetectionError is raised; no
temporary-directory fallback is ever invented.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath, PurePosixPath, PureWindowsPath
from typing import Mapping, Optional

from modules.auth_sync.errors import PathDetectionError

DATA_DIR_OVERRIDE_ENV = "OPENCODE_DATA_DIR"
APP_DIR_NAME = "opencode"
STORE_FILE_NAME = "auth.json"


class PathSource(str, Enum):
    ENV_OVERRIDE = "env_override"
    PLATFORM_DEFAULT = "platform_default"
    LINUX_FALLBACK = "linux_fallback"
    WINDOWS_FALLBACK = "windows_fallback"


@dataclass(frozen=True)
class StorePath:
    """Resolved credential-store location."""

    data_dir: PurePath
    auth_file: PurePath
    source: PathSource


def _get(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name)
    return value if value else None


def _store(data_dir: PurePath, source: PathSource) -> StorePath:
    return StorePath(data_dir=data_dir, auth_file=data_dir / STORE_FILE_NAME, source=source)


def resolve_store_path(
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> StorePath:
    """Resolve the credential-store file location.

    Args:
        environ: Environment to read, defaults to ``os.environ``
        platform: ``sys.platform``-style name, defaults to the running platform

    Returns:
        StorePath with the data directory, auth file and how it was found

    Raises:
        PathDetectionError: If no directory can be determined at all
    """
    environ = os.environ if environ is None else environ
    platform = sys.platform if platform is None else platform
    windows = platform.startswith("win")
    path_cls = PureWindowsPath if windows else PurePosixPath

    override = _get(environ, DATA_DIR_OVERRIDE_ENV)
    if override:
        return _store(path_cls(override), PathSource.ENV_OVERRIDE)

    if windows:
        appdata = _get(environ, "APPDATA")
        if appdata:
            return _store(path_cls(appdata) / APP_DIR_NAME, PathSource.PLATFORM_DEFAULT)
        profile = _get(environ, "USERPROFILE")
        if profile:
            return _store(
                path_cls(profile) / "AppData" / "Roaming" / APP_DIR_NAME,
                PathSource.WINDOWS_FALLBACK,
            )
        raise PathDetectionError(
            f"neither APPDATA nor USERPROFILE is set; set {DATA_DIR_OVERRIDE_ENV}"
        )

    home = _get(environ, "HOME")

    if platform == "darwin":
        if home:
            return _store(
                path_cls(home) / "Library" / "Application Support" / APP_DIR_NAME,
                PathSource.PLATFORM_DEFAULT,
            )
        raise PathDetectionError(f"HOME is not set; set {DATA_DIR_OVERRIDE_ENV}")

    xdg_data_home = _get(environ, "XDG_DATA_HOME")
    if xdg_data_home:
        return _store(path_cls(xdg_data_home) / APP_DIR_NAME, PathSource.PLATFORM_DEFAULT)
    if home:
        return _store(
            path_cls(home) / ".local" / "share" / APP_DIR_NAME,
            PathSource.LINUX_FALLBACK,
        )
    raise PathDetectionError(
        f"neither XDG_DATA_HOME nor HOME is set; set {DATA_DIR_OVERRIDE_ENV}"
    )
