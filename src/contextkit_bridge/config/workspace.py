from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

if TYPE_CHECKING:
    from ..host.base import Host
    from .settings import BridgeConfig

logger = logging.getLogger(__name__)

_PROJECT_MARKERS = (".git", "pyproject.toml", "package.json", "go.mod", "Cargo.toml")


def validate_workspace_dir(path: str) -> bool:
    p = Path(path)
    if not p.is_dir():
        logger.debug("Workspace path is not a directory: %s", path)
        return False
    if not os.access(p, os.R_OK):
        logger.debug("Workspace path is not readable: %s", path)
        return False
    return True


def uri_to_path(uri: str) -> str:
    """Convert a file:// URI (or a plain path) to a filesystem path."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return unquote(uri)

    path = url2pathname(parsed.path)
    # /C:/Users -> C:\Users
    if os.name == "nt" and path.startswith("/") and len(path) > 2 and path[1] == ":":
        path = path[1:]
    return path


def select_best_folder(folders: Sequence[str]) -> str | None:
    """Pick one root from several open folders.

    Priority follows _PROJECT_MARKERS (a git checkout first), then the first
    valid folder. Returns None when no folder is a readable directory.
    """
    candidates = [str(Path(f).resolve()) for f in folders if validate_workspace_dir(f)]
    if not candidates:
        return None
    for marker in _PROJECT_MARKERS:
        for path in candidates:
            if (Path(path) / marker).exists():
                return path
    return candidates[0]


async def resolve_workspace(config: BridgeConfig, host: Host) -> str | None:
    """Resolve the single workspace root for an operation.

    Priority:
    1. CONTEXTKIT_BASE_DIR (explicit config)
    2. Folders reported by the host, a single folder taken as-is

    Returns None when nothing is open. Absence is not an error and this never raises.
    """
    if config.base_dir:
        return str(Path(config.base_dir).resolve())

    try:
        folders = [uri_to_path(f) for f in await host.workspace_folders()]
    except Exception as exc:
        logger.debug("Host workspace folders unavailable: %s", exc)
        return None

    if not folders:
        return None
    if len(folders) == 1:
        return str(Path(folders[0]).resolve())

    path = select_best_folder(folders)
    if path is not None:
        logger.info("Using workspace (selected from %d folders): %s", len(folders), path)
    return path
