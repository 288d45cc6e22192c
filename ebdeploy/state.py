"""
Location of per-build run directories.
"""

import os
from pathlib import Path
from urllib.parse import quote

UNVERSIONED_RUN = "_unversioned"


def get_ebdeploy_home(root) -> Path:
    """
    Get the ebdeploy home directory.

    Args:
        root: Project root, used when EBDEPLOY_HOME is not set

    Returns:
        Path: EBDEPLOY_HOME, or <root>/.ebdeploy
    """
    home = os.environ.get("EBDEPLOY_HOME")
    if home:
        return Path(home).resolve()
    return (Path(root) / ".ebdeploy").resolve()


def get_run_dir(home: Path, build_version: str) -> Path:
    """
    Get the directory for a build version's run log.

    Raises:
        ValueError: If build_version is not a usable directory name
    """
    # percent-encoded so feature/x and feature_x stay apart
    name = quote(build_version, safe="")
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid build version: {build_version}")
    return home / name


def create_run_dir(home: Path, build_version: str) -> Path:
    run_dir = get_run_dir(home, build_version)
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir
