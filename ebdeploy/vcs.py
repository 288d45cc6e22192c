"""
Build identifier lookup from local git metadata.

Reads the on-disk ref layout directly; git itself is never invoked.
"""

import logging
from pathlib import Path
from typing import Optional

from .errors import VCSError

logger = logging.getLogger(__name__)

GIT_DIR = ".git"


def resolve_commit_hash(root, branch: str) -> str:
    """
    Return the head commit of ``branch`` in the repository at ``root``.

    The loose ref ``.git/refs/heads/<branch>`` is read first; branches that
    only exist in ``.git/packed-refs`` are looked up there.

    Args:
        root: Project root containing the ``.git`` directory
        branch: Branch name, e.g. "master" or "feature/login"

    Returns:
        Commit identifier with surrounding whitespace stripped

    Raises:
        VCSError: If the branch ref cannot be read
    """
    if not branch:
        raise VCSError(branch, "branch name is empty")

    git_dir = Path(root) / GIT_DIR
    heads_dir = git_dir / "refs" / "heads"
    head_path = heads_dir / branch

    branch_parts = Path(branch).parts
    if Path(branch).is_absolute() or ".." in branch_parts:
        raise VCSError(branch, "branch name escapes refs/heads")

    try:
        content = head_path.read_text()
    except FileNotFoundError:
        commit = _find_packed_ref(git_dir, branch)
        if commit is None:
            raise VCSError(branch, f"no ref at {head_path}")
        logger.debug(f"Resolved {branch} from packed-refs")
        return commit
    except OSError as e:
        raise VCSError(branch, str(e)) from e

    commit = content.strip()
    if not commit:
        raise VCSError(branch, f"ref file {head_path} is empty")

    logger.debug(f"Resolved {branch} -> {commit}")
    return commit


def _find_packed_ref(git_dir: Path, branch: str) -> Optional[str]:
    """Look up refs/heads/<branch> in packed-refs."""
    packed = git_dir / "packed-refs"
    try:
        lines = packed.read_text().splitlines()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise VCSError(branch, str(e)) from e

    wanted = f"refs/heads/{branch}"
    for line in lines:
        line = line.strip()
        # comments and peeled tag lines
        if not line or line.startswith("#") or line.startswith("^"):
            continue
        parts = line.split(" ", 1)
        if len(parts) == 2 and parts[1] == wanted:
            return parts[0]
    return None
