"""
Deployment descriptor loading.

The descriptor is read from ``deploy.json`` in the project root:

    {
      "files": ["Dockerfile", "config"],
      "aws": {
        "region": "eu-west-1",
        "credentials": {"accessKey": "...", "secretAccessKey": "..."},
        "s3": {"bucket": "my-builds"},
        "elb": {"applicationName": "my-app", "environmentName": "my-app-prod"}
      },
      "branch": "master",
      "archive": {"flattenFiles": true, "sortEntries": false}
    }

``aws.credentials`` and ``archive`` are optional.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigError
from .vcs import resolve_commit_hash

logger = logging.getLogger(__name__)

DESCRIPTOR_FILENAME = "deploy.json"


@dataclass(frozen=True)
class ArchiveOptions:
    """Archive layout switches."""
    flatten_files: bool = True   # single files stored under their base name
    sort_entries: bool = False   # sort directory walks for reproducible zips


@dataclass(frozen=True)
class DescriptorConfig:
    """User-supplied fields of deploy.json."""
    files: Tuple[str, ...]
    region: str
    bucket: str
    application_name: str
    environment_name: str
    branch: str
    access_key: Optional[str] = None
    secret_access_key: Optional[str] = field(default=None, repr=False)
    archive: ArchiveOptions = field(default_factory=ArchiveOptions)


@dataclass(frozen=True)
class DeploymentDescriptor:
    """Descriptor plus the values derived from the branch head."""
    root: Path
    config: DescriptorConfig
    commit_hash: str

    @property
    def build_version(self) -> str:
        return f"{self.config.branch}-{self.commit_hash}"

    @property
    def build_key(self) -> str:
        return self.build_version + ".zip"


def _require(data: Dict[str, Any], key: str, path: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise ConfigError(f"Missing required key '{path}'", {"key": path})
    return data[key]


def _require_str(data: Dict[str, Any], key: str, path: str) -> str:
    value = _require(data, key, path)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{path}' must be a non-empty string", {"key": path})
    return value


def _optional_bool(data: Dict[str, Any], key: str, path: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{path}' must be true or false", {"key": path})
    return value


def _parse_files(data: Dict[str, Any]) -> Tuple[str, ...]:
    files = _require(data, "files", "files")
    if not isinstance(files, list) or not files:
        raise ConfigError("'files' must be a non-empty list", {"key": "files"})
    for i, entry in enumerate(files):
        if not isinstance(entry, str) or not entry.strip():
            raise ConfigError(f"'files[{i}]' must be a non-empty string", {"key": f"files[{i}]"})
    return tuple(files)


def _parse_credentials(aws: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    credentials = aws.get("credentials")
    if not credentials:
        return None, None
    if not isinstance(credentials, dict):
        raise ConfigError("'aws.credentials' must be an object", {"key": "aws.credentials"})
    access_key = _require_str(credentials, "accessKey", "aws.credentials.accessKey")
    secret = _require_str(credentials, "secretAccessKey", "aws.credentials.secretAccessKey")
    return access_key, secret


def parse_descriptor(data: Dict[str, Any]) -> DescriptorConfig:
    """
    Validate decoded deploy.json content.

    Args:
        data: Decoded JSON document

    Returns:
        DescriptorConfig with the user-supplied fields

    Raises:
        ConfigError: If a required key is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError("deploy.json must contain a JSON object")

    aws = _require(data, "aws", "aws")
    if not isinstance(aws, dict):
        raise ConfigError("'aws' must be an object", {"key": "aws"})

    access_key, secret = _parse_credentials(aws)

    archive = data.get("archive") or {}
    if not isinstance(archive, dict):
        raise ConfigError("'archive' must be an object", {"key": "archive"})

    return DescriptorConfig(
        files=_parse_files(data),
        region=_require_str(aws, "region", "aws.region"),
        bucket=_require_str(_require(aws, "s3", "aws.s3"), "bucket", "aws.s3.bucket"),
        application_name=_require_str(
            _require(aws, "elb", "aws.elb"), "applicationName", "aws.elb.applicationName"
        ),
        environment_name=_require_str(aws["elb"], "environmentName", "aws.elb.environmentName"),
        branch=_require_str(data, "branch", "branch"),
        access_key=access_key,
        secret_access_key=secret,
        archive=ArchiveOptions(
            flatten_files=_optional_bool(archive, "flattenFiles", "archive.flattenFiles", True),
            sort_entries=_optional_bool(archive, "sortEntries", "archive.sortEntries", False),
        ),
    )


def load_descriptor(root) -> DescriptorConfig:
    """
    Read and validate ``<root>/deploy.json``.

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    path = Path(root) / DESCRIPTOR_FILENAME
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"{DESCRIPTOR_FILENAME} not found in {root}", {"path": str(path)}) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}", {"path": str(path)}) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", {"path": str(path)}) from e

    config = parse_descriptor(data)
    logger.debug(f"Loaded {path}: {len(config.files)} entries, branch {config.branch}")
    return config


def build_descriptor(root) -> DeploymentDescriptor:
    """
    Load deploy.json and resolve the build identifier.

    Args:
        root: Project root

    Returns:
        Immutable DeploymentDescriptor

    Raises:
        ConfigError: If deploy.json is missing or malformed
        VCSError: If the branch head cannot be read
    """
    root = Path(root)
    config = load_descriptor(root)
    commit_hash = resolve_commit_hash(root, config.branch)
    return DeploymentDescriptor(root=root, config=config, commit_hash=commit_hash)
