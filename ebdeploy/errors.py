"""
Error types raised by the deployment pipeline.
"""

from typing import Any, Dict, Optional


class EbDeployError(Exception):
    """Base exception for ebdeploy."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(EbDeployError):
    """deploy.json is missing or malformed."""

    pass


class VCSError(EbDeployError):
    """Branch head reference could not be read."""

    def __init__(self, branch: str, message: str):
        super().__init__(
            f"Cannot resolve branch '{branch}': {message}",
            {"branch": branch},
        )
        self.branch = branch


class PackagingError(EbDeployError):
    """A configured path is missing or unreadable."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Cannot package '{path}': {message}", {"path": path})
        self.path = path


class UploadError(EbDeployError):
    """Object store write failed."""

    def __init__(self, bucket: str, key: str, message: str):
        super().__init__(
            f"Upload to s3://{bucket}/{key} failed: {message}",
            {"bucket": bucket, "key": key},
        )
        self.bucket = bucket
        self.key = key


class DeployError(EbDeployError):
    """Elastic Beanstalk rejected a version registration or environment update."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step} failed: {message}", {"step": step})
        self.step = step
