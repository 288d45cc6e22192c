"""
AWS session wrapper shared by the upload and deployment steps.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config

from .descriptor import DeploymentDescriptor

logger = logging.getLogger(__name__)


class AwsSession:
    """Explicit AWS session handed to the S3 and Elastic Beanstalk clients."""

    def __init__(self, region: str, access_key: Optional[str] = None,
                 secret_access_key: Optional[str] = None):
        self.region = region
        # None falls back to boto3's default credential chain
        self._session = boto3.session.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )
        self._s3 = None
        self._eb = None

    @classmethod
    def from_descriptor(cls, descriptor: DeploymentDescriptor) -> "AwsSession":
        config = descriptor.config
        source = "deploy.json" if config.access_key else "default chain"
        logger.debug(f"Creating AWS session for {config.region} (credentials from {source})")
        return cls(config.region, config.access_key, config.secret_access_key)

    def s3(self):
        """Lazy S3 client using path-style addressing."""
        if self._s3 is None:
            self._s3 = self._session.client(
                "s3", config=Config(s3={"addressing_style": "path"})
            )
        return self._s3

    def elasticbeanstalk(self):
        """Lazy Elastic Beanstalk client."""
        if self._eb is None:
            self._eb = self._session.client("elasticbeanstalk")
        return self._eb
