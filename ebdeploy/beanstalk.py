"""
Elastic Beanstalk version registration and environment update.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from .errors import DeployError

logger = logging.getLogger(__name__)


class DeploymentClient:
    """
    Two-step deployment against Elastic Beanstalk.

    ``register_version`` and ``activate_version`` must both succeed. Nothing
    is rolled back when the second step fails: the version stays registered
    but inactive.
    """

    def __init__(self, eb_client):
        self.client = eb_client

    def register_version(self, application_name: str, version_label: str,
                         bucket: str, key: str) -> None:
        """
        Create application version ``version_label`` from ``s3://bucket/key``.

        Raises:
            DeployError: If the application is unknown or the bundle is rejected
        """
        logger.info(f"Registering version {version_label} for {application_name}")
        try:
            self.client.create_application_version(
                ApplicationName=application_name,
                VersionLabel=version_label,
                SourceBundle={"S3Bucket": bucket, "S3Key": key},
            )
        except (ClientError, BotoCoreError) as e:
            raise DeployError("create_application_version", str(e)) from e

    def activate_version(self, environment_name: str, version_label: str) -> None:
        """
        Switch ``environment_name`` to ``version_label``.

        Raises:
            DeployError: If the environment is unknown or the update is rejected
        """
        logger.info(f"Updating environment {environment_name} to {version_label}")
        try:
            self.client.update_environment(
                EnvironmentName=environment_name,
                VersionLabel=version_label,
            )
        except (ClientError, BotoCoreError) as e:
            raise DeployError("update_environment", str(e)) from e
