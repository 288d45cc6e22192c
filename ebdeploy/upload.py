"""
S3 upload of the deployment archive.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from .errors import UploadError

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/zip"


def upload_archive(s3_client, bucket: str, key: str, body: bytes) -> None:
    """
    Write the archive to ``s3://bucket/key`` with a single put_object call.

    An existing object under the same key is overwritten.

    Args:
        s3_client: boto3 S3 client
        bucket: Target bucket
        key: Object key (the build key)
        body: Archive bytes

    Raises:
        UploadError: On any transport or authorization failure
    """
    logger.info(f"Uploading {len(body)} bytes to s3://{bucket}/{key}")
    try:
        s3_client.put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentLength=len(body),
            ContentType=CONTENT_TYPE,
            ACL="private",
            Metadata={"Key": "MetadataValue"},
        )
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        raise UploadError(bucket, key, f"{code}: {e}") from e
    except BotoCoreError as e:
        raise UploadError(bucket, key, str(e)) from e
