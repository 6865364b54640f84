"""S3 media backend."""
import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from eventapp.errors import UploadError
from eventapp.storage.base import StorageBackend, random_key

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3Storage(StorageBackend):
    name = "s3"

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key_id: str = "",
        secret_access_key: str = "",
        timeout: float = 10.0,
        client=None,
    ):
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            region_name=region,
            config=Config(
                signature_version="s3v4",
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={"max_attempts": 2},
            ),
        )

    def upload(self, content: bytes, content_type: str) -> str:
        key = random_key()
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=content, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 upload failed for bucket %s", self.bucket)
            raise UploadError(f"Failed to upload media: {exc}") from exc
        logger.info("Uploaded %d bytes to S3 as %s", len(content), key)
        return key

    def sign(self, key: Optional[str], ttl_seconds: int = 3600) -> Optional[str]:
        if not key:
            return None
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError):
            logger.warning("Could not sign S3 key %s", key, exc_info=True)
            return None

    def delete(self, key: Optional[str]) -> bool:
        if not key:
            return False
        try:
            # delete_object succeeds for absent keys, so check existence first
            self.client.head_object(Bucket=self.bucket, Key=key)
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _MISSING_CODES:
                logger.info("S3 key %s already absent", key)
            else:
                logger.warning("Error deleting S3 key %s: %s", key, code)
            return False
        except BotoCoreError:
            logger.warning("Error deleting S3 key %s", key, exc_info=True)
            return False
        logger.info("File deleted from S3: %s", key)
        return True
