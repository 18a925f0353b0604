"""S3-compatible media storage.

Works against AWS S3, MinIO or LocalStack; pass ``endpoint_url`` to point
at a non-AWS service.
"""

import hashlib
import logging
from pathlib import PurePath
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from app.domain.repositories import IStorageService

logger = logging.getLogger(__name__)


class S3StorageService(IStorageService):
    """Object-store implementation of :class:`IStorageService`.

    Parameters
    ----------
    bucket_name : str
        Target bucket (created if it does not exist).
    region : str
        AWS region.
    endpoint_url : str | None
        Custom endpoint for MinIO / LocalStack.  ``None`` means real AWS.
    public_url : str | None
        Prefix used to build playback URLs, e.g. a CDN.  Derived from the
        endpoint or the AWS virtual-host name when omitted.
    aws_access_key_id / aws_secret_access_key : str | None
        Explicit credentials.  When ``None`` the default credential chain is used.
    """

    def __init__(
        self,
        bucket_name: str = "vidshare-media",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        public_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        client: Any = None,
    ):
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url
        self._public_base = (public_url or self._default_public_base()).rstrip("/")
        self._client = client or self._build_client(aws_access_key_id, aws_secret_access_key)
        self._ensure_bucket()

    # ------------------------------------------------------------------
    # Client initialisation
    # ------------------------------------------------------------------
    def _build_client(self, access_key: Optional[str], secret_key: Optional[str]) -> Any:
        kwargs: dict[str, Any] = {"region_name": self.region}
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
        client = boto3.client("s3", **kwargs)
        logger.info(
            "S3 client initialised (endpoint=%s, bucket=%s)",
            self.endpoint_url or "AWS",
            self.bucket_name,
        )
        return client

    def _default_public_base(self) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com"

    def _ensure_bucket(self) -> None:
        """MinIO and LocalStack need the bucket created explicitly."""
        try:
            self._client.head_bucket(Bucket=self.bucket_name)
            logger.debug("Bucket '%s' already exists", self.bucket_name)
        except ClientError:
            try:
                self._client.create_bucket(Bucket=self.bucket_name)
                logger.info("Created bucket '%s'", self.bucket_name)
            except ClientError as exc:
                logger.warning("Could not create bucket '%s': %s", self.bucket_name, exc)

    # ------------------------------------------------------------------
    # Interface implementation
    # ------------------------------------------------------------------
    async def save_file(self, file_content: bytes, filename: str) -> str:
        """Upload *file_content* and return the object key."""
        content_hash = hashlib.sha256(file_content).hexdigest()
        key = f"{content_hash[:2]}/{content_hash}_{PurePath(filename).name}"
        self._client.put_object(Bucket=self.bucket_name, Key=key, Body=file_content)
        logger.info("S3: uploaded %s (%d bytes)", key, len(file_content))
        return key

    async def get_file(self, file_path: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket_name, Key=file_path)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise FileNotFoundError(f"S3: {file_path} not found") from exc
            raise
        body: bytes = response["Body"].read()
        logger.debug("S3: retrieved %s (%d bytes)", file_path, len(body))
        return body

    async def delete_file(self, file_path: str) -> bool:
        self._client.delete_object(Bucket=self.bucket_name, Key=file_path)
        logger.info("S3: deleted %s", file_path)
        return True

    def public_url(self, file_path: str) -> str:
        return f"{self._public_base}/{file_path}"
