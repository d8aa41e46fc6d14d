"""
Asynchronous S3 Client Service

This module provides an async-first S3 client that uses aioboto3 for
non-blocking object storage operations. The client is built once during
application startup and handed to request handlers via dependency injection.
"""

import io
import logging
from typing import TYPE_CHECKING, BinaryIO

import aioboto3
from botocore.config import Config
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client


class S3Settings(BaseSettings):
    """Configuration for the S3-compatible artwork bucket"""

    endpoint: str = "localhost:9000"
    access_key: str = "minioadmin"
    secret_key: str = "minioadmin"
    bucket: str = "artworks"
    region: str = "us-east-1"
    use_ssl: bool = False
    signature_version: str = "s3v4"
    # Base used to build public object URLs; defaults to the endpoint itself
    public_base_url: str | None = None
    cache_control: str = "max-age=3600"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        extra="ignore",
    )


class AsyncS3Client:
    """Asynchronous S3 Client

    This client maintains a shared aioboto3.Session that is created once and
    reused for all operations. Individual S3 clients are created per operation
    using context managers to ensure proper resource cleanup.
    """

    def __init__(self, settings: S3Settings | None = None):
        self.settings = settings or S3Settings()
        self._session: aioboto3.Session | None = None
        self._endpoint_url = self._get_endpoint_url()
        self._config = Config(
            signature_version=self.settings.signature_version,
            max_pool_connections=50,
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=10,
            read_timeout=60,
            s3={"addressing_style": "path"},
        )
        logger.info(f"AsyncS3Client initialized: endpoint={self._endpoint_url}, bucket={self.settings.bucket}, region={self.settings.region}")

    def _get_endpoint_url(self) -> str:
        """Get the endpoint URL with protocol if needed."""
        endpoint = self.settings.endpoint
        if not endpoint.startswith(("http://", "https://")):
            protocol = "https" if self.settings.use_ssl else "http"
            return f"{protocol}://{endpoint}"
        return endpoint

    @property
    def session(self) -> aioboto3.Session:
        """Get or create the shared aioboto3 session."""
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
            )
        return self._session

    def _get_s3_client(self) -> "S3Client":
        """Get configured S3 client context manager.

        Usage: async with self._get_s3_client() as s3:
        """
        return self.session.client("s3", endpoint_url=self._endpoint_url, config=self._config)

    async def upload_fileobj(
        self,
        file_obj: BinaryIO | bytes,
        key: str,
        content_type: str | None = None,
        overwrite: bool = False,
    ) -> str:
        """Upload bytes or a file object to the bucket.

        With ``overwrite=False`` the write is conditional (``If-None-Match: *``),
        so an existing object under ``key`` is never replaced and the call
        fails instead.

        Returns:
            The object key that was written

        Raises:
            Exception: If upload fails
        """
        body = file_obj if isinstance(file_obj, bytes) else file_obj.read()

        params: dict[str, object] = {
            "Bucket": self.settings.bucket,
            "Key": key,
            "Body": io.BytesIO(body),
            "ContentLength": len(body),
            "CacheControl": self.settings.cache_control,
        }
        if content_type:
            params["ContentType"] = content_type
        if not overwrite:
            params["IfNoneMatch"] = "*"

        try:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                await s3.put_object(**params)
            logger.info(f"Successfully uploaded object: {key}")
            return key
        except Exception as e:
            logger.error(f"Failed to upload object {key}: {e}")
            raise

    def get_public_url(self, key: str) -> str:
        """Public address of an object: ``{public_base_url}/{bucket}/{key}``."""
        base = (self.settings.public_base_url or self._endpoint_url).rstrip("/")
        return f"{base}/{self.settings.bucket}/{key}"

    async def delete_file(self, key: str) -> None:
        """Delete a single object.

        Raises:
            Exception: If deletion fails
        """
        try:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                await s3.delete_object(Bucket=self.settings.bucket, Key=key)
            logger.info(f"Successfully deleted object: {key}")
        except Exception as e:
            logger.error(f"Failed to delete object {key}: {e}")
            raise

    async def delete_files(self, keys: list[str]) -> int:
        """Delete many objects, 1000 keys per request.

        Failures are logged per batch; the return value is the number of objects
        the store reported as deleted.
        """
        if not keys:
            return 0

        deleted_count = 0
        batch_size = 1000
        async with self._get_s3_client() as s3:
            s3: "S3Client"
            for i in range(0, len(keys), batch_size):
                batch = keys[i : i + batch_size]
                try:
                    response = await s3.delete_objects(
                        Bucket=self.settings.bucket,
                        Delete={"Objects": [{"Key": key} for key in batch]},
                    )
                except Exception:
                    logger.exception("Failed to delete batch of objects")
                    continue

                deleted_count += len(response.get("Deleted", []))
                for error in response.get("Errors", []):
                    logger.warning(f"Failed to delete object {error['Key']}: {error['Message']}")

        logger.info(f"Deleted {deleted_count}/{len(keys)} objects")
        return deleted_count

    async def close(self) -> None:
        """Close the session and clean up resources."""
        if self._session is not None:
            logger.info("Closing AsyncS3Client session")
            # aioboto3 sessions don't need explicit closing
            self._session = None
