"""The R2Service class uploads, deletes and signs objects in a Cloudflare R2 (S3-compatible) bucket."""

from urllib.parse import quote

from aioboto3 import Session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from ....exceptions import DeleteBackingFailed, SignedUrlGenerationFailed, UploadFailed
from ....settings import Settings
from ...loguru_logging import logger
from ._base_storage_service import BaseObjectStorageService

NOT_FOUND_ERROR_CODES = {"404", "NoSuchKey", "NotFound"}


class R2Service(BaseObjectStorageService):
    """The R2Service class is responsible for talking to the R2 bucket through the S3 API."""

    def __init__(
        self,
        endpoint_url: str,
        bucket_name: str,
        access_key_id: str,
        secret_access_key: str,
        region_name: str = "auto",
        timeout: int = 30,
        signed_url_attempts: int = 2,
    ):
        """Initialize the R2Service class."""
        self.session = Session(
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
        )
        self.endpoint_url = endpoint_url.rstrip("/")
        self.bucket_name = bucket_name
        self.signed_url_attempts = max(1, signed_url_attempts)

        # Bounded connect and read timeouts on every call
        self._config = Config(connect_timeout=timeout, read_timeout=timeout, signature_version="s3v4")

    @classmethod
    def from_settings(cls, settings: Settings) -> "R2Service":
        """Build the service from the (already validated) settings."""
        return cls(
            endpoint_url=settings.R2_ENDPOINT,
            bucket_name=settings.R2_BUCKET_NAME,
            access_key_id=settings.R2_ACCESS_KEY_ID,
            secret_access_key=settings.R2_SECRET_ACCESS_KEY,
            region_name=settings.R2_REGION_NAME,
            timeout=settings.OBJECT_STORE_TIMEOUT,
            signed_url_attempts=settings.SIGNED_URL_ATTEMPTS,
        )

    def _client(self):
        return self.session.client("s3", endpoint_url=self.endpoint_url, config=self._config)

    async def check_connection(self) -> bool:
        """Check that the bucket exists and the credentials are accepted."""
        async with self._client() as s3:
            try:
                await s3.head_bucket(Bucket=self.bucket_name)
            except (ClientError, BotoCoreError) as e:
                logger.error(f"R2 connection failed for bucket {self.bucket_name}: {e}")
                return False

        logger.info(f"R2 bucket {self.bucket_name} is reachable.")
        return True

    async def upload_file(
        self,
        content: bytes,
        object_key: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Upload the bytes to the R2 bucket."""
        # S3 user metadata must be ASCII
        metadata = {key: quote(value, safe=" ") for key, value in (metadata or {}).items()}

        try:
            async with self._client() as s3:
                await s3.put_object(
                    Bucket=self.bucket_name,
                    Key=object_key,
                    Body=content,
                    ContentType=content_type,
                    Metadata=metadata,
                )
        except (ClientError, BotoCoreError, TimeoutError) as e:
            logger.error(f"Failed to upload {object_key} to R2: {e}")
            raise UploadFailed(f"Failed to upload to R2: {e}") from e

        logger.info(f"File uploaded successfully to R2: {object_key}")

    async def delete_file(self, object_key: str) -> None:
        """Delete the object from the R2 bucket."""
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=self.bucket_name, Key=object_key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_ERROR_CODES:
                logger.debug(f"Object {object_key} is already gone from R2.")
                return
            raise DeleteBackingFailed(f"Failed to delete {object_key} from R2: {e}") from e
        except (BotoCoreError, TimeoutError) as e:
            raise DeleteBackingFailed(f"Failed to delete {object_key} from R2: {e}") from e

        logger.info(f"File deleted from R2: {object_key}")

    async def generate_signed_url(self, object_key: str, expires_in: int) -> str:
        """Generate a presigned `GET` URL, retrying a bounded number of times."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.signed_url_attempts), wait=wait_fixed(0.5), reraise=True
            ):
                with attempt:
                    async with self._client() as s3:
                        return await s3.generate_presigned_url(
                            "get_object",
                            Params={"Bucket": self.bucket_name, "Key": object_key},
                            ExpiresIn=expires_in,
                        )
        except (ClientError, BotoCoreError, TimeoutError) as e:
            logger.error(f"Error generating signed URL for {object_key}: {e}")
            raise SignedUrlGenerationFailed(f"Failed to generate signed URL: {e}") from e

    def public_url(self, object_key: str) -> str:
        """The stable URL of the object: `<endpoint>/<bucket>/<key>`."""
        return f"{self.endpoint_url}/{self.bucket_name}/{object_key}"
