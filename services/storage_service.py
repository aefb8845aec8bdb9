"""Supabase Storage client using the direct REST API."""

import logging
from urllib.parse import quote, unquote, urlsplit

import httpx

from app.errors import UploadError
from config.settings import settings

logger = logging.getLogger(__name__)

# Path segment that precedes <bucket>/<key> in public object URLs
PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public/"


class StorageService:
    """Service for storing staff photos in a Supabase Storage bucket."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the service with API configuration.

        Args:
            base_url: Supabase project URL.
            api_key: Key sent with every storage request.
            bucket: Bucket holding staff photos.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.transport = transport
        self.timeout = httpx.Timeout(30.0, connect=10.0)

    @classmethod
    def from_settings(cls) -> "StorageService":
        """Build the service from application settings."""
        return cls(
            base_url=settings.supabase_url,
            api_key=settings.storage_api_key,
            bucket=settings.storage_bucket,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _object_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/{bucket}/{quote(key)}"

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> str:
        """Upload bytes under ``key`` in the configured bucket.

        Args:
            key: Object key inside the bucket.
            data: File content.
            content_type: MIME type stored with the object.
            overwrite: Replace an existing object with the same key.

        Returns:
            Storage path of the new object (``<bucket>/<key>``).

        Raises:
            UploadError: If the store rejects the write or is unreachable.
        """
        logger.info(
            "Uploading object: bucket=%s, key=%s, size=%d",
            self.bucket,
            key,
            len(data),
        )
        headers = self._headers()
        headers["Content-Type"] = content_type
        headers["x-upsert"] = "true" if overwrite else "false"

        try:
            async with self._client() as client:
                response = await client.post(
                    self._object_url(self.bucket, key),
                    headers=headers,
                    content=data,
                )
        except httpx.TimeoutException as e:
            logger.error("Storage upload timeout: %s", str(e))
            raise UploadError(f"Storage upload timed out for {key}") from e
        except httpx.RequestError as e:
            logger.error("Storage upload request error: %s", str(e))
            raise UploadError(f"Storage upload failed for {key}: {e}") from e

        if response.status_code not in (200, 201):
            logger.error(
                "Storage API error: status=%d, response=%s",
                response.status_code,
                response.text[:500],
            )
            raise UploadError(
                f"Storage rejected upload of {key}: {response.status_code} {response.text[:200]}"
            )

        return f"{self.bucket}/{key}"

    def get_public_url(self, key: str) -> str:
        """Public URL of an object in the configured bucket."""
        return f"{self.base_url}{PUBLIC_OBJECT_PREFIX}{self.bucket}/{quote(key)}"

    async def delete(self, bucket: str, key: str) -> bool:
        """Remove an object, logging instead of raising on failure.

        Returns:
            True if the store confirmed the removal.
        """
        try:
            async with self._client() as client:
                response = await client.request(
                    "DELETE",
                    f"{self.base_url}/storage/v1/object/{bucket}",
                    headers=self._headers(),
                    json={"prefixes": [key]},
                )
        except httpx.HTTPError as e:
            logger.warning("Storage cleanup failed for %s/%s: %s", bucket, key, str(e))
            return False

        if response.status_code != 200:
            logger.warning(
                "Storage cleanup failed for %s/%s: status=%d, response=%s",
                bucket,
                key,
                response.status_code,
                response.text[:200],
            )
            return False

        logger.info("Deleted object: %s/%s", bucket, key)
        return True


def parse_public_url(url: str) -> tuple[str, str] | None:
    """Recover ``(bucket, key)`` from a public object URL.

    Returns None when the URL does not point into public storage.
    """
    if not url:
        return None
    path = urlsplit(url).path
    _, sep, rest = path.partition(PUBLIC_OBJECT_PREFIX)
    if not sep:
        return None
    bucket, _, key = rest.partition("/")
    if not bucket or not key:
        return None
    return bucket, unquote(key)
