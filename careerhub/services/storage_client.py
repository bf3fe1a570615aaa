"""
Supabase Storage Client

Uploaded documents (resumes, cover letters, transcripts) live in a public
Supabase Storage bucket. Only the public URL is kept in the database.
"""
import logging

import httpx

from careerhub.core.config import get_settings
from careerhub.core.exceptions import UpstreamServiceError
from careerhub.services.providers import DocumentStorage

logger = logging.getLogger(__name__)

settings = get_settings()


class SupabaseStorage(DocumentStorage):

    def __init__(self, client: httpx.Client = None):
        self.base_url = settings.supabase_url.rstrip("/")
        self.bucket = settings.supabase_bucket
        self.client = client or httpx.Client(
            timeout=settings.provider_timeout_seconds,
            headers={
                "Authorization": f"Bearer {settings.supabase_key}",
                "apikey": settings.supabase_key,
            },
        )

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"
        try:
            response = self.client.post(
                url,
                content=content,
                headers={"Content-Type": content_type, "x-upsert": "true"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Storage upload failed for %s: %s", path, e)
            raise UpstreamServiceError(f"Upload failed: {e}", provider="storage") from e

        return self.public_url(path)


_storage: SupabaseStorage = None


def get_document_storage() -> DocumentStorage:
    """Get or create the storage client (singleton pattern)"""
    global _storage
    if _storage is None:
        _storage = SupabaseStorage()
    return _storage
