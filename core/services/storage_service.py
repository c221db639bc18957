# =============================================================================
# core/services/storage_service.py - Todo Image Storage
# =============================================================================
# Validates selected images and uploads them to Supabase Storage.
#
# Objects live under "<user_id>/<random hex><ext>": the user prefix keeps
# users apart (and matches per-user storage policies), the random part
# keeps rapid successive uploads by one user from colliding.
# =============================================================================

import logging
from uuid import UUID, uuid4

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.draft import ImageFile
from app.exceptions import UploadError, InvalidImageTypeError, ImageTooLargeError

logger = logging.getLogger(__name__)


class ImageStorageService:
    """
    Service for todo image uploads.

    Uploads never overwrite an existing object.
    """

    def __init__(
        self,
        backend: SupabaseClient,
        bucket: str = "todo-images",
        cache_control: str = "3600",
        allowed_types: list[str] | None = None,
        max_size_bytes: int = 5 * 1024 * 1024,
    ):
        self.backend = backend
        self.bucket = bucket
        self.cache_control = cache_control
        self.allowed_types = allowed_types or ["image/png", "image/jpeg", "image/gif", "image/webp"]
        self.max_size_bytes = max_size_bytes

    def validate(self, image: ImageFile) -> None:
        """
        Check type and size before the image is accepted into a draft.

        Raises:
            InvalidImageTypeError: If the content type is not allowed
            ImageTooLargeError: If the image exceeds the size limit
        """
        if image.content_type.lower() not in self.allowed_types:
            raise InvalidImageTypeError(image.filename, image.content_type, self.allowed_types)

        if image.size_bytes > self.max_size_bytes:
            raise ImageTooLargeError(
                image.size_bytes / (1024 * 1024),
                self.max_size_bytes // (1024 * 1024),
            )

    @staticmethod
    def build_path(user_id: UUID | str, image: ImageFile) -> str:
        """Build a unique, user-namespaced object path."""
        return f"{user_id}/{uuid4().hex}{image.extension}"

    def upload(self, user_id: UUID | str, image: ImageFile) -> str:
        """
        Upload an image and return its public URL.

        Raises:
            UploadError: If the upload or URL lookup fails
        """
        path = self.build_path(user_id, image)

        try:
            self.backend.upload_object(
                self.bucket,
                path,
                image.content,
                content_type=image.content_type,
                cache_control=self.cache_control,
            )
            url = self.backend.get_public_url(self.bucket, path)
        except SupabaseClientError as e:
            logger.error(f"Image upload failed for {path}: {e}")
            raise UploadError(e.message, path=path)

        logger.info(f"Uploaded image {image.filename} ({image.size_bytes} bytes) to {path}")
        return url
