"""Media storage backends and the FastAPI dependency that selects one."""
from functools import lru_cache

from eventapp.config import Settings, settings
from eventapp.storage.base import StorageBackend
from eventapp.storage.cloudinary import CloudinaryStorage
from eventapp.storage.s3 import S3Storage

__all__ = ["StorageBackend", "S3Storage", "CloudinaryStorage", "build_storage", "get_storage"]


def build_storage(config: Settings) -> StorageBackend:
    """Pick the backend named by ``STORAGE_TYPE``; anything but ``s3`` means Cloudinary."""
    if config.STORAGE_TYPE.lower() == "s3":
        return S3Storage(
            bucket=config.AWS_S3_BUCKET_NAME,
            region=config.AWS_REGION,
            access_key_id=config.AWS_ACCESS_KEY_ID,
            secret_access_key=config.AWS_SECRET_ACCESS_KEY,
            timeout=config.STORAGE_TIMEOUT_SECONDS,
        )
    return CloudinaryStorage(
        cloud_name=config.CLOUDINARY_CLOUD_NAME,
        upload_preset=config.CLOUDINARY_UPLOAD_PRESET,
        api_key=config.CLOUDINARY_API_KEY,
        api_secret=config.CLOUDINARY_API_SECRET,
        timeout=config.STORAGE_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=1)
def get_storage() -> StorageBackend:
    return build_storage(settings)
