"""Cloudinary media backend, spoken to over its REST API."""
import hashlib
import logging
import time
from typing import Optional

import requests

from eventapp.errors import UploadError
from eventapp.storage.base import StorageBackend, random_key

logger = logging.getLogger(__name__)

API_BASE = "https://api.cloudinary.com/v1_1"
DELIVERY_BASE = "https://res.cloudinary.com"


class CloudinaryStorage(StorageBackend):
    """Keys are Cloudinary public ids.

    Unlike S3, ``sign`` does not return a time-limited URL: it returns the
    public delivery URL for the key and ignores ``ttl_seconds``, so the link
    keeps working until the asset is deleted. Deletion needs API credentials;
    without them ``delete`` reports ``False``.
    """

    name = "cloudinary"

    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        api_key: str = "",
        api_secret: str = "",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self.http = session or requests.Session()

    def _api(self, action: str) -> str:
        return f"{API_BASE}/{self.cloud_name}/image/{action}"

    def upload(self, content: bytes, content_type: str) -> str:
        public_id = random_key()
        try:
            resp = self.http.post(
                self._api("upload"),
                data={"upload_preset": self.upload_preset, "public_id": public_id},
                files={"file": (public_id.rsplit("/", 1)[-1], content, content_type)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.exception("Cloudinary upload failed")
            raise UploadError(f"Failed to upload media: {exc}") from exc

        key = body.get("public_id")
        if not key:
            raise UploadError("Cloudinary response did not include a public_id")
        logger.info("Uploaded %d bytes to Cloudinary as %s", len(content), key)
        return key

    def sign(self, key: Optional[str], ttl_seconds: int = 3600) -> Optional[str]:
        if not key:
            return None
        return f"{DELIVERY_BASE}/{self.cloud_name}/image/upload/{key}"

    def _signature(self, params: dict) -> str:
        payload = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1((payload + self.api_secret).encode("utf-8")).hexdigest()

    def delete(self, key: Optional[str]) -> bool:
        if not key:
            return False
        if not (self.api_key and self.api_secret):
            logger.warning("Cloudinary API credentials missing; cannot delete %s", key)
            return False

        params = {"public_id": key, "timestamp": int(time.time())}
        data = dict(params, api_key=self.api_key, signature=self._signature(params))
        try:
            resp = self.http.post(self._api("destroy"), data=data, timeout=self.timeout)
            resp.raise_for_status()
            result = resp.json().get("result")
        except (requests.RequestException, ValueError):
            logger.warning("Error deleting Cloudinary asset %s", key, exc_info=True)
            return False

        if result != "ok":
            logger.info("Cloudinary asset %s not deleted (%s)", key, result)
            return False
        logger.info("File deleted from Cloudinary: %s", key)
        return True
