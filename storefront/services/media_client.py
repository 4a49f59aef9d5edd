# storefront/services/media_client.py
import hashlib
import time

import requests

from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry
from storefront.utils.settings import (
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
)

logger = get_logger(__name__)

CLOUDINARY_API = "https://api.cloudinary.com/v1_1"


class MediaClient:
    """Thin client for Cloudinary's signed image upload/destroy endpoints."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        timeout: int = 10,
    ):
        self.cloud_name = cloud_name or CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or CLOUDINARY_API_KEY
        self.api_secret = api_secret or CLOUDINARY_API_SECRET
        self.timeout = timeout
        self.base_url = f"{CLOUDINARY_API}/{self.cloud_name}/image"

    def sign(self, params: dict) -> str:
        to_sign = "&".join(f"{k}={v}" for k, v in sorted(params.items()) if v not in (None, ""))
        return hashlib.sha1((to_sign + self.api_secret).encode("utf-8")).hexdigest()

    def _signed(self, params: dict) -> dict:
        params = {**params, "timestamp": int(time.time())}
        return {**params, "signature": self.sign(params), "api_key": self.api_key}

    @http_retry()
    def upload(self, content: bytes, filename: str, content_type: str, folder: str) -> dict:
        url = f"{self.base_url}/upload"
        logger.info(f"MediaClient POST {url} ({filename}, folder={folder})")

        resp = requests.post(
            url,
            data=self._signed({"folder": folder}),
            files={"file": (filename, content, content_type)},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        body = resp.json()
        return {"url": body["secure_url"], "public_id": body["public_id"]}

    @http_retry()
    def destroy(self, public_id: str) -> bool:
        url = f"{self.base_url}/destroy"
        logger.info(f"MediaClient POST {url} ({public_id})")

        resp = requests.post(url, data=self._signed({"public_id": public_id}), timeout=self.timeout)
        resp.raise_for_status()
        return resp.json().get("result") == "ok"
