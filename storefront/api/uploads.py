# storefront/api/uploads.py
from typing import Any, Dict, Iterable, List

from fastapi import UploadFile

from storefront.domain.errors import ValidationError

ALLOWED_PREFIX = "image/"


def read_uploads(files: Iterable[UploadFile | None]) -> List[Dict[str, Any]]:
    """Buffer multipart images in memory for the image host client."""
    uploads = []
    for f in files:
        if f is None or not f.filename:
            continue
        content_type = f.content_type or "application/octet-stream"
        if not content_type.startswith(ALLOWED_PREFIX):
            raise ValidationError(f"{f.filename} is not an image")
        uploads.append({"content": f.file.read(), "filename": f.filename, "content_type": content_type})
    return uploads
