"""
upload_service.py — Image uploads for receipts and profile pictures
Files are written under UPLOAD_DIR and served back from /uploads.
"""

import logging
import os
import random
import time

from fastapi import UploadFile

from config import UPLOAD_DIR, MAX_FILE_SIZE
from errors import BadRequest

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
URL_PREFIX = "/uploads/"


def save_image(file: UploadFile, field_name: str) -> str:
    """Validate and store an uploaded image. Returns its public relative URL."""
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise BadRequest("Only image files (JPEG, PNG, GIF, WebP) are allowed")

    # One byte past the limit is enough to tell an oversized upload apart
    content = file.file.read(MAX_FILE_SIZE + 1)
    if len(content) > MAX_FILE_SIZE:
        raise BadRequest("File size too large")

    ext = os.path.splitext(file.filename)[1].lower()
    filename = f"{field_name}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    os.makedirs(UPLOAD_DIR, exist_ok=True)
    with open(os.path.join(UPLOAD_DIR, filename), "wb") as out:
        out.write(content)

    return URL_PREFIX + filename


def delete_upload(url: str):
    """Remove a previously stored upload; unknown or foreign URLs are ignored."""
    if not url or not url.startswith(URL_PREFIX):
        return
    path = os.path.join(UPLOAD_DIR, os.path.basename(url))
    if os.path.exists(path):
        os.remove(path)
        logger.info(f"Removed upload {path}")
