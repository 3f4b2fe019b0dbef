"""Upload validation and image optimization for medical records."""

from __future__ import annotations

import logging
import os
import random
import re
import time
from io import BytesIO

from django.conf import settings
from django.core.files.base import ContentFile
from PIL import Image, ImageOps, UnidentifiedImageError

from clinic_backend.core.exceptions import InvalidRequest

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'pdf', 'doc', 'docx', 'xls', 'xlsx'}

ALLOWED_MIME_TYPES = {
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/gif',
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}

IMAGE_MIME_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif'}

_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9._-]')


def _extension(filename: str) -> str:
    return os.path.splitext(filename or '')[1].lower().lstrip('.')


def sanitize_filename(filename: str) -> str:
    base = os.path.basename(filename or 'upload')
    return _UNSAFE_CHARS.sub('_', base) or 'upload'


def stored_record_name(filename: str) -> str:
    """``record-{ms timestamp}-{random}-{sanitized original name}``"""
    suffix = random.randint(0, 10 ** 9)
    return f"record-{int(time.time() * 1000)}-{suffix}-{sanitize_filename(filename)}"


def validate_upload(upload) -> None:
    """Reject files with a disallowed extension/mime type or above the size cap."""
    ext = _extension(upload.name)
    mime = (getattr(upload, 'content_type', '') or '').lower()
    if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_MIME_TYPES:
        raise InvalidRequest(
            'Invalid file type. Only images (jpg, png, gif), PDF, Word and Excel files are allowed.',
            code='INVALID_FILE_TYPE',
        )
    max_bytes = settings.MEDICAL_RECORD_MAX_UPLOAD_BYTES
    if upload.size > max_bytes:
        raise InvalidRequest(
            f'File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.',
            code='FILE_TOO_LARGE',
        )


def optimize_image(upload) -> tuple[ContentFile, str] | None:
    """Downscale an uploaded image to fit the configured box and re-encode as JPEG.

    Returns ``(content, new_extension)`` or ``None`` when the file is not an
    optimizable image; the caller then stores the original bytes.
    """
    mime = (getattr(upload, 'content_type', '') or '').lower()
    if mime not in IMAGE_MIME_TYPES:
        return None

    try:
        upload.seek(0)
        image = Image.open(upload)
        if getattr(image, 'is_animated', False):
            return None
        image = ImageOps.exif_transpose(image)
        # thumbnail() never enlarges
        image.thumbnail(settings.MEDICAL_RECORD_IMAGE_MAX_SIZE, Image.LANCZOS)
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')

        buffer = BytesIO()
        image.save(
            buffer,
            format='JPEG',
            quality=settings.MEDICAL_RECORD_IMAGE_QUALITY,
            progressive=True,
            optimize=True,
        )
    except (UnidentifiedImageError, OSError) as exc:
        logger.warning('Image optimization skipped for %s: %s', upload.name, exc)
        upload.seek(0)
        return None

    return ContentFile(buffer.getvalue()), 'jpg'
