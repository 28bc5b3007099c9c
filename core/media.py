# core/media.py
"""
Thin wrapper over the configured storage backend for user images.

Local filesystem in dev, S3 (django-storages) when USE_S3_MEDIA=1.
Stored values are storage names; OAuth avatars are kept as absolute URLs.
"""
import logging
import os
import uuid

from django.core.files.storage import default_storage

logger = logging.getLogger("spot.media")


class MediaUploadError(Exception):
    """Raised when the storage backend refuses an upload."""


def is_external(name) -> bool:
    return bool(name) and name.startswith(("http://", "https://"))


def upload_image(uploaded_file, folder: str) -> str:
    """
    Save an uploaded image under <folder>/ with a random name.
    Returns the storage name to keep on the model.
    """
    _, ext = os.path.splitext(getattr(uploaded_file, "name", "") or "")
    target = f"{folder}/{uuid.uuid4().hex}{ext.lower()}"
    try:
        return default_storage.save(target, uploaded_file)
    except Exception as exc:
        logger.error("Image upload to %s failed: %s", folder, exc)
        raise MediaUploadError(str(exc)) from exc


def delete_image(name) -> None:
    if not name or is_external(name):
        return
    default_storage.delete(name)


def replace_image(old_name, uploaded_file, folder: str) -> str:
    """
    Upload first, remove the old file only once the new one is stored.
    A failed upload raises and leaves the old image untouched.
    """
    new_name = upload_image(uploaded_file, folder)
    if old_name:
        try:
            delete_image(old_name)
        except Exception as exc:
            # Orphaned file is acceptable; losing the new one is not
            logger.warning("Could not delete old image %s: %s", old_name, exc)
    return new_name


def image_url(name, request=None):
    if not name:
        return None
    if is_external(name):
        return name
    url = default_storage.url(name)
    return request.build_absolute_uri(url) if request and url.startswith("/") else url
