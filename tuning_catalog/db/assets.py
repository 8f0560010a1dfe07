"""Image uploads to the Supabase storage bucket."""

import base64
import binascii
import mimetypes
import uuid

from ..core.config import get_settings
from ..utils.text import slugify
from .client import run_query


def decode_image(image_data: str) -> bytes:
    """Decode a base64 payload, accepting an optional ``data:...;base64,`` prefix."""
    if image_data.startswith("data:") and "," in image_data:
        image_data = image_data.split(",", 1)[1]
    try:
        return base64.b64decode(image_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Image data is not valid base64") from e


def asset_path(folder: str, filename: str) -> str:
    """Unique storage path keeping a readable, slugified file name."""
    stem, dot, ext = filename.rpartition(".")
    if not dot:
        stem, ext = filename, "png"
    return f"{folder}/{uuid.uuid4().hex[:12]}-{slugify(stem) or 'image'}.{ext.lower()}"


async def upload_image(image_data: str, filename: str, folder: str = "uploads") -> dict[str, str]:
    """Upload a base64 image and return its public URL and storage path."""
    content = decode_image(image_data)
    if not content:
        raise ValueError("Image data is empty")

    bucket = get_settings().supabase_storage_bucket
    path = asset_path(folder, filename)
    content_type = mimetypes.guess_type(filename)[0] or "image/png"

    await run_query(
        "upload",
        f"storage:{bucket}",
        lambda c: c.storage.from_(bucket).upload(
            path, content, {"content-type": content_type}
        ),
    )
    url = await run_query(
        "public_url",
        f"storage:{bucket}",
        lambda c: c.storage.from_(bucket).get_public_url(path),
    )
    return {"url": str(url), "asset_path": path}
