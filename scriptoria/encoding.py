"""Reading uploads and converting them to base64 payloads and previews."""

import base64
import logging
import mimetypes
from io import BytesIO
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

from scriptoria.errors import FileReadError
from scriptoria.models.upload import EncodedImage, UploadedFile


log = logging.getLogger(__name__)


def read_upload_bytes(upload: UploadedFile) -> bytes:
    """Read the raw bytes of an upload from memory or disk"""
    if upload.data is not None:
        return upload.data
    if upload.path is None:
        raise FileReadError(f"{upload.name} has no content")
    try:
        return upload.path.read_bytes()
    except OSError as e:
        log.error(f"❌ Error reading {upload.path}: {e}")
        raise FileReadError(f"Could not read {upload.name}: {e}") from e


def sniff_mime_type(data: bytes) -> Optional[str]:
    """Detect an image type from its content using Pillow"""
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return None
    return Image.MIME.get(fmt) if fmt else None


def resolve_mime_type(upload: UploadedFile, data: bytes, default: str) -> str:
    # Declared type wins, then the filename, then the bytes themselves
    if upload.content_type:
        return upload.content_type
    guessed, _ = mimetypes.guess_type(upload.name)
    if guessed:
        return guessed
    return sniff_mime_type(data) or default


def to_data_uri(encoded: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{encoded}"


def encode_upload(
    upload: UploadedFile, default_mime_type: str = "application/octet-stream"
) -> EncodedImage:
    """Read an upload and encode it to base64 plus a data URI preview"""
    data = read_upload_bytes(upload)
    if not data:
        raise FileReadError(f"Could not read {upload.name}: file is empty")

    mime_type = resolve_mime_type(upload, data, default_mime_type)
    encoded = base64.b64encode(data).decode("utf-8")
    log.debug(f"Encoded {upload.name} ({mime_type}) to base64: {len(encoded)} chars")

    return EncodedImage(
        name=upload.name,
        mime_type=mime_type,
        encoded=encoded,
        preview=to_data_uri(encoded, mime_type),
    )


def decode_preview(encoded: str, max_size: Tuple[int, int]) -> Image.Image:
    """Decode a base64 payload into a Pillow image fitted within max_size"""
    img = Image.open(BytesIO(base64.b64decode(encoded)))
    img = img.convert("RGB")
    img.thumbnail(max_size, Image.Resampling.LANCZOS)
    return img
