"""Data URI helpers for passing images inline instead of by URL."""

import base64
import binascii
import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

FALLBACK_MIME_TYPE = "image/png"


def detect_mime_type(data: bytes, content_type: str | None = None) -> str:
    """Sniff the image format from its bytes, then trust an image/* header, then PNG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            mime = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        mime = None
    if mime:
        return mime
    if content_type:
        header = content_type.split(";", 1)[0].strip().lower()
        if header.startswith("image/"):
            return header
    return FALLBACK_MIME_TYPE


def to_data_uri(data: bytes, mime_type: str = FALLBACK_MIME_TYPE) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into (mime type, raw bytes)."""
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI")
    header, payload = uri[len("data:"):].split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URIs are supported")
    try:
        return header[: -len(";base64")], base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def is_remote(path_or_url: str) -> bool:
    return path_or_url.startswith(("http://", "https://", "data:"))


def to_image_input(path_or_url: str) -> str:
    """Local files become data URIs; URLs and data URIs pass through unchanged."""
    if is_remote(path_or_url):
        return path_or_url
    data = Path(path_or_url).read_bytes()
    return to_data_uri(data, detect_mime_type(data))
