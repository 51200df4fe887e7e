"""
Image codec: converts raw image bytes to self-describing data URLs and back.
"""
import base64
import binascii
import io
import re
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .exceptions import FormatError

SUPPORTED_MEDIA_TYPES = (
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
    "image/bmp",
    "image/heic",
    "image/heif",
)

_DATA_URL_RE = re.compile(r"^data:([\w.+-]+/[\w.+-]+);base64,(.*)$", re.DOTALL)


def encode(binary: bytes, media_type: str) -> str:
    """Encode image bytes as a ``data:<media_type>;base64,<payload>`` string."""
    payload = base64.b64encode(binary).decode("ascii")
    return f"data:{media_type};base64,{payload}"


def decode(encoded: str) -> Tuple[bytes, str]:
    """
    Decode a data URL produced by :func:`encode`.

    Returns:
        Tuple of (image bytes, media type).

    Raises:
        FormatError: if the string does not have the data URL shape or the
            payload is not valid base64.
    """
    if not isinstance(encoded, str):
        raise FormatError(f"Encoded image must be a string, got {type(encoded).__name__}")
    match = _DATA_URL_RE.match(encoded)
    if not match:
        raise FormatError('Invalid encoded image format. Expected "data:<type>/<subtype>;base64,<payload>"')
    media_type, payload = match.groups()
    try:
        binary = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid base64 payload in encoded image: {e}") from e
    return binary, media_type


def derive_id(name: str, mtime: int, size: int) -> str:
    """Stable per-file id. Distinct files sharing all three values collide."""
    return f"{name}-{mtime}-{size}"


def sniff_media_type(binary: bytes) -> str:
    """Detect an image's media type from its bytes."""
    try:
        with Image.open(io.BytesIO(binary)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise FormatError(f"Unrecognised image data: {e}") from e
    mime_type = Image.MIME.get(fmt) if fmt else None
    if not mime_type:
        raise FormatError(f"No media type known for image format {fmt!r}")
    return mime_type


def make_preview(binary: bytes, max_size: Tuple[int, int] = (256, 256)) -> Image.Image:
    """Return a thumbnail of the image no larger than ``max_size``."""
    try:
        img = Image.open(io.BytesIO(binary))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise FormatError(f"Cannot render preview: {e}") from e
    img.thumbnail(max_size)
    return img


def subtype(media_type: str) -> str:
    """``image/png`` -> ``png``."""
    return media_type.split("/", 1)[-1] if "/" in media_type else media_type
