"""
Bouquet photo normalization: base64 payload in, compact WebP data URL out.
Dependencies: Pillow.
"""
import base64
import binascii
import io
import re

from PIL import Image, ImageOps

DEFAULT_QUALITY = 80
DEFAULT_MAX_SIDE_PX = 600

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(;[\w=-]+)*;base64,", re.IGNORECASE)


def validate_image_content(content: bytes) -> bool:
    """Check magic bytes: JPEG, PNG, WebP or GIF."""
    if content.startswith(b'\xff\xd8\xff'):
        return True
    if content.startswith(b'\x89PNG\r\n\x1a\n'):
        return True
    if content.startswith(b'RIFF') and b'WEBP' in content[:12]:
        return True
    if content.startswith(b'GIF87a') or content.startswith(b'GIF89a'):
        return True
    return False


def decode_photo(photo: str) -> bytes:
    """Decode a base64 string, with or without a ``data:image/...;base64,`` prefix.

    :raises ValueError: if the payload is not valid base64.
    """
    payload = _DATA_URL_RE.sub("", photo.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Фото должно быть в формате base64") from e


def shrink_to_fit(img: Image.Image, max_side_px: int) -> Image.Image:
    """Downscale so the longest side is at most ``max_side_px``; never upscale."""
    w, h = img.size
    if max(w, h) <= max_side_px:
        return img
    ratio = max_side_px / max(w, h)
    new_size = (max(1, int(w * ratio)), max(1, int(h * ratio)))
    return img.resize(new_size, Image.Resampling.LANCZOS)


def normalize_photo(
    photo: str,
    max_side_px: int = DEFAULT_MAX_SIDE_PX,
    quality: int = DEFAULT_QUALITY,
) -> str:
    """
    Validate a bouquet photo and re-encode it as a WebP data URL:
    EXIF rotation, resize by the long side, alpha flattened to RGB.

    :raises ValueError: if the payload is not an image or cannot be processed.
    """
    content = decode_photo(photo)
    if not validate_image_content(content):
        raise ValueError("Файл не является изображением")
    try:
        img = Image.open(io.BytesIO(content))
        img.verify()
        img = Image.open(io.BytesIO(content))
        img = ImageOps.exif_transpose(img)
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        img = shrink_to_fit(img, max_side_px)
        out = io.BytesIO()
        img.save(out, "WEBP", quality=quality)
    except Exception as e:
        raise ValueError("Не удалось обработать изображение") from e
    return "data:image/webp;base64," + base64.b64encode(out.getvalue()).decode("ascii")
