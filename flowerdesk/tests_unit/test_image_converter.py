"""
Tests for bouquet photo normalization (core.image_convert).

Фото букета приходит в base64 (иногда с префиксом data:image/...;base64,)
и сохраняется как WebP data URL с ограничением по длинной стороне.
"""
import base64
import io

import pytest
from PIL import Image

from flowerdesk.app.core.image_convert import (
    decode_photo,
    normalize_photo,
    shrink_to_fit,
    validate_image_content,
)

WEBP_PREFIX = "data:image/webp;base64,"


# --- validate_image_content ---


def test_validate_image_content_jpeg():
    """JPEG magic bytes are recognized."""
    assert validate_image_content(b'\xff\xd8\xff' + b'\x00' * 10) is True


def test_validate_image_content_png():
    """PNG magic bytes are recognized."""
    assert validate_image_content(b'\x89PNG\r\n\x1a\n' + b'\x00' * 10) is True


def test_validate_image_content_webp():
    """WebP magic bytes are recognized."""
    assert validate_image_content(b'RIFF' + b'\x00' * 4 + b'WEBP') is True


def test_validate_image_content_gif():
    """GIF87a and GIF89a are recognized."""
    assert validate_image_content(b'GIF87a' + b'\x00' * 10) is True
    assert validate_image_content(b'GIF89a' + b'\x00' * 10) is True


def test_validate_image_content_invalid():
    """Non-image bytes are rejected."""
    assert validate_image_content(b'') is False
    assert validate_image_content(b'not an image') is False


# --- decode_photo ---


def _png_b64(width: int, height: int, mode: str = "RGB") -> str:
    buf = io.BytesIO()
    color = (200, 40, 80, 128) if mode == "RGBA" else (200, 40, 80)
    Image.new(mode, (width, height), color=color).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _decoded_size(data_url: str) -> tuple:
    assert data_url.startswith(WEBP_PREFIX)
    raw = base64.b64decode(data_url[len(WEBP_PREFIX):])
    assert raw.startswith(b'RIFF') and b'WEBP' in raw[:12]
    return Image.open(io.BytesIO(raw)).size


def test_decode_photo_plain_and_data_url_match():
    payload = _png_b64(10, 10)
    assert decode_photo(payload) == decode_photo("data:image/png;base64," + payload)


def test_decode_photo_invalid_base64():
    with pytest.raises(ValueError) as exc_info:
        decode_photo("это не base64!")
    assert "base64" in str(exc_info.value)


# --- shrink_to_fit ---


def test_shrink_to_fit_keeps_aspect_ratio():
    img = Image.new("RGB", (1200, 600))
    assert shrink_to_fit(img, 600).size == (600, 300)


def test_shrink_to_fit_never_upscales():
    img = Image.new("RGB", (100, 50))
    assert shrink_to_fit(img, 600) is img


# --- normalize_photo ---


def test_normalize_photo_returns_webp_data_url():
    out = normalize_photo(_png_b64(100, 80))
    assert _decoded_size(out) == (100, 80)


def test_normalize_photo_resizes_long_side():
    """Портретное фото 800x1600 при лимите 600 становится 300x600."""
    out = normalize_photo(_png_b64(800, 1600), max_side_px=600)
    assert _decoded_size(out) == (300, 600)


def test_normalize_photo_accepts_data_url_prefix():
    out = normalize_photo("data:image/png;base64," + _png_b64(20, 20))
    assert _decoded_size(out) == (20, 20)


def test_normalize_photo_flattens_alpha():
    out = normalize_photo(_png_b64(30, 30, mode="RGBA"))
    assert _decoded_size(out) == (30, 30)


def test_normalize_photo_not_an_image():
    """Валидный base64, но не картинка - ValueError."""
    payload = base64.b64encode(b"just some text, not pixels").decode("ascii")
    with pytest.raises(ValueError) as exc_info:
        normalize_photo(payload)
    assert "изображением" in str(exc_info.value)


def test_normalize_photo_truncated_image():
    raw = base64.b64decode(_png_b64(50, 50))
    payload = base64.b64encode(raw[:40]).decode("ascii")
    with pytest.raises(ValueError):
        normalize_photo(payload)
