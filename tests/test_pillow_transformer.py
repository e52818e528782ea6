"""
Tests for the Pillow image transformer.
"""

from io import BytesIO

import pytest
from PIL import Image

from conftest import encode_image
from image_cache.errors import TransformFailedError
from image_cache.repositories import PillowImageTransformer


def decode(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


def test_resizes_to_width_preserving_aspect_ratio(transformer, png_bytes):
    output = transformer.transform(png_bytes, width=200, quality=70, image_format="webp")

    image = decode(output)
    assert image.format == "WEBP"
    assert image.size == (200, 150)


def test_never_enlarges(transformer, png_bytes):
    output = transformer.transform(png_bytes, width=1000, quality=80, image_format="webp")
    assert decode(output).size == (400, 300)


def test_no_width_keeps_dimensions(transformer, png_bytes):
    output = transformer.transform(png_bytes, width=None, quality=80, image_format="png")

    image = decode(output)
    assert image.format == "PNG"
    assert image.size == (400, 300)


def test_jpeg_output_from_transparent_source(transformer):
    source = encode_image(mode="RGBA")
    output = transformer.transform(source, width=100, quality=80, image_format="jpg")

    image = decode(output)
    assert image.format == "JPEG"
    assert image.mode == "RGB"
    assert image.width == 100


def test_webp_keeps_alpha(transformer):
    source = encode_image(mode="RGBA")
    image = decode(transformer.transform(source, width=None, quality=80, image_format="webp"))
    assert image.mode == "RGBA"


def test_lower_quality_gives_smaller_output(transformer):
    noise = Image.effect_noise((256, 256), 64).convert("RGB")
    buffer = BytesIO()
    noise.save(buffer, "PNG")

    low = transformer.transform(buffer.getvalue(), width=None, quality=10, image_format="jpeg")
    high = transformer.transform(buffer.getvalue(), width=None, quality=95, image_format="jpeg")
    assert len(low) < len(high)


def test_out_of_range_quality_is_clamped(transformer, png_bytes):
    assert transformer.transform(png_bytes, width=None, quality=500, image_format="webp")
    assert transformer.transform(png_bytes, width=None, quality=0, image_format="webp")


def test_malformed_input_raises_transform_failed(transformer):
    with pytest.raises(TransformFailedError):
        transformer.transform(b"definitely not an image", width=100, quality=80, image_format="webp")


def test_truncated_input_raises_transform_failed(transformer, png_bytes):
    with pytest.raises(TransformFailedError):
        transformer.transform(png_bytes[: len(png_bytes) // 2], width=100, quality=80, image_format="webp")


def test_pixel_limit_is_enforced(png_bytes):
    transformer = PillowImageTransformer(max_pixels=1000)
    with pytest.raises(TransformFailedError, match="too many pixels"):
        transformer.transform(png_bytes, width=None, quality=80, image_format="webp")


def test_unknown_format_raises_transform_failed(transformer, png_bytes):
    with pytest.raises(TransformFailedError):
        transformer.transform(png_bytes, width=None, quality=80, image_format="bmpx")


def test_default_format_is_available(transformer):
    assert transformer.is_available() is True
    assert transformer.supports("png") is True
    assert transformer.supports("bmpx") is False


def test_broken_encoder_is_reported_unavailable(monkeypatch, transformer):
    def broken_save(image, fp, filename):
        raise OSError("encoder error -2")

    Image.init()
    monkeypatch.setitem(Image.SAVE, "WEBP", broken_save)

    assert transformer.is_available() is False


def test_unknown_default_format_is_unavailable():
    assert PillowImageTransformer(default_format="bmpx").is_available() is False
