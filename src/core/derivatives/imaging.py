"""Pillow transforms that turn an original image into JPEG derivatives."""

import io

from PIL import Image, ImageOps

from core.utils.constants import (
    DERIVATIVE_QUALITY,
    PREVIEW_MAX_HEIGHT,
    PREVIEW_MAX_WIDTH,
    THUMBNAIL_SIZE,
)


def load_image(data: bytes) -> Image.Image:
    """Decode bytes and apply the EXIF orientation."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return ImageOps.exif_transpose(image)


def to_rgb(image: Image.Image) -> Image.Image:
    """Flatten alpha and palette images onto white. JPEG has no alpha."""
    if image.mode in ("RGBA", "LA", "P", "PA"):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background

    if image.mode != "RGB":
        return image.convert("RGB")

    return image


def encode_jpeg(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    to_rgb(image).save(buffer, format="JPEG", quality=DERIVATIVE_QUALITY)
    return buffer.getvalue()


def preview_dimensions(width: int, height: int) -> tuple[int, int]:
    """Fit inside 1920x1080 keeping the aspect ratio. Never upscales."""
    if width <= PREVIEW_MAX_WIDTH and height <= PREVIEW_MAX_HEIGHT:
        return width, height

    ratio = min(PREVIEW_MAX_WIDTH / width, PREVIEW_MAX_HEIGHT / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def make_thumbnail(data: bytes) -> bytes:
    """200x200 centered cover crop."""
    image = to_rgb(load_image(data))
    thumbnail = ImageOps.fit(
        image,
        (THUMBNAIL_SIZE, THUMBNAIL_SIZE),
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )
    return encode_jpeg(thumbnail)


def make_preview(data: bytes) -> bytes:
    image = to_rgb(load_image(data))
    size = preview_dimensions(*image.size)

    if size != image.size:
        image = image.resize(size, Image.Resampling.LANCZOS)

    return encode_jpeg(image)
