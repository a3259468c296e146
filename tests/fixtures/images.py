"""Generated test images (no binary files checked in)."""

import io

from PIL import Image


def make_image_bytes(
    width: int = 64, height: int = 48, fmt: str = "PNG", mode: str = "RGB"
) -> bytes:
    color = (200, 120, 40, 255) if mode == "RGBA" else (200, 120, 40)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color=color).save(buffer, format=fmt)
    return buffer.getvalue()
