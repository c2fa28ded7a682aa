"""Company logo handling: turn an uploaded image into an embeddable data URL."""

import base64
import logging
from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 320


class LogoError(Exception):
    """The uploaded file could not be used as a logo."""
    pass


def prepare_logo(image: Union[str, Path, bytes, Image.Image], max_size: int = DEFAULT_MAX_SIZE) -> str:
    """
    Prepare a logo for the invoice: validate, orient, resize, encode.

    Args:
        image: Uploaded file contents, a path, or a PIL image
        max_size: Longest edge in pixels after resizing

    Returns:
        PNG data URL, e.g. "data:image/png;base64,iVBOR..."

    Raises:
        LogoError: If the input is not a readable image
    """
    # Step 1: Load into PIL Image
    try:
        if isinstance(image, (str, Path)):
            pil_img = Image.open(image)
        elif isinstance(image, bytes):
            pil_img = Image.open(BytesIO(image))
        elif isinstance(image, Image.Image):
            pil_img = image
        else:
            raise LogoError(f"Unsupported image type: {type(image)}")
        pil_img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise LogoError(f"Could not read logo image: {e}") from e

    # Step 2: Handle EXIF orientation
    pil_img = ImageOps.exif_transpose(pil_img)

    # Step 3: Keep transparency, otherwise convert to RGB (handles CMYK, palette modes)
    if pil_img.mode in ("RGBA", "LA") or (pil_img.mode == "P" and "transparency" in pil_img.info):
        pil_img = pil_img.convert("RGBA")
    elif pil_img.mode != "RGB":
        pil_img = pil_img.convert("RGB")

    # Step 4: Resize if too large (preserve aspect ratio)
    w, h = pil_img.size
    if max(w, h) > max_size:
        scale = max_size / max(w, h)
        new_w, new_h = max(1, int(w * scale)), max(1, int(h * scale))
        pil_img = pil_img.resize((new_w, new_h), Image.LANCZOS)
        logger.info(f"Resized logo from {w}x{h} to {new_w}x{new_h}")

    # Step 5: Save as PNG
    buffer = BytesIO()
    pil_img.save(buffer, format="PNG", optimize=True)
    b64 = base64.b64encode(buffer.getvalue()).decode("utf-8")

    return f"data:image/png;base64,{b64}"


def decode_logo(data_url: str) -> bytes:
    """Raw image bytes from a data URL produced by prepare_logo()."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:image/") or ";base64" not in header:
        raise LogoError("Not an image data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise LogoError(f"Invalid logo data: {e}") from e
