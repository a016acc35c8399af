from io import BytesIO
import base64
import binascii
import logging
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

MAX_SIDE = 1024  # longest edge sent to the vision model
JPEG_QUALITY = 85


def split_data_uri(data_uri: str) -> Tuple[str, str]:
    """'data:image/png;base64,AAAA' -> ('image/png', 'AAAA')"""
    if not data_uri.startswith("data:") or "," not in data_uri:
        raise ValueError("Not a base64 data URI")
    header, payload = data_uri.split(",", 1)
    mime = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
    return mime, payload


def base64_to_image(base64_str: str) -> Optional[Image.Image]:
    try:
        if base64_str.startswith("data:"):
            _, base64_str = split_data_uri(base64_str)
        data = base64.b64decode(base64_str, validate=True)
        img = Image.open(BytesIO(data))
        img.load()
        return img
    except (binascii.Error, ValueError, UnidentifiedImageError, OSError) as e:
        logger.warning("Could not decode image: %s", e)
        return None


def resize_to_fit(img: Image.Image, max_side: int = MAX_SIDE) -> Image.Image:
    # thumbnail keeps aspect ratio and never upscales
    img = img.copy()
    img.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
    return img


def prepare_upload(raw: bytes, max_side: int = MAX_SIDE, quality: int = JPEG_QUALITY) -> str:
    """
    Turn uploaded image bytes into a JPEG data URI small enough to send and store.
    Applies the EXIF orientation so phone photos are upright.
    Raises ValueError when the bytes are not an image.
    """
    try:
        with Image.open(BytesIO(raw)) as im:
            img = ImageOps.exif_transpose(im)
            img = resize_to_fit(img, max_side)
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Unsupported image: {e}") from e
    if img.mode != "RGB":
        img = img.convert("RGB")
    buf = BytesIO()
    img.save(buf, format="JPEG", quality=int(quality), optimize=True)
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
