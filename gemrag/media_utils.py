import io
import base64
import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

from .config import settings
from .exceptions import ImageDecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedImage:
    data: bytes
    mime_type: str
    width: int
    height: int
    preview_data_uri: str


def create_preview(img: Image.Image, preview_size: Optional[Tuple[int, int]] = None) -> str:
    """Downscale to a JPEG thumbnail and return it as a data URI."""
    if preview_size is None:
        preview_size = settings.PREVIEW_SIZE
    preview = img.copy()
    if preview.mode in ('RGBA', 'LA', 'P'):
        preview = preview.convert('RGB')
    preview.thumbnail(preview_size, Image.Resampling.LANCZOS)
    buf = io.BytesIO()
    preview.save(buf, format='JPEG', quality=85, optimize=True)
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):g}MB"
    if size >= 1024:
        return f"{size / 1024:g}KB"
    return f"{size} bytes"


def decode_image(data: bytes, max_size: Optional[int] = None) -> DecodedImage:
    if max_size is None:
        max_size = settings.MAX_FILE_SIZE
    if not data:
        raise ImageDecodeError("Image is empty")
    if len(data) > max_size:
        raise ImageDecodeError(f"Image too large (max {format_size(max_size)})")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            mime_type = Image.MIME.get(img.format or "", "image/jpeg")
            width, height = img.size
            preview = create_preview(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Failed to decode image ({len(data)} bytes): {e}")
        raise ImageDecodeError("Could not decode the selected image") from e
    return DecodedImage(
        data=data,
        mime_type=mime_type,
        width=width,
        height=height,
        preview_data_uri=preview,
    )
