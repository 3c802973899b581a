from io import BytesIO
from PIL import Image, UnidentifiedImageError

# Pillow format name -> MIME types a client may declare for it
DECLARED_TYPES = {
    "JPEG": {"image/jpeg", "image/jpg"},
    "PNG": {"image/png"},
}


def is_valid_avatar_image(content: bytes, declared_type: str) -> bool:
    """True when ``content`` decodes as a JPEG/PNG matching the declared MIME type."""
    try:
        with Image.open(BytesIO(content)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        return False
    return declared_type in DECLARED_TYPES.get(fmt, set())
