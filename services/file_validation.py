"""File upload validation against static type and size tables.

Every check works on any object exposing ``content_type`` and ``size``
(FastAPI's ``UploadFile`` does, and so does ``FileInfo`` below).
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Dict, Any, List

KB = 1024
MB = 1024 * KB

FILE_SIZE_LIMITS = {
    "document": 2 * MB,  # PDF, Word, Excel
    "image": 500 * KB,  # JPEG, PNG
    "avatar": 250 * KB,
    "default": 2 * MB,
}

ALLOWED_FILE_TYPES = {
    "documents": [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ],
    "images": [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
    ],
    "avatars": [
        "image/jpeg",
        "image/jpg",
        "image/png",
    ],
}

ALLOWED_TYPE_LABELS = {
    "documents": "PDF, Word, Excel",
    "images": "JPEG, PNG, GIF",
    "avatars": "JPEG, PNG",
    "all": "PDF, Word, Excel, JPEG, PNG, GIF",
}

FILE_TYPE_CLASSES = ("document", "image", "avatar", "default")
ALLOWED_TYPE_GROUPS = ("documents", "images", "avatars", "all")

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


@dataclass
class FileInfo:
    filename: str
    content_type: str
    size: int


def _allowed_for(allowed_types: str) -> List[str]:
    if allowed_types in ALLOWED_FILE_TYPES:
        return ALLOWED_FILE_TYPES[allowed_types]
    return ALLOWED_FILE_TYPES["documents"] + ALLOWED_FILE_TYPES["images"]


def get_file_size_limit(mimetype: Optional[str], file_type: str = "default") -> int:
    if file_type in ("avatar", "document", "image"):
        return FILE_SIZE_LIMITS[file_type]
    if mimetype in ALLOWED_FILE_TYPES["images"]:
        return FILE_SIZE_LIMITS["image"]
    if mimetype in ALLOWED_FILE_TYPES["documents"]:
        return FILE_SIZE_LIMITS["document"]
    return FILE_SIZE_LIMITS["default"]


def format_file_size(num_bytes: int) -> str:
    if not num_bytes:
        return "0 Bytes"
    i = 0
    while num_bytes >= 1024 ** (i + 1) and i < len(_SIZE_UNITS) - 1:
        i += 1
    return f"{num_bytes / (1024 ** i):.2f} {_SIZE_UNITS[i]}"


def validate_file_type(file, allowed_types: str = "all") -> bool:
    return file.content_type in _allowed_for(allowed_types)


def validate_file_size(file, file_type: str = "default") -> bool:
    return (file.size or 0) <= get_file_size_limit(file.content_type, file_type)


def get_file_validation_error(file, allowed_types: str = "all", file_type: str = "default") -> Optional[str]:
    """Return the first rule the file violates as a display message, or None."""
    if not validate_file_type(file, allowed_types):
        labels = ALLOWED_TYPE_LABELS.get(allowed_types, ALLOWED_TYPE_LABELS["all"])
        return f"Invalid file type. Allowed types: {labels}"

    if not validate_file_size(file, file_type):
        max_size = get_file_size_limit(file.content_type, file_type)
        return (
            f"File size too large. Current: {format_file_size(file.size or 0)}, "
            f"Maximum: {format_file_size(max_size)}"
        )

    return None


def validate_multiple_files(files: Iterable, allowed_types: str = "all", file_type: str = "default") -> Dict[str, Any]:
    errors = []
    valid_files = []
    for index, file in enumerate(files):
        error = get_file_validation_error(file, allowed_types, file_type)
        if error:
            errors.append({"file": file.filename, "index": index, "error": error})
        else:
            valid_files.append(file)
    return {
        "valid_files": valid_files,
        "errors": errors,
        "is_valid": not errors,
    }


def get_file_type_category(mimetype: str) -> str:
    if mimetype in ALLOWED_FILE_TYPES["documents"]:
        return "document"
    if mimetype in ALLOWED_FILE_TYPES["images"]:
        return "image"
    return "unknown"


def get_file_icon(mimetype: str) -> str:
    mimetype = mimetype or ""
    if mimetype == "application/pdf":
        return "📄"
    if "word" in mimetype:
        return "📝"
    if "excel" in mimetype or "spreadsheet" in mimetype:
        return "📊"
    if mimetype.startswith("image/"):
        return "🖼️"
    return "📁"
