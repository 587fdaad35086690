from app.utils.file_validator import (
    detect_image_format,
    get_extension,
    has_signature,
    validate_file_signature,
)

__all__ = [
    "detect_image_format",
    "get_extension",
    "has_signature",
    "validate_file_signature",
]
