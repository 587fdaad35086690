from app.models.types import (
    IMAGE_CONTENT_TYPES,
    PDF_CONTENT_TYPE,
    ConversionMode,
    ImageFormat,
    JobStatus,
)
from app.models.response import ErrorResponse, HealthResponse

__all__ = [
    "ConversionMode",
    "ImageFormat",
    "JobStatus",
    "IMAGE_CONTENT_TYPES",
    "PDF_CONTENT_TYPE",
    "ErrorResponse",
    "HealthResponse",
]
