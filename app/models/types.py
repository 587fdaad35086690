"""공용 타입 정의"""

from typing import Literal

ConversionMode = Literal["images-to-pdf", "pdf-to-images"]
JobStatus = Literal["created", "in_progress", "completed", "failed", "cleaned"]
ImageFormat = Literal["jpeg", "png"]

# 허용되는 업로드 content type
IMAGE_CONTENT_TYPES: dict[str, ImageFormat] = {
    "image/jpeg": "jpeg",
    "image/png": "png",
}
PDF_CONTENT_TYPE = "application/pdf"
