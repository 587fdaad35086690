from app.services.converters.base import BaseConverter
from app.services.converters.images_to_pdf import ImagesToPdfConverter, assemble_pdf
from app.services.converters.pdf_to_images import PdfToImagesConverter

__all__ = [
    "BaseConverter",
    "ImagesToPdfConverter",
    "PdfToImagesConverter",
    "assemble_pdf",
]
