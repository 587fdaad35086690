from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.services import (
    DocumentInspector,
    JobWorkspaceManager,
    PdfInfoQuery,
    PdftocairoRasterizer,
)
from app.services.converters import ImagesToPdfConverter, PdfToImagesConverter


@lru_cache
def get_workspace_manager() -> JobWorkspaceManager:
    """작업 워크스페이스 관리자 (스테이징 루트는 설정에서 주입)"""
    settings = get_settings()
    return JobWorkspaceManager(
        upload_dir=settings.UPLOAD_DIR,
        output_dir=settings.OUTPUT_DIR,
        stale_after_minutes=settings.STALE_ARTIFACT_MINUTES,
    )


@lru_cache
def get_images_to_pdf_converter() -> ImagesToPdfConverter:
    return ImagesToPdfConverter()


@lru_cache
def get_pdf_to_images_converter() -> PdfToImagesConverter:
    settings = get_settings()
    inspector = DocumentInspector(
        PdfInfoQuery(settings.PDFINFO_PATH, timeout=settings.PDFINFO_TIMEOUT_SECONDS),
        max_pages=settings.MAX_PDF_PAGES,
    )
    rasterizer = PdftocairoRasterizer(
        settings.PDFTOCAIRO_PATH, timeout=settings.RENDER_TIMEOUT_SECONDS
    )
    return PdfToImagesConverter(
        inspector, rasterizer, default_format=settings.DEFAULT_IMAGE_FORMAT
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]
WorkspaceDep = Annotated[JobWorkspaceManager, Depends(get_workspace_manager)]
ImagesToPdfDep = Annotated[ImagesToPdfConverter, Depends(get_images_to_pdf_converter)]
PdfToImagesDep = Annotated[PdfToImagesConverter, Depends(get_pdf_to_images_converter)]
