from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile

from app.api.deps import ImagesToPdfDep, PdfToImagesDep, SettingsDep, WorkspaceDep
from app.core.exceptions import InvalidFormatError, NoInputError, UnsupportedTypeError
from app.models import PDF_CONTENT_TYPE, ErrorResponse, ImageFormat
from app.services import select_images

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

_FORMAT_ALIASES: dict[str, ImageFormat] = {
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "png": "png",
}


def _resolve_format(value: Optional[str], default: ImageFormat) -> ImageFormat:
    """클라이언트 포맷 선택값 (jpg|png) 정규화"""
    if value is None or not value.strip():
        return default
    image_format = _FORMAT_ALIASES.get(value.strip().lower())
    if image_format is None:
        raise InvalidFormatError()
    return image_format


@router.post("/image-to-pdf", responses=_ERROR_RESPONSES)
async def image_to_pdf(
    settings: SettingsDep,
    workspace: WorkspaceDep,
    converter: ImagesToPdfDep,
    images: Optional[List[UploadFile]] = File(None, description="PDF로 합칠 이미지 (JPEG/PNG)"),
):
    """
    이미지 → PDF 변환 API

    - **images**: 이미지 파일 (최대 20개, 파일명 순서가 페이지 순서)

    JPEG/PNG가 아닌 파일은 건너뜁니다. 결과는 `images.pdf`로 다운로드됩니다.
    """
    async with workspace.open_job("images-to-pdf") as job:
        workspace.start(job)

        staged = await workspace.file_manager.save_uploads_batch(
            job,
            images or [],
            max_files=settings.MAX_IMAGE_FILES,
            max_size=settings.MAX_FILE_SIZE_BYTES,
        )
        selected = select_images(staged)

        output_path = await converter.convert(job, selected)

        return workspace.respond(
            job, output_path, filename="images.pdf", media_type="application/pdf"
        )


@router.post("/pdf-to-image", responses=_ERROR_RESPONSES)
async def pdf_to_image(
    settings: SettingsDep,
    workspace: WorkspaceDep,
    converter: PdfToImagesDep,
    pdf: Optional[UploadFile] = File(None, description="변환할 PDF 파일"),
    image_format: Optional[str] = Form(None, alias="format", description="jpg 또는 png"),
):
    """
    PDF → 이미지 ZIP 변환 API

    - **pdf**: PDF 파일 (최대 25페이지)
    - **format**: 출력 이미지 포맷 (`jpg` | `png`, 기본 png)

    페이지마다 이미지 한 장이 `images.zip`에 담겨 다운로드됩니다.
    """
    # 스테이징 전에 거부
    if pdf is None:
        raise NoInputError("No file uploaded")

    content_type = (pdf.content_type or "").split(";")[0].strip().lower()
    if content_type != PDF_CONTENT_TYPE:
        raise UnsupportedTypeError("Only PDF files allowed")

    output_format = _resolve_format(image_format, settings.DEFAULT_IMAGE_FORMAT)

    async with workspace.open_job("pdf-to-images") as job:
        job.output_format = output_format
        workspace.start(job)

        staged = await workspace.file_manager.save_upload(
            job, pdf, index=0, max_size=settings.MAX_FILE_SIZE_BYTES
        )

        output_path = await converter.convert(job, [staged])

        return workspace.respond(
            job, output_path, filename="images.zip", media_type="application/zip"
        )
