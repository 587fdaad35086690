import io
import logging
import math
from pathlib import Path
from typing import List, Sequence, Tuple

import img2pdf
from pypdf import PdfReader, PdfWriter

from app.core.exceptions import AssemblyError
from app.models import IMAGE_CONTENT_TYPES, ImageFormat
from app.services.converters.base import BaseConverter
from app.services.job import ConversionJob, UploadedFile
from app.utils.file_validator import detect_image_format

logger = logging.getLogger(__name__)

# img2pdf가 거부하는 최소 페이지 크기 (pt)
_MIN_PAGE_POINTS = 3


def _upscale_factor(width_px: int, height_px: int) -> int:
    """최소 페이지 크기를 넘기 위한 정수 배율 (대부분 1)"""
    return max(1, math.ceil(_MIN_PAGE_POINTS / min(width_px, height_px)))


def _pixel_sized_layout(factors: List[int]):
    """
    W×H 픽셀 이미지 → W×H pt 페이지 레이아웃 (DPI 메타데이터 무시)

    최소 크기보다 작은 이미지는 배율을 곱해 배치하고 factors에 페이지 순서대로 기록한다.
    """
    def layout_fun(imgwidthpx, imgheightpx, ndpi):
        factor = _upscale_factor(imgwidthpx, imgheightpx)
        factors.append(factor)
        width, height = imgwidthpx * factor, imgheightpx * factor
        return width, height, width, height

    return layout_fun


def _shrink_pages(pdf: bytes, factors: Sequence[int]) -> bytes:
    """확대 배치한 페이지를 픽셀 크기로 되돌림"""
    reader = PdfReader(io.BytesIO(pdf))
    writer = PdfWriter()
    for page, factor in zip(reader.pages, factors):
        if factor > 1:
            page.scale_by(1 / factor)
        writer.add_page(page)

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _empty_pdf() -> bytes:
    """페이지 없는 PDF (img2pdf는 빈 입력을 거부함)"""
    buffer = io.BytesIO()
    PdfWriter().write(buffer)
    return buffer.getvalue()


def assemble_pdf(images: Sequence[Tuple[bytes, ImageFormat]]) -> bytes:
    """
    이미지마다 한 페이지인 PDF 생성

    페이지 크기는 이미지 픽셀 크기와 같고, 이미지는 (0,0)부터 페이지 전체를 채운다.
    JPEG은 재압축 없이 그대로 삽입된다.

    Args:
        images: 페이지 순서의 (이미지 바이트, 선언된 포맷)

    Returns:
        PDF 바이트

    Raises:
        AssemblyError: 이미지 하나라도 디코딩 실패 (부분 문서 없음)
    """
    if not images:
        return _empty_pdf()

    for page_number, (data, declared) in enumerate(images, start=1):
        actual = detect_image_format(data)
        if actual != declared:
            logger.warning(
                f"{page_number}번째 이미지 형식 불일치: 선언={declared}, 실제={actual}"
            )
            raise AssemblyError()

    factors: List[int] = []
    try:
        # EXIF 방향 태그는 무시 (/Rotate 없이 저장된 픽셀 그대로)
        pdf = img2pdf.convert(
            [data for data, _ in images],
            layout_fun=_pixel_sized_layout(factors),
            rotation=img2pdf.Rotation.none,
        )
        if any(factor > 1 for factor in factors):
            pdf = _shrink_pages(pdf, factors)
        return pdf
    except Exception as e:
        raise AssemblyError() from e


class ImagesToPdfConverter(BaseConverter):
    """이미지(JPEG/PNG) → PDF 변환기 (img2pdf, 프로세스 내 처리)"""

    error_class = AssemblyError

    @property
    def output_extension(self) -> str:
        return ".pdf"

    @property
    def mode(self) -> str:
        return "images-to-pdf"

    def _convert_sync(
        self,
        job: ConversionJob,
        inputs: Sequence[UploadedFile],
        output_path: Path,
    ) -> None:
        images = [
            (uploaded.path.read_bytes(), IMAGE_CONTENT_TYPES[uploaded.content_type])
            for uploaded in inputs
        ]
        pdf_bytes = assemble_pdf(images)
        output_path.write_bytes(pdf_bytes)

        logger.info(f"PDF 생성 (job_id={job.job_id}, pages={len(images)})")
