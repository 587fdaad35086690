import logging
from pathlib import Path
from typing import Sequence

from app.core.exceptions import RenderError
from app.services.archive import build_zip
from app.services.converters.base import BaseConverter
from app.services.document_inspector import DocumentInspector
from app.services.interfaces import Rasterizer
from app.services.job import ConversionJob, UploadedFile

logger = logging.getLogger(__name__)


class PdfToImagesConverter(BaseConverter):
    """
    PDF → 페이지 이미지 ZIP 변환기

    1. 페이지 수 확인 (상한 초과시 렌더링 전에 거부)
    2. 외부 렌더러 한 번 실행 (페이지당 이미지 한 장)
    3. 페이지 순서대로 ZIP 압축
    """

    error_class = RenderError

    def __init__(
        self,
        inspector: DocumentInspector,
        rasterizer: Rasterizer,
        default_format: str = "png",
    ):
        self.inspector = inspector
        self.rasterizer = rasterizer
        self.default_format = default_format

    @property
    def output_extension(self) -> str:
        return ".zip"

    @property
    def mode(self) -> str:
        return "pdf-to-images"

    def _convert_sync(
        self,
        job: ConversionJob,
        inputs: Sequence[UploadedFile],
        output_path: Path,
    ) -> None:
        document = inputs[0]
        image_format = job.output_format or self.default_format

        page_count = self.inspector.inspect(document.path)

        pages_dir = job.pages_dir()
        pages = self.rasterizer.rasterize(document.path, image_format, pages_dir / "page")
        if len(pages) != page_count:
            logger.warning(
                f"렌더링된 이미지 수가 페이지 수와 다름 "
                f"(job_id={job.job_id}, pages={page_count}, images={len(pages)})"
            )

        count = build_zip(pages_dir, output_path, entries=pages)
        logger.info(f"ZIP 생성 (job_id={job.job_id}, images={count}, format={image_format})")
