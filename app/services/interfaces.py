from pathlib import Path
from typing import List, Protocol

from app.models import ImageFormat


class PageCountQuery(Protocol):
    def __call__(self, pdf_path: Path) -> str:
        """페이지 수 조회 결과 텍스트 반환 (블로킹 호출, 스레드에서 실행)"""


class Rasterizer(Protocol):
    def rasterize(
        self, pdf_path: Path, image_format: ImageFormat, output_prefix: Path
    ) -> List[Path]:
        """모든 페이지를 '<output_prefix>-<n>.<ext>'로 렌더링하고 페이지 순서의 경로 반환"""
