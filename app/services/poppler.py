"""poppler 명령줄 도구 어댑터 (pdfinfo, pdftocairo)

외부 프로세스에는 항상 인자 리스트를 넘긴다 (shell 사용 안 함).
경로는 절대 경로로 넘겨 '-'로 시작하는 이름이 옵션으로 해석되지 않게 한다.
"""

import logging
import subprocess
from pathlib import Path
from typing import List

from app.core.exceptions import InvalidDocumentError, RenderError
from app.models import ImageFormat
from app.services.archive import page_sort_key

logger = logging.getLogger(__name__)

# 포맷별 (pdftocairo 플래그, 출력 확장자)
FORMAT_FLAGS = {
    "jpeg": ("-jpeg", ".jpg"),
    "png": ("-png", ".png"),
}


def _run(args: List[str], timeout: float) -> subprocess.CompletedProcess:
    return subprocess.run(
        args,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        check=False,
    )


class PdfInfoQuery:
    """pdfinfo로 페이지 수 조회 (PageCountQuery 구현)"""

    def __init__(self, executable: str = "pdfinfo", timeout: float = 15):
        self.executable = executable
        self.timeout = timeout

    def __call__(self, pdf_path: Path) -> str:
        args = [self.executable, str(pdf_path.resolve())]

        try:
            result = _run(args, self.timeout)
        except subprocess.TimeoutExpired as e:
            logger.warning(f"pdfinfo 시간 초과 ({self.timeout}s)")
            raise InvalidDocumentError() from e
        except OSError as e:
            logger.error(f"pdfinfo 실행 불가: {e}")
            raise RenderError() from e

        if result.returncode != 0:
            logger.info(f"pdfinfo 실패 (exit={result.returncode}): {result.stderr.strip()}")
            raise InvalidDocumentError()

        return result.stdout


class PdftocairoRasterizer:
    """pdftocairo로 전체 페이지를 한 번에 이미지로 변환 (Rasterizer 구현)"""

    def __init__(self, executable: str = "pdftocairo", timeout: float = 120):
        self.executable = executable
        self.timeout = timeout

    def build_args(
        self, pdf_path: Path, image_format: ImageFormat, output_prefix: Path
    ) -> List[str]:
        flag, _ = FORMAT_FLAGS[image_format]
        return [
            self.executable,
            flag,
            str(pdf_path.resolve()),
            str(output_prefix.resolve()),
        ]

    def rasterize(
        self, pdf_path: Path, image_format: ImageFormat, output_prefix: Path
    ) -> List[Path]:
        """
        PDF 전체 페이지 래스터화

        pdftocairo는 '<prefix>-<n>.<ext>' 파일을 만든다
        (페이지 수에 따라 번호가 0으로 채워질 수 있음).

        Returns:
            페이지 순서의 이미지 경로 목록

        Raises:
            RenderError: 실행 실패, 시간 초과, 비정상 종료
        """
        _, extension = FORMAT_FLAGS[image_format]
        args = self.build_args(pdf_path, image_format, output_prefix)

        try:
            result = _run(args, self.timeout)
        except subprocess.TimeoutExpired as e:
            logger.error(f"pdftocairo 시간 초과 ({self.timeout}s)")
            raise RenderError() from e
        except OSError as e:
            logger.error(f"pdftocairo 실행 불가: {e}")
            raise RenderError() from e

        if result.returncode != 0:
            logger.error(
                f"pdftocairo 실패 (exit={result.returncode}): {result.stderr.strip()}"
            )
            raise RenderError()

        pattern = f"{output_prefix.name}-*{extension}"
        return sorted(output_prefix.parent.glob(pattern), key=page_sort_key)
