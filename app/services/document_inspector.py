import logging
import re
from pathlib import Path

from app.core.exceptions import DocumentTooLargeError, InvalidDocumentError
from app.services.interfaces import PageCountQuery
from app.utils.file_validator import validate_file_signature

logger = logging.getLogger(__name__)

PAGES_PATTERN = re.compile(r"^Pages:\s+(\d+)", re.MULTILINE)


def parse_page_count(output: str) -> int:
    """
    페이지 수 조회 출력에서 'Pages: <n>' 파싱

    Raises:
        InvalidDocumentError: 패턴이 없음
    """
    match = PAGES_PATTERN.search(output or "")
    if match is None:
        raise InvalidDocumentError()
    return int(match.group(1))


class DocumentInspector:
    """업로드된 PDF의 유효성과 페이지 수 확인 (전체 디코딩 없음)"""

    def __init__(self, query: PageCountQuery, max_pages: int = 25):
        self._query = query
        self.max_pages = max_pages

    def inspect(self, pdf_path: Path) -> int:
        """
        페이지 수 반환

        Raises:
            InvalidDocumentError: PDF가 아니거나 페이지 수를 읽을 수 없음
            DocumentTooLargeError: 페이지 수 상한 초과
        """
        if not validate_file_signature(pdf_path, "pdf"):
            raise InvalidDocumentError()

        page_count = parse_page_count(self._query(pdf_path))

        if page_count > self.max_pages:
            logger.info(f"페이지 수 초과: {page_count} > {self.max_pages}")
            raise DocumentTooLargeError(self.max_pages)

        return page_count
