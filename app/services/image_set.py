import logging
from typing import List, Sequence

from app.core.exceptions import NoInputError
from app.models import IMAGE_CONTENT_TYPES
from app.services.job import UploadedFile

logger = logging.getLogger(__name__)


def select_images(files: Sequence[UploadedFile]) -> List[UploadedFile]:
    """
    PDF로 합칠 이미지 선택 및 정렬

    - JPEG/PNG가 아닌 파일은 작업 실패 없이 건너뜀
    - 원본 파일명의 코드포인트 순서로 정렬 (로케일 무관), 이 순서가 페이지 순서

    Args:
        files: 스테이징된 업로드 파일

    Returns:
        정렬된 이미지 목록 (비어 있을 수 있음)

    Raises:
        NoInputError: 업로드된 파일이 없음
    """
    if not files:
        raise NoInputError("No images uploaded")

    accepted = []
    for uploaded in files:
        if uploaded.content_type not in IMAGE_CONTENT_TYPES:
            logger.info(
                f"지원하지 않는 이미지 건너뜀: {uploaded.original_name!r} "
                f"({uploaded.content_type})"
            )
            continue
        accepted.append(uploaded)

    return sorted(accepted, key=lambda uploaded: uploaded.original_name)
