import re
import zipfile
from pathlib import Path
from typing import Optional, Sequence

from app.core.exceptions import ArchiveError

_PAGE_NUMBER_RE = re.compile(r"-(\d+)$")


def page_sort_key(path: Path) -> tuple:
    """'page-2.png' < 'page-10.png' 순서가 되도록 페이지 번호로 정렬"""
    match = _PAGE_NUMBER_RE.search(path.stem)
    if match is None:
        return (1, 0, path.name)
    return (0, int(match.group(1)), path.name)


def list_page_files(directory: Path) -> list[Path]:
    """디렉토리 안의 파일을 페이지 순서로 반환"""
    return sorted((p for p in directory.iterdir() if p.is_file()), key=page_sort_key)


def build_zip(
    source_dir: Path,
    zip_path: Path,
    entries: Optional[Sequence[Path]] = None,
) -> int:
    """
    디렉토리의 이미지 파일을 ZIP으로 압축 (디렉토리 구조 없이 루트에 저장)

    Args:
        source_dir: 이미지 디렉토리
        zip_path: 출력 ZIP 경로 (파일에 바로 기록)
        entries: 압축할 파일 순서, None이면 페이지 순서로 나열

    Returns:
        압축된 파일 수

    Raises:
        ArchiveError: 읽기/쓰기 실패
    """
    count = 0
    try:
        if entries is None:
            entries = list_page_files(source_dir)

        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for file_path in entries:
                zf.write(file_path, arcname=file_path.name)
                count += 1
    except (OSError, ValueError, zipfile.LargeZipFile) as e:
        raise ArchiveError() from e

    return count
